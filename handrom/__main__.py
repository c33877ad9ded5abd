import sys

from handrom.app.main import main

sys.exit(main())
