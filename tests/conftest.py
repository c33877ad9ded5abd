import pytest

from handrom.config import AssessmentConfig
from handrom.core.session import SessionContext
from handrom.domain.enums import HandType


@pytest.fixture
def config():
    return AssessmentConfig()


@pytest.fixture
def context(config):
    return SessionContext(config)


@pytest.fixture
def right_context(config):
    return SessionContext(config, hand_type=HandType.RIGHT)
