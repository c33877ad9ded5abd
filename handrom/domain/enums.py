from enum import Enum, IntEnum


class HandType(str, Enum):
    """Which hand is being tracked during a recording session."""
    LEFT    = "LEFT"
    RIGHT   = "RIGHT"
    UNKNOWN = "UNKNOWN"


class Finger(str, Enum):
    """Long fingers scored by the TAM calculator."""
    INDEX  = "INDEX"
    MIDDLE = "MIDDLE"
    RING   = "RING"
    PINKY  = "PINKY"


class Joint(str, Enum):
    MCP = "MCP"
    PIP = "PIP"
    DIP = "DIP"


class AssessmentType(str, Enum):
    """Assessment protocols the engine knows how to score."""
    TAM             = "TAM"
    KAPANDJI        = "KAPANDJI"
    WRIST_FLEXION   = "WRIST_FLEXION"
    WRIST_DEVIATION = "WRIST_DEVIATION"


class DataQualityIssue(str, Enum):
    """Recoverable data-quality conditions recorded on results."""
    MISSING_LANDMARK         = "MISSING_LANDMARK"
    DEGENERATE_VECTOR        = "DEGENERATE_VECTOR"
    UNRESOLVED_HANDEDNESS    = "UNRESOLVED_HANDEDNESS"
    TEMPORAL_INCONSISTENCY   = "TEMPORAL_INCONSISTENCY"
    LOW_VISIBILITY           = "LOW_VISIBILITY"


class HandLandmark(IntEnum):
    """21-point hand skeleton, knuckle-to-tip per finger."""
    WRIST      = 0
    THUMB_CMC  = 1
    THUMB_MCP  = 2
    THUMB_IP   = 3
    THUMB_TIP  = 4
    INDEX_MCP  = 5
    INDEX_PIP  = 6
    INDEX_DIP  = 7
    INDEX_TIP  = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP   = 13
    RING_PIP   = 14
    RING_DIP   = 15
    RING_TIP   = 16
    PINKY_MCP  = 17
    PINKY_PIP  = 18
    PINKY_DIP  = 19
    PINKY_TIP  = 20


class PoseLandmark(IntEnum):
    """Upper-body subset of the 33-point pose skeleton consumed here."""
    LEFT_SHOULDER  = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW     = 13
    RIGHT_ELBOW    = 14
    LEFT_WRIST     = 15
    RIGHT_WRIST    = 16


HAND_LANDMARK_COUNT = 21
POSE_LANDMARK_COUNT = 33
