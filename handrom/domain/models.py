from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from handrom.domain.enums import (
    DataQualityIssue,
    Finger,
    HandType,
    HAND_LANDMARK_COUNT,
    POSE_LANDMARK_COUNT,
)

logger = logging.getLogger(__name__)

# Type aliases
Issues = Tuple[DataQualityIssue, ...]
LandmarkLike = Any   # Landmark, {"x","y","z","visibility"} or [x, y, z(, v)]


def merge_issues(*groups: Iterable[DataQualityIssue]) -> Issues:
    """Union of issue collections, in declaration order."""
    found = set()
    for group in groups:
        found.update(group)
    return tuple(issue for issue in DataQualityIssue if issue in found)


@dataclass(frozen=True)
class Landmark:
    """A single tracked point in camera-normalised coordinates."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @property
    def xyz(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def is_visible(self, threshold: float) -> bool:
        """Landmarks without a visibility score are treated as visible."""
        return self.visibility is None or self.visibility >= threshold

    @classmethod
    def from_dict(cls, data: LandmarkLike) -> "Landmark":
        if isinstance(data, Landmark):
            return data
        if isinstance(data, Mapping):
            visibility = data.get("visibility")
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                z=float(data.get("z", 0.0)),
                visibility=None if visibility is None else float(visibility),
            )
        if isinstance(data, (list, tuple)) and len(data) >= 3:
            visibility = data[3] if len(data) > 3 else None
            return cls(
                float(data[0]), float(data[1]), float(data[2]),
                None if visibility is None else float(visibility),
            )
        raise ValueError(f"Unsupported landmark format: {data!r}")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"x": self.x, "y": self.y, "z": self.z}
        if self.visibility is not None:
            out["visibility"] = self.visibility
        return out


def _landmark_tuple(
    landmarks: Iterable[Optional[LandmarkLike]], expected: int, kind: str
) -> Tuple[Optional[Landmark], ...]:
    items = tuple(None if lm is None else Landmark.from_dict(lm) for lm in landmarks)
    if len(items) != expected:
        raise ValueError(f"{kind} must contain exactly {expected} landmarks, got {len(items)}")
    return items


def _fit_landmarks(raw: Sequence[Optional[LandmarkLike]], expected: int,
                   kind: str) -> List[Optional[LandmarkLike]]:
    """
    Pad a short detector array with empty slots (or cut a long one) so a
    single truncated frame only loses the indices it does not carry.
    """
    items = list(raw)
    if len(items) != expected:
        logger.debug("[FRAME] %s has %d landmarks, expected %d", kind, len(items), expected)
    return (items + [None] * expected)[:expected]


@dataclass(frozen=True)
class _SkeletonFrame:
    """Fixed-size, indexed landmark collection. Slots may be None (not tracked)."""
    landmarks: Tuple[Optional[Landmark], ...]

    def __getitem__(self, index: int) -> Optional[Landmark]:
        return self.landmarks[int(index)]

    def __len__(self) -> int:
        return len(self.landmarks)

    def get(self, *indices: int) -> Optional[List[Landmark]]:
        """
        Return the requested landmarks, or None when any of them is absent.
        """
        found = [self.landmarks[int(i)] for i in indices]
        if any(lm is None for lm in found):
            return None
        return found  # type: ignore[return-value]

    def to_list(self) -> List[Optional[Dict[str, Any]]]:
        return [None if lm is None else lm.to_dict() for lm in self.landmarks]


@dataclass(frozen=True)
class HandFrame(_SkeletonFrame):
    """
    Exactly 21 hand landmarks indexed by HandLandmark:
    0 wrist, 1-4 thumb (CMC→tip), then index/middle/ring/pinky (MCP→tip).
    """

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "landmarks", _landmark_tuple(self.landmarks, HAND_LANDMARK_COUNT, "HandFrame")
        )

    @classmethod
    def from_list(cls, landmarks: Sequence[Optional[LandmarkLike]]) -> "HandFrame":
        return cls(tuple(landmarks))

    def mirrored(self) -> "HandFrame":
        """Reflect across the vertical image axis (x → 1 - x)."""
        return HandFrame(tuple(
            None if lm is None else Landmark(1.0 - lm.x, lm.y, lm.z, lm.visibility)
            for lm in self.landmarks
        ))


@dataclass(frozen=True)
class PoseFrame(_SkeletonFrame):
    """Exactly 33 body-pose landmarks; only shoulders, elbows and wrists are read."""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "landmarks", _landmark_tuple(self.landmarks, POSE_LANDMARK_COUNT, "PoseFrame")
        )

    @classmethod
    def from_list(cls, landmarks: Sequence[Optional[LandmarkLike]]) -> "PoseFrame":
        return cls(tuple(landmarks))


@dataclass(frozen=True)
class CapturedFrame:
    """
    One capture tick as produced by the landmark detector.
    Consumed read-only by the engine.
    """
    timestamp: float
    hand: Optional[HandFrame] = None
    pose: Optional[PoseFrame] = None
    detection_quality: float = 1.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CapturedFrame":
        hand_raw = data.get("handLandmarks", data.get("landmarks", data.get("hand")))
        pose_raw = data.get("poseLandmarks", data.get("pose"))
        return cls(
            timestamp=float(data.get("timestamp", 0.0)),
            hand=HandFrame.from_list(
                _fit_landmarks(hand_raw, HAND_LANDMARK_COUNT, "hand")
            ) if hand_raw else None,
            pose=PoseFrame.from_list(
                _fit_landmarks(pose_raw, POSE_LANDMARK_COUNT, "pose")
            ) if pose_raw else None,
            detection_quality=float(data.get("detectionQuality", data.get("quality", 1.0))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "handLandmarks": self.hand.to_list() if self.hand else None,
            "poseLandmarks": self.pose.to_list() if self.pose else None,
            "detectionQuality": self.detection_quality,
        }


@dataclass(frozen=True)
class Repetition:
    """One motion cycle: capture-ordered frames plus its duration."""
    frames: Tuple[CapturedFrame, ...]
    duration_ms: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "frames", tuple(sorted(self.frames, key=lambda f: f.timestamp))
        )

    def __len__(self) -> int:
        return len(self.frames)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Repetition":
        raw_frames = data.get("frames", data.get("motionData", []))
        frames = tuple(CapturedFrame.from_dict(f) for f in raw_frames)
        duration = data.get("durationMs", data.get("duration"))
        if duration is None:
            stamps = [f.timestamp for f in frames]
            duration = (max(stamps) - min(stamps)) if stamps else 0.0
        return cls(frames=frames, duration_ms=float(duration))


# =========================
# FRAME-LEVEL RESULTS
# =========================

@dataclass(frozen=True)
class JointAngles:
    """Flexion angles of one finger in one frame (0° = fully extended)."""
    mcp_angle: float
    pip_angle: float
    dip_angle: float
    total_active_rom: float
    issues: Issues = ()

    @property
    def low_confidence(self) -> bool:
        return DataQualityIssue.DEGENERATE_VECTOR in self.issues

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mcpAngle": self.mcp_angle,
            "pipAngle": self.pip_angle,
            "dipAngle": self.dip_angle,
            "totalActiveRom": self.total_active_rom,
        }


@dataclass(frozen=True)
class KapandjiResult:
    """Opposition score of a frame or a whole session."""
    max_score: int
    reached_levels: Tuple[bool, ...] = (False,) * 10

    def to_dict(self) -> Dict[str, Any]:
        return {"maxScore": self.max_score, "reachedLevels": list(self.reached_levels)}


@dataclass(frozen=True)
class WristAngleResult:
    """
    Wrist flexion/extension for one frame.

    flexion_angle / extension_angle are None when handedness is unresolved:
    the bend magnitude is known but its direction is not.
    """
    deflection_angle: float
    flexion_angle: Optional[float]
    extension_angle: Optional[float]
    hand_type: HandType
    confidence: float
    issues: Issues = ()

    @property
    def low_confidence(self) -> bool:
        return DataQualityIssue.DEGENERATE_VECTOR in self.issues

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deflectionAngle": self.deflection_angle,
            "flexionAngle": self.flexion_angle,
            "extensionAngle": self.extension_angle,
            "handType": self.hand_type.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class DeviationResult:
    """
    Signed radial/ulnar deviation for one frame (positive = radial).
    deviation_angle is None when the sign cannot be established.
    """
    magnitude: float
    deviation_angle: Optional[float]
    confidence: float
    issues: Issues = ()

    @property
    def radial_angle(self) -> Optional[float]:
        if self.deviation_angle is None:
            return None
        return max(0.0, self.deviation_angle)

    @property
    def ulnar_angle(self) -> Optional[float]:
        if self.deviation_angle is None:
            return None
        return max(0.0, -self.deviation_angle)

    @property
    def low_confidence(self) -> bool:
        return DataQualityIssue.DEGENERATE_VECTOR in self.issues


# =========================
# SESSION-LEVEL RESULTS
# =========================

@dataclass(frozen=True)
class FingerSummary:
    """
    Representative ROM of one finger across a session.
    max_rom is None when no repetition passed temporal validation.
    """
    finger: Finger
    max_rom: Optional[float]
    joint_angles: Optional[JointAngles]
    max_frame_index: Optional[int]
    min_frame_index: Optional[int]
    temporal_quality: Dict[int, float] = field(default_factory=dict)
    accepted_repetitions: Tuple[int, ...] = ()
    issues: Issues = ()


@dataclass(frozen=True)
class TamSessionResult:
    fingers: Dict[Finger, FingerSummary]

    def rom(self, finger: Finger) -> Optional[float]:
        return self.fingers[finger].max_rom

    @property
    def index_rom(self) -> Optional[float]:
        return self.rom(Finger.INDEX)

    @property
    def middle_rom(self) -> Optional[float]:
        return self.rom(Finger.MIDDLE)

    @property
    def ring_rom(self) -> Optional[float]:
        return self.rom(Finger.RING)

    @property
    def pinky_rom(self) -> Optional[float]:
        return self.rom(Finger.PINKY)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "indexRom": self.index_rom,
            "middleRom": self.middle_rom,
            "ringRom": self.ring_rom,
            "pinkyRom": self.pinky_rom,
            "perJointAngles": {
                f.value.lower(): (s.joint_angles.to_dict() if s.joint_angles else None)
                for f, s in self.fingers.items()
            },
            "temporalQuality": {
                f.value.lower(): s.temporal_quality for f, s in self.fingers.items()
            },
            "frameIndices": {
                f.value.lower(): {"max": s.max_frame_index, "min": s.min_frame_index}
                for f, s in self.fingers.items()
            },
            "issues": {
                f.value.lower(): [i.value for i in s.issues] for f, s in self.fingers.items()
            },
        }


@dataclass(frozen=True)
class KapandjiSessionResult:
    max_score: int
    reached_levels: Tuple[bool, ...]
    best_frame_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxScore": self.max_score,
            "reachedLevels": list(self.reached_levels),
            "bestFrameIndex": self.best_frame_index,
        }


@dataclass(frozen=True)
class WristSessionResult:
    """Max flexion and max extension are independent maxima (possibly different frames)."""
    max_flexion: Optional[float]
    max_extension: Optional[float]
    hand_type: HandType
    average_confidence: float
    frame_count: int
    max_flexion_frame: Optional[int] = None
    max_extension_frame: Optional[int] = None
    issues: Issues = ()

    @property
    def total_rom(self) -> Optional[float]:
        if self.max_flexion is None or self.max_extension is None:
            return None
        return self.max_flexion + self.max_extension

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxFlexion": self.max_flexion,
            "maxExtension": self.max_extension,
            "totalRom": self.total_rom,
            "handType": self.hand_type.value,
            "averageConfidence": self.average_confidence,
            "frameCount": self.frame_count,
            "maxFlexionFrame": self.max_flexion_frame,
            "maxExtensionFrame": self.max_extension_frame,
            "issues": [i.value for i in self.issues],
        }


@dataclass(frozen=True)
class DeviationSessionResult:
    max_radial: Optional[float]
    max_ulnar: Optional[float]
    hand_type: HandType
    average_confidence: float
    frame_count: int
    reproducible: bool = True
    issues: Issues = ()

    @property
    def total_rom(self) -> Optional[float]:
        if self.max_radial is None or self.max_ulnar is None:
            return None
        return self.max_radial + self.max_ulnar

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxRadial": self.max_radial,
            "maxUlnar": self.max_ulnar,
            "totalRom": self.total_rom,
            "handType": self.hand_type.value,
            "averageConfidence": self.average_confidence,
            "frameCount": self.frame_count,
            "reproducible": self.reproducible,
            "issues": [i.value for i in self.issues],
        }
