"""Synthetic landmark frames with known geometry."""
import math

from handrom.domain.enums import Finger, HandLandmark as H, HandType, PoseLandmark as P
from handrom.domain.models import CapturedFrame, HandFrame, Landmark, PoseFrame, Repetition

WRIST = (0.5, 0.8, 0.0)

# finger heading in the image plane (degrees, -90 points up)
HEADINGS = {
    Finger.INDEX:  -75.0,
    Finger.MIDDLE: -88.0,
    Finger.RING:   -100.0,
    Finger.PINKY:  -112.0,
}
FIRST_LANDMARK = {
    Finger.INDEX:  H.INDEX_MCP,
    Finger.MIDDLE: H.MIDDLE_MCP,
    Finger.RING:   H.RING_MCP,
    Finger.PINKY:  H.PINKY_MCP,
}
# wrist→MCP, MCP→PIP, PIP→DIP, DIP→tip
BONES = (0.2, 0.08, 0.06, 0.05)
THUMB_BONES = (0.06, 0.06, 0.05, 0.04)
THUMB_HEADING = -20.0


def _step(point, heading, length):
    rad = math.radians(heading)
    return (point[0] + length * math.cos(rad), point[1] + length * math.sin(rad), point[2])


def build_hand(flexion=None, wrist=WRIST, visibility=None):
    """
    Planar hand. flexion maps Finger -> (mcp, pip, dip) degrees; each bend
    rotates the following bone, so the measured joint angles are exact.
    """
    flexion = flexion or {}
    points = [None] * 21
    points[H.WRIST] = wrist

    p = wrist
    for index, length in zip((H.THUMB_CMC, H.THUMB_MCP, H.THUMB_IP, H.THUMB_TIP), THUMB_BONES):
        p = _step(p, THUMB_HEADING, length)
        points[index] = p

    for finger, heading in HEADINGS.items():
        bends = (0.0,) + tuple(flexion.get(finger, (0.0, 0.0, 0.0)))
        p, h = wrist, heading
        for offset, (length, bend) in enumerate(zip(BONES, bends)):
            h += bend
            p = _step(p, h, length)
            points[FIRST_LANDMARK[finger] + offset] = p

    return HandFrame.from_list([Landmark(x, y, z, visibility) for x, y, z in points])


def with_landmark(hand, index, point):
    """Copy of hand with one landmark moved (or removed when point is None)."""
    landmarks = list(hand.landmarks)
    landmarks[int(index)] = None if point is None else Landmark(*point)
    return HandFrame.from_list(landmarks)


def build_pose(points):
    """points maps PoseLandmark -> (x, y, z) or (x, y, z, visibility)."""
    landmarks = [None] * 33
    for index, point in points.items():
        landmarks[int(index)] = Landmark(*point)
    return PoseFrame.from_list(landmarks)


def frame(hand=None, pose=None, t=0.0):
    return CapturedFrame(timestamp=t, hand=hand, pose=pose)


def repetition(frames):
    return Repetition(frames=tuple(frames))


def wrist_frame(middle_mcp, hand_wrist=(0.5, 0.5, 0.0), elbow=(0.5, 0.7, 0.0),
                side=HandType.RIGHT, elbow_visibility=None, t=0.0):
    """
    Hand + pose frame for wrist flexion/extension. The pose wrist of the
    tracked side coincides with the hand wrist; the other arm is far away.
    """
    hand = with_landmark(build_hand(wrist=hand_wrist), H.MIDDLE_MCP, middle_mcp)
    far_wrist = (hand_wrist[0] + 0.4, hand_wrist[1], 0.0)
    far_elbow = (far_wrist[0], far_wrist[1] + 0.2, 0.0)
    near_elbow = tuple(elbow) + (elbow_visibility,)
    if side is HandType.LEFT:
        pose = build_pose({
            P.LEFT_WRIST: hand_wrist, P.LEFT_ELBOW: near_elbow,
            P.RIGHT_WRIST: far_wrist, P.RIGHT_ELBOW: far_elbow,
        })
    else:
        pose = build_pose({
            P.RIGHT_WRIST: hand_wrist, P.RIGHT_ELBOW: near_elbow,
            P.LEFT_WRIST: far_wrist, P.LEFT_ELBOW: far_elbow,
        })
    return frame(hand, pose, t)


def oriented_hand(theta_deg, length=0.2):
    """Hand whose index-MCP → pinky-MCP vector is rotated by theta in the image plane."""
    index_mcp = (0.4, 0.5, 0.0)
    rad = math.radians(theta_deg)
    pinky_mcp = (index_mcp[0] + length * math.cos(rad), index_mcp[1] + length * math.sin(rad), 0.0)
    hand = with_landmark(build_hand(), H.INDEX_MCP, index_mcp)
    return with_landmark(hand, H.PINKY_MCP, pinky_mcp)
