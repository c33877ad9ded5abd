from handrom.domain.enums import Finger, HandLandmark as H, Joint

# =========================
# SKELETON
# =========================
# Landmarks along each long finger, proximal to distal (wrist first).
FINGER_CHAINS = {
    Finger.INDEX:  (H.WRIST, H.INDEX_MCP,  H.INDEX_PIP,  H.INDEX_DIP,  H.INDEX_TIP),
    Finger.MIDDLE: (H.WRIST, H.MIDDLE_MCP, H.MIDDLE_PIP, H.MIDDLE_DIP, H.MIDDLE_TIP),
    Finger.RING:   (H.WRIST, H.RING_MCP,   H.RING_PIP,   H.RING_DIP,   H.RING_TIP),
    Finger.PINKY:  (H.WRIST, H.PINKY_MCP,  H.PINKY_PIP,  H.PINKY_DIP,  H.PINKY_TIP),
}

# Joint -> position of its vertex inside a finger chain
JOINT_VERTEX = {Joint.MCP: 1, Joint.PIP: 2, Joint.DIP: 3}

# =========================
# KAPANDJI TARGETS (level 1..10)
# =========================
# Level 10 (distal palmar crease) has no single landmark: it is the
# centroid of these points.
PALMAR_CREASE_POINTS = (H.WRIST, H.MIDDLE_MCP, H.RING_MCP, H.PINKY_MCP)

KAPANDJI_TARGETS = (
    (1,  "Index Proximal Phalanx",  H.INDEX_PIP),
    (2,  "Index Middle Phalanx",    H.INDEX_DIP),
    (3,  "Index Finger Tip",        H.INDEX_TIP),
    (4,  "Middle Finger Tip",       H.MIDDLE_TIP),
    (5,  "Ring Finger Tip",         H.RING_TIP),
    (6,  "Little Finger Tip",       H.PINKY_TIP),
    (7,  "Little DIP Joint Crease", H.PINKY_DIP),
    (8,  "Little PIP Joint Crease", H.PINKY_PIP),
    (9,  "Little MCP Joint Crease", H.PINKY_MCP),
    (10, "Distal Palmar Crease",    None),
)

# =========================
# CLINICAL REFERENCE RANGES (degrees)
# =========================
NORMAL_TAM_MAX = {
    Finger.INDEX:  260.0,
    Finger.MIDDLE: 270.0,
    Finger.RING:   260.0,
    Finger.PINKY:  240.0,
}

NORMAL_WRIST_FLEXION   = 80.0
NORMAL_WRIST_EXTENSION = 70.0
NORMAL_RADIAL_DEVIATION = 20.0
NORMAL_ULNAR_DEVIATION  = 30.0
DEVIATION_PERCENT_CAP   = 150.0
