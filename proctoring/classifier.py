"""
Fixed-threshold judgments over raw detector output.

Pose results follow {'score', 'keypoints': [{'part', 'position': {'x', 'y'}, 'confidence'}]}.
Faces carry an 'annotations' map (leftEye/rightEye/noseTip) and/or a dense
'scaled_mesh'. Object detections are {'class', 'score'} dicts.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from config import (
    MIN_POSE_SCORE, MIN_KEYPOINT_CONFIDENCE, REQUIRED_KEYPOINTS,
    POSTURE_WARN_ANGLE, POSTURE_STRIKE_ANGLE,
    LOOK_AWAY_YAW_PERCENT, PHONE_CLASS_KEYWORD, PHONE_CONFIDENCE,
    MESH_LEFT_EYE, MESH_RIGHT_EYE, MESH_NOSE_TIP,
)
from proctoring.posture import midpoint, spine_tilt_angle

POSTURE_GOOD = "good"
POSTURE_BAD = "bad"
POSTURE_SEVERE = "severe"


def keypoints_by_part(pose: Dict, min_confidence: float = MIN_KEYPOINT_CONFIDENCE) -> Dict[str, Dict]:
    """Index confident keypoints by part name."""
    indexed = {}
    for kp in pose.get('keypoints') or []:
        confidence = kp.get('confidence', kp.get('score', 0.0))
        if confidence is not None and confidence >= min_confidence:
            indexed[kp['part']] = kp
    return indexed


def measure_spine_angle(pose: Optional[Dict],
                        min_score: float = MIN_POSE_SCORE,
                        min_confidence: float = MIN_KEYPOINT_CONFIDENCE,
                        required: Sequence[str] = REQUIRED_KEYPOINTS) -> Tuple[Optional[float], str]:
    """
    Spine tilt for one pose result.

    Returns:
        (angle, "") when the pose is usable, otherwise (None, reason) where the
        tick must be treated as undetected.
    """
    if not pose or not pose.get('keypoints') or pose.get('score', 0.0) < min_score:
        return None, "Ensure good lighting and full view of upper body."

    keypoints = keypoints_by_part(pose, min_confidence)
    if any(part not in keypoints for part in required):
        return None, "Could not detect shoulders or hips."

    mid_shoulder = midpoint(keypoints['leftShoulder'], keypoints['rightShoulder'])
    mid_hip = midpoint(keypoints['leftHip'], keypoints['rightHip'])
    return spine_tilt_angle(mid_shoulder, mid_hip), ""


def classify_posture(average_angle: float,
                     warn_angle: float = POSTURE_WARN_ANGLE,
                     strike_angle: float = POSTURE_STRIKE_ANGLE) -> str:
    if average_angle > strike_angle:
        return POSTURE_SEVERE
    if average_angle > warn_angle:
        return POSTURE_BAD
    return POSTURE_GOOD


def _xy(point) -> Optional[Tuple[float, float]]:
    if point is None:
        return None
    if isinstance(point, dict):
        return float(point['x']), float(point['y'])
    return float(point[0]), float(point[1])


def eye_and_nose_points(face: Dict):
    """
    Left eye, right eye and nose tip for one face.

    The named landmark map is preferred; the dense mesh is used at fixed
    vertex ids when the map is absent.
    """
    annotations = face.get('annotations') or {}
    if all(annotations.get(k) is not None for k in ('leftEye', 'rightEye', 'noseTip')):
        return _xy(annotations['leftEye']), _xy(annotations['rightEye']), _xy(annotations['noseTip'])

    mesh = face.get('scaled_mesh')
    if mesh is not None and len(mesh) > max(MESH_LEFT_EYE, MESH_RIGHT_EYE, MESH_NOSE_TIP):
        return _xy(mesh[MESH_LEFT_EYE]), _xy(mesh[MESH_RIGHT_EYE]), _xy(mesh[MESH_NOSE_TIP])

    return None, None, None


def normalized_yaw(face: Dict) -> Optional[float]:
    """
    Nose offset from the eye midpoint as a percentage of eye distance.

    Returns None when the face carries no usable landmarks.
    """
    left_eye, right_eye, nose = eye_and_nose_points(face)
    if not (left_eye and right_eye and nose):
        return None

    mid_eye_x = (left_eye[0] + right_eye[0]) / 2
    yaw = mid_eye_x - nose[0]
    face_width = abs(left_eye[0] - right_eye[0]) or 1
    return (yaw / face_width) * 100


def is_looking_away(yaw_percent: float, threshold: float = LOOK_AWAY_YAW_PERCENT) -> bool:
    return abs(yaw_percent) > threshold


def is_face_absent(faces: Optional[List[Dict]]) -> bool:
    return not faces


def find_phone(detections: Optional[List[Dict]],
               keyword: str = PHONE_CLASS_KEYWORD,
               min_score: float = PHONE_CONFIDENCE) -> Optional[Dict]:
    """First detection whose class names a phone with score above min_score."""
    for det in detections or []:
        label = (det.get('class') or '').lower()
        if keyword in label and det.get('score', 0.0) > min_score:
            return det
    return None
