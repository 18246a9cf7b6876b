import pytest

from proctoring.classifier import (
    measure_spine_angle, classify_posture, normalized_yaw, is_looking_away,
    is_face_absent, find_phone, POSTURE_GOOD, POSTURE_BAD, POSTURE_SEVERE,
)
from tests.conftest import make_face, make_pose


def test_confident_pose_gives_tilt():
    angle, reason = measure_spine_angle(make_pose(tilt=25))
    assert angle == pytest.approx(25)
    assert reason == ""


@pytest.mark.parametrize("pose", [
    None,
    {'score': 0.9, 'keypoints': []},
    make_pose(score=0.39),
])
def test_low_score_or_empty_pose_is_undetected(pose):
    angle, reason = measure_spine_angle(pose)
    assert angle is None
    assert "lighting" in reason


def test_missing_required_keypoint_is_undetected():
    angle, reason = measure_spine_angle(make_pose(missing=('nose',)))
    assert angle is None
    assert reason == "Could not detect shoulders or hips."


def test_low_confidence_keypoint_is_undetected():
    angle, _ = measure_spine_angle(make_pose(low_confidence=('leftHip',)))
    assert angle is None


@pytest.mark.parametrize("average,expected", [
    (0, POSTURE_GOOD),
    (20, POSTURE_GOOD),
    (20.5, POSTURE_BAD),
    (30, POSTURE_BAD),
    (30.1, POSTURE_SEVERE),
])
def test_posture_thresholds(average, expected):
    assert classify_posture(average) == expected


def test_yaw_from_named_landmarks():
    assert normalized_yaw(make_face(0)) == pytest.approx(0)
    assert normalized_yaw(make_face(25)) == pytest.approx(25)
    assert normalized_yaw(make_face(-30)) == pytest.approx(-30)


def test_yaw_falls_back_to_dense_mesh():
    mesh = [(0.0, 0.0, 0.0)] * 300
    mesh[33] = (100.0, 100.0, 0.0)
    mesh[263] = (200.0, 100.0, 0.0)
    mesh[1] = (130.0, 150.0, 0.0)
    assert normalized_yaw({'scaled_mesh': mesh}) == pytest.approx(20)


def test_face_without_landmarks_has_no_yaw():
    assert normalized_yaw({}) is None
    assert normalized_yaw({'scaled_mesh': [(0, 0, 0)] * 10}) is None


def test_look_away_threshold_is_on_magnitude():
    assert not is_looking_away(18)
    assert is_looking_away(18.5)
    assert is_looking_away(-19)


def test_face_absent():
    assert is_face_absent([])
    assert is_face_absent(None)
    assert not is_face_absent([make_face()])


def test_phone_filter():
    detections = [
        {'class': 'person', 'score': 0.99},
        {'class': 'laptop', 'score': 0.95},
        {'class': 'Cell Phone', 'score': 0.85},
    ]
    assert find_phone(detections)['class'] == 'Cell Phone'
    assert find_phone([{'class': 'cell phone', 'score': 0.8}]) is None
    assert find_phone([{'class': 'laptop', 'score': 0.99}]) is None
    assert find_phone(None) is None
