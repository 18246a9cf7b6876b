"""
Single-person pose estimation for posture proctoring.

Wraps MediaPipe Pose and reports the keypoints the posture policy needs in
the shape {'score', 'keypoints': [{'part', 'position': {'x', 'y'}, 'confidence'}]}
with pixel coordinates.
"""

from typing import Dict, Optional

import cv2
import numpy as np
import mediapipe as mp

from config import POSE_MODEL_COMPLEXITY


class PoseDetector:
    """MediaPipe Pose reduced to the upper-body keypoints used for spine tilt."""

    # MediaPipe Pose landmark ids
    KEY_LANDMARKS = {
        'nose': 0,
        'leftShoulder': 11,
        'rightShoulder': 12,
        'leftHip': 23,
        'rightHip': 24,
    }

    def __init__(self, model_complexity: int = POSE_MODEL_COMPLEXITY):
        self.mp_pose = mp.solutions.pose
        self.pose = self.mp_pose.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,
            enable_segmentation=False,
            min_detection_confidence=0.5,
            min_tracking_confidence=0.5
        )

    def estimate(self, frame) -> Optional[Dict]:
        """
        Estimate one pose from a BGR frame.

        Returns:
            Pose dict, or None when no pose was found. The overall score is the
            mean visibility of the tracked keypoints.
        """
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.pose.process(rgb_frame)

        if not results.pose_landmarks:
            return None

        h, w = frame.shape[:2]
        landmarks = results.pose_landmarks.landmark
        keypoints = []
        for part, idx in self.KEY_LANDMARKS.items():
            if idx < len(landmarks):
                lm = landmarks[idx]
                keypoints.append({
                    'part': part,
                    'position': {'x': lm.x * w, 'y': lm.y * h},
                    'confidence': float(lm.visibility),
                })

        score = float(np.mean([kp['confidence'] for kp in keypoints])) if keypoints else 0.0
        return {'score': score, 'keypoints': keypoints}

    def close(self):
        self.pose.close()


def load_model():
    try:
        detector = PoseDetector()
        print("[POSE] Loaded MediaPipe Pose")
        return detector
    except Exception as e:
        print(f"[POSE] Not available: {e}")
        return None
