"""
Face landmarks for look-away and face-presence checks.

Each face is reported with its dense mesh in pixels ('scaled_mesh'). When the
refined mesh is available the iris centres are also exposed as a named
landmark map ('annotations': leftEye / rightEye / noseTip); consumers fall
back to fixed mesh vertices otherwise.
"""

from typing import Dict, List

import cv2
import mediapipe as mp

from config import FACE_MESH_MAX_FACES, FACE_MIN_DETECTION_CONFIDENCE


class FaceMeshDetector:

    # Refined-mesh iris centres and nose tip
    LEFT_IRIS_CENTER = 468
    RIGHT_IRIS_CENTER = 473
    NOSE_TIP = 1

    def __init__(self, max_faces: int = FACE_MESH_MAX_FACES,
                 min_detection_confidence: float = FACE_MIN_DETECTION_CONFIDENCE):
        self.mp_face_mesh = mp.solutions.face_mesh
        self.face_mesh = self.mp_face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=max_faces,
            refine_landmarks=True,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=0.5
        )

    def estimate_faces(self, frame) -> List[Dict]:
        """Return zero or more faces found in a BGR frame."""
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.face_mesh.process(rgb_frame)

        if not results.multi_face_landmarks:
            return []

        h, w = frame.shape[:2]
        faces = []
        for face_landmarks in results.multi_face_landmarks:
            mesh = [(lm.x * w, lm.y * h, lm.z * w) for lm in face_landmarks.landmark]
            face = {'scaled_mesh': mesh}
            if len(mesh) > self.RIGHT_IRIS_CENTER:
                face['annotations'] = {
                    'leftEye': mesh[self.LEFT_IRIS_CENTER],
                    'rightEye': mesh[self.RIGHT_IRIS_CENTER],
                    'noseTip': mesh[self.NOSE_TIP],
                }
            faces.append(face)
        return faces

    def close(self):
        self.face_mesh.close()


def load_model():
    try:
        detector = FaceMeshDetector()
        print("[FACE] Loaded MediaPipe FaceMesh")
        return detector
    except Exception as e:
        print(f"[FACE] Not available: {e}")
        return None
