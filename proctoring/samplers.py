"""
Sampler ticks: read a frame, run a detector off the event loop, judge the
result and hand it to the escalation engine.

Detector calls may outlive the session. Every tick re-checks the session
after each await and drops results that arrive once it has ended.
"""

import asyncio
from typing import Callable, Dict, List, Optional

from config import POSTURE_WARN_ANGLE
from proctoring.classifier import (
    measure_spine_angle, classify_posture, normalized_yaw, is_looking_away,
    is_face_absent, find_phone, POSTURE_SEVERE, POSTURE_BAD,
)
from proctoring.escalation import EscalationEngine
from proctoring.state import SessionState
from proctoring.violations import ViolationType


class PoseSampler:
    """Posture sampler: spine tilt -> rolling average -> posture policy."""

    def __init__(self, state: SessionState, engine: EscalationEngine, detector,
                 read_frame: Callable, ui=None):
        self.state = state
        self.engine = engine
        self.detector = detector
        self.read_frame = read_frame
        self.ui = ui

    async def tick(self):
        if self.detector is None or not self.state.active:
            return

        frame = await asyncio.to_thread(self.read_frame)
        if not self.state.active:
            return
        if frame is None:
            self._status('warn', 'Awaiting Video', 'Camera feed not ready for pose analysis.')
            return

        try:
            pose = await asyncio.to_thread(self.detector.estimate, frame)
        except Exception as e:
            print(f"[POSE] Pose analysis error: {e}")
            return

        if not self.state.active:
            return
        self.process(pose)

    def process(self, pose: Optional[Dict]) -> Dict:
        """Apply one pose result to the session."""
        angle, reason = measure_spine_angle(pose)
        if angle is None:
            # Occluded frames must not extend a severe streak
            self.engine.reset_severe_streak()
            self._status('poor', 'Undetected', reason)
            return {'status': 'undetected'}

        self.state.posture.record_angle(angle)
        average = self.state.posture.current_average()
        judgment = classify_posture(average)

        if judgment == POSTURE_SEVERE:
            self.engine.severe_posture(f"Severe slouch detected (Avg Angle: {average:.1f}°).")
        elif judgment == POSTURE_BAD:
            self.engine.reset_severe_streak()
            self.engine.handle_violation(
                ViolationType.POSTURE,
                f"Poor posture detected (Avg Angle: {average:.1f}°). Sit up straight.",
            )
        else:
            self.engine.reset_severe_streak()
            self.engine.clear(ViolationType.POSTURE)
            self._status('good', 'Good',
                         f"Good posture maintained. (Avg Angle: {average:.1f}° - less than {POSTURE_WARN_ANGLE}°)")

        return {'status': judgment, 'angle': angle, 'average': average}

    def _status(self, status_class, text, recommendation):
        if self.ui is not None:
            self.ui.update_status(status_class, text, recommendation)


class FaceObjectSampler:
    """Face presence, look-away and phone checks on the slower schedule."""

    def __init__(self, state: SessionState, engine: EscalationEngine,
                 face_detector, object_detector, read_frame: Callable):
        self.state = state
        self.engine = engine
        self.face_detector = face_detector
        self.object_detector = object_detector
        self.read_frame = read_frame

    async def tick(self):
        if not self.state.active or (self.face_detector is None and self.object_detector is None):
            return

        frame = await asyncio.to_thread(self.read_frame)
        if frame is None:
            return

        if self.face_detector is not None:
            try:
                faces = await asyncio.to_thread(self.face_detector.estimate_faces, frame)
            except Exception as e:
                print(f"[FACE] Face analysis skipped or failed: {e}")
            else:
                if not self.state.active:
                    return
                self.process_faces(faces)

        if self.object_detector is not None and self.state.active:
            try:
                detections = await asyncio.to_thread(self.object_detector.detect, frame)
            except Exception as e:
                print(f"[YOLO] Object detection failed: {e}")
            else:
                if not self.state.active:
                    return
                self.process_objects(detections)

    def process_faces(self, faces: Optional[List[Dict]]):
        if is_face_absent(faces):
            self.engine.handle_violation(ViolationType.FACE_ABSENT, "Face not visible to camera")
            return

        self.engine.clear(ViolationType.FACE_ABSENT)
        yaw = normalized_yaw(faces[0])
        if yaw is None:
            return
        if is_looking_away(yaw):
            self.engine.handle_violation(ViolationType.LOOK_AWAY, f"Looking away ({yaw:.1f}% yaw)")
        else:
            self.engine.clear(ViolationType.LOOK_AWAY)

    def process_objects(self, detections: Optional[List[Dict]]):
        phone = find_phone(detections)
        if phone:
            self.engine.handle_violation(
                ViolationType.PHONE,
                f"Prohibited device detected (phone, Score: {phone['score'] * 100:.0f}%)",
            )
        else:
            self.engine.clear(ViolationType.PHONE)
