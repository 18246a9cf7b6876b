import math

import pytest

from proctoring.escalation import EscalationEngine
from proctoring.state import SessionState
from proctoring.ui import ConsoleUI


class FakeClock:
    """Millisecond clock under test control."""

    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class RecordingLog:
    def __init__(self):
        self.events = []
        self.strike_totals = []
        self.started = None
        self.closed = None

    def start(self, domain=None, level=None):
        self.started = (domain, level)

    def violation(self, violation_type, action, detail=None):
        self.events.append((violation_type, action))

    def strikes(self, count):
        self.strike_totals.append(count)

    def close(self, status):
        self.closed = status


def make_pose(tilt=0.0, score=0.9, confidence=0.9, missing=(), low_confidence=()):
    """Pose whose hip-to-shoulder line leans `tilt` degrees from vertical."""
    hip = (320.0, 400.0)
    length = 200.0
    shoulder = (hip[0] + length * math.sin(math.radians(tilt)),
                hip[1] - length * math.cos(math.radians(tilt)))
    positions = {
        'leftShoulder': (shoulder[0] - 60, shoulder[1]),
        'rightShoulder': (shoulder[0] + 60, shoulder[1]),
        'leftHip': (hip[0] - 40, hip[1]),
        'rightHip': (hip[0] + 40, hip[1]),
        'nose': (shoulder[0], shoulder[1] - 80),
    }
    keypoints = []
    for part, (x, y) in positions.items():
        if part in missing:
            continue
        keypoints.append({
            'part': part,
            'position': {'x': x, 'y': y},
            'confidence': 0.2 if part in low_confidence else confidence,
        })
    return {'score': score, 'keypoints': keypoints}


def make_face(yaw_percent=0.0):
    """Face with eyes 100px apart and the nose offset to give `yaw_percent`."""
    return {'annotations': {
        'leftEye': (100.0, 100.0, 0.0),
        'rightEye': (200.0, 100.0, 0.0),
        'noseTip': (150.0 - yaw_percent, 140.0, 0.0),
    }}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ui():
    return ConsoleUI(echo=False)


@pytest.fixture
def state():
    return SessionState(session_id="test-session")


@pytest.fixture
def audit():
    return RecordingLog()


@pytest.fixture
def engine(state, ui, clock, audit):
    terminations = []
    eng = EscalationEngine(state, ui=ui, log=audit, clock=clock, on_terminate=terminations.append)
    eng.terminations = terminations
    return eng
