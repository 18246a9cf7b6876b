import uuid

from config import POSTURE_BUFFER
from proctoring.posture import PostureAggregator
from proctoring.violations import ViolationType

PHASE_SETUP = "setup"
PHASE_ACTIVE = "active"
PHASE_COMPLETED = "completed"
PHASE_TERMINATED = "terminated"


class SessionState:
    """
    Everything mutable about one interview session.

    Created zeroed at session start, owned by the SessionController and
    handed by reference to the escalation engine and the samplers. Nothing
    here outlives the session.
    """

    def __init__(self, session_id: str = None, posture_capacity: int = POSTURE_BUFFER):
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.phase = PHASE_SETUP

        # Posture aggregation
        self.posture = PostureAggregator(posture_capacity)
        self.consecutive_bad_posture = 0

        # Escalation
        self.violation_counters = {vtype: 0 for vtype in ViolationType}
        self.strikes = 0
        self.last_strike_at = {}  # reason -> clock ms
        self.terminated = False
        self.termination_reason = None

        # Question loop
        self.questions = []
        self.current_index = 0
        self.answers = []
        self.evaluation = None

    @property
    def active(self) -> bool:
        return self.phase == PHASE_ACTIVE and not self.terminated

    @property
    def current_question(self):
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None
