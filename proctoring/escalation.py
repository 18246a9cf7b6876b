"""
Strike / warning escalation for proctored interviews.

Each violation type climbs its own warning ladder; once the ladder is
exceeded a strike is requested under that type's reason and the ladder
restarts. Strikes are admitted through a per-reason cooldown, and reaching
MAX_STRIKES ends the session for good.
"""

import time
from typing import Callable, Dict, Optional

from config import (
    MAX_WARNINGS, MAX_STRIKES, STRIKE_COOLDOWN_MS, REQUIRED_CONSECUTIVE_FRAMES,
)
from proctoring.state import SessionState, PHASE_TERMINATED
from proctoring.violations import ViolationType, SEVERE_POSTURE


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class EscalationEngine:
    """
    Sole writer of warning counters, the severe-posture streak and strikes.

    The engine reports every decision to the UI and optional audit log and
    calls on_terminate exactly once when the strike limit is reached.
    """

    def __init__(self, state: SessionState, ui=None, log=None,
                 clock: Callable[[], float] = monotonic_ms,
                 max_warnings: int = MAX_WARNINGS,
                 max_strikes: int = MAX_STRIKES,
                 cooldown_ms: float = STRIKE_COOLDOWN_MS,
                 required_consecutive: int = REQUIRED_CONSECUTIVE_FRAMES,
                 on_strike: Optional[Callable[[str, int], None]] = None,
                 on_terminate: Optional[Callable[[str], None]] = None):
        self.state = state
        self.ui = ui
        self.log = log
        self.clock = clock
        self.max_warnings = max_warnings
        self.max_strikes = max_strikes
        self.cooldown_ms = cooldown_ms
        self.required_consecutive = required_consecutive
        self.on_strike = on_strike
        self.on_terminate = on_terminate

    # ---- warning ladder ----

    def handle_violation(self, vtype: ViolationType, message: str) -> Dict:
        """Count one "bad" judgment for vtype and escalate if the ladder is exceeded."""
        if self.state.terminated:
            return {'action': 'ignored'}

        counters = self.state.violation_counters
        counters[vtype] = counters.get(vtype, 0) + 1
        count = counters[vtype]

        if count <= self.max_warnings:
            self._status('warning', 'Warning', f"{message} ({count}/{self.max_warnings})")
            self._audit(vtype.value, 'warning', message)
            return {'action': 'warning', 'type': vtype, 'count': count}

        self._status('poor', 'Violation', f"{message} - strike given.")
        # Reset even if the cooldown drops the strike
        counters[vtype] = 0
        granted = self.add_strike(vtype.reason)
        return self._strike_result(vtype.reason, granted)

    def clear(self, vtype: ViolationType):
        """A clean judgment: that type's ladder restarts, other types are untouched."""
        if self.state.terminated:
            return
        self.state.violation_counters[vtype] = 0

    # ---- severe posture ----

    def severe_posture(self, message: str) -> Dict:
        """One tick above the severe angle; bypasses the warning ladder."""
        if self.state.terminated:
            return {'action': 'ignored'}

        self.state.consecutive_bad_posture += 1
        self._status('poor', 'Violation', message)

        if self.state.consecutive_bad_posture < self.required_consecutive:
            return {'action': 'streak', 'count': self.state.consecutive_bad_posture}

        self.state.consecutive_bad_posture = 0
        self.state.violation_counters[ViolationType.POSTURE] = 0
        granted = self.add_strike(SEVERE_POSTURE)
        return self._strike_result(SEVERE_POSTURE, granted)

    def reset_severe_streak(self):
        if not self.state.terminated:
            self.state.consecutive_bad_posture = 0

    # ---- strikes ----

    def can_strike(self, reason: str) -> bool:
        last = self.state.last_strike_at.get(reason)
        if last is None:
            return True
        return (self.clock() - last) > self.cooldown_ms

    def add_strike(self, reason: str) -> bool:
        """Admit a strike for reason unless it is inside its cooldown window."""
        if self.state.terminated:
            return False
        if not self.can_strike(reason):
            print(f"[ESCALATION] Strike for '{reason}' debounced (cooldown)")
            self._audit(reason, 'debounced')
            return False

        self.state.strikes += 1
        self.state.last_strike_at[reason] = self.clock()
        strikes = self.state.strikes

        print(f"[ESCALATION] Strike {strikes}/{self.max_strikes}: {reason}")
        self._audit(reason, 'strike', f"{strikes}/{self.max_strikes}")
        if self.log is not None:
            self.log.strikes(strikes)
        if self.ui is not None:
            self.ui.update_strikes(strikes, self.max_strikes)
            self.ui.toast(f"Rule violation: {reason} ({strikes}/{self.max_strikes})")
        if self.on_strike is not None:
            self.on_strike(reason, strikes)

        if strikes >= self.max_strikes:
            self._terminate(reason)
        return True

    def _terminate(self, reason: str):
        self.state.terminated = True
        self.state.termination_reason = reason
        self.state.phase = PHASE_TERMINATED
        print(f"[ESCALATION] Strike limit reached - terminating ({reason})")
        self._audit(reason, 'terminated')
        if self.on_terminate is not None:
            self.on_terminate(reason)

    # ---- helpers ----

    def _strike_result(self, reason: str, granted: bool) -> Dict:
        if not granted:
            return {'action': 'debounced', 'reason': reason, 'strikes': self.state.strikes}
        action = 'terminated' if self.state.terminated else 'strike'
        return {'action': action, 'reason': reason, 'strikes': self.state.strikes}

    def _status(self, status_class: str, text: str, recommendation: str):
        if self.ui is not None:
            self.ui.update_status(status_class, text, recommendation)

    def _audit(self, violation_type: str, action: str, detail: str = None):
        if self.log is not None:
            self.log.violation(violation_type, action, detail)
