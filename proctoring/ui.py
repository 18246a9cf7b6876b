"""
Console UI for the proctoring client.

Keeps the last value of every UI element (status tag, recommendation,
strike counter, timer, toasts) so hosts and tests can read the current
screen state, and prints each change with a tag.
"""

import time
from typing import Dict, List, Optional

from config import TIMER_URGENT_SECONDS, TOAST_DURATION


def format_countdown(remaining: int) -> str:
    minutes, seconds = divmod(max(0, remaining), 60)
    return f"{minutes:02d}:{seconds:02d}"


class ConsoleUI:

    def __init__(self, echo: bool = True):
        self.echo = echo
        self.status_class = None
        self.status_text = "Posture: Awaiting analysis"
        self.recommendation = ""
        self.strike_text = ""
        self.timer_text = ""
        self.timer_urgent = False
        self.loader_text = None
        self.question_text = None
        self.question_counter = None
        self.toasts: List[Dict] = []
        self.termination: Optional[Dict] = None
        self.evaluation: Optional[Dict] = None
        self.media_error: Optional[str] = None

    def _print(self, message: str):
        if self.echo:
            print(message)

    # ---- proctoring status ----

    def update_status(self, status_class: str, status_text: str, recommendation: str):
        changed = (status_class, status_text) != (self.status_class, self.status_text)
        self.status_class = status_class
        self.status_text = status_text
        self.recommendation = recommendation
        if changed or status_class in ('warning', 'poor'):
            self._print(f"[STATUS] {status_text.upper()}: {recommendation}")

    def update_strikes(self, strikes: int, max_strikes: int):
        self.strike_text = f"{strikes}/{max_strikes}"
        self._print(f"[STRIKES] {self.strike_text}")

    def toast(self, message: str):
        self._prune_toasts()
        self.toasts.append({'message': message, 'expires': time.monotonic() + TOAST_DURATION})
        self._print(f"[NOTICE] {message}")

    def active_toasts(self) -> List[str]:
        self._prune_toasts()
        return [t['message'] for t in self.toasts]

    def _prune_toasts(self):
        now = time.monotonic()
        self.toasts = [t for t in self.toasts if t['expires'] > now]

    # ---- lifecycle ----

    def show_loader(self, text: str):
        self.loader_text = text
        self._print(f"[LOADING] {text}")

    def hide_loader(self):
        self.loader_text = None

    def show_media_error(self, message: str):
        self.media_error = message
        self.loader_text = message
        self._print(f"[CAMERA] {message}")

    def show_question(self, index: int, total: int, text: str):
        self.question_text = text
        self.question_counter = f"Question {index + 1} of {total}"
        self._print(f"\n[QUESTION] {self.question_counter}: {text}")

    def show_timer(self, remaining: int):
        self.timer_text = f"Time Remaining: {format_countdown(remaining)}"
        self.timer_urgent = remaining <= TIMER_URGENT_SECONDS
        if remaining <= TIMER_URGENT_SECONDS or remaining % 15 == 0:
            self._print(f"[TIMER] {self.timer_text}")

    def show_termination(self, reason: str, actions=("Go to Home", "Reload Page")):
        self.termination = {
            'title': "Interview Terminated",
            'message': f"Session ended due to repeated violations: {reason}. You can return to home.",
            'actions': list(actions),
        }
        self._print("\n" + "=" * 60)
        self._print("*** INTERVIEW TERMINATED ***")
        self._print(self.termination['message'])
        self._print("Options: " + " | ".join(actions))
        self._print("=" * 60)

    def show_evaluation(self, evaluation: Optional[Dict]):
        evaluation = evaluation or {}
        self.evaluation = evaluation
        self._print("\n" + "=" * 60)
        self._print("INTERVIEW EVALUATION")
        self._print("=" * 60)
        self._print(f"Overall proficiency: {evaluation.get('overall_proficiency') or 'N/A'}")
        self._print(f"Feedback: {evaluation.get('feedback') or 'N/A'}")
        rows = evaluation.get('results') or []
        if not rows:
            self._print("No detailed feedback available.")
        for row in rows:
            self._print(f"- {row.get('question') or 'N/A'} | {row.get('score') or 'N/A'}/10 | "
                        f"{row.get('improvement') or 'N/A'}")
