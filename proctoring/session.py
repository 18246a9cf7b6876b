"""
Interview session lifecycle.

Setup acquires the camera, loads each detection model independently and
fetches questions. Active runs the posture sampler, the face/object sampler
and the per-question countdown side by side on one event loop. The session
ends either by completing the question list (answers are submitted for
evaluation) or by the escalation engine hitting the strike limit.
"""

import asyncio
from typing import Callable, Dict, Optional

from config import (
    POSE_CHECK_MS, OBJECT_CHECK_MS, QUESTION_TIME_SECONDS, DEFAULT_QUESTIONS,
    NO_ANSWER_TEXT, MAX_STRIKES,
)
from proctoring.api_client import EvaluationError
from proctoring.escalation import EscalationEngine, monotonic_ms
from proctoring.media import MediaAccessError
from proctoring.samplers import PoseSampler, FaceObjectSampler
from proctoring.scheduler import PeriodicTask, CountdownTimer
from proctoring.state import SessionState, PHASE_ACTIVE, PHASE_COMPLETED
from proctoring.violations import ViolationType, BROWSER_EVENT_MESSAGES


class SessionController:
    """
    Owns the SessionState and is the only caller into the escalation engine.

    Collaborators are injected: `camera` (open/read/release), `loaders`
    (name -> zero-arg callable returning a detector or None), `api`
    (fetch_questions/evaluate_responses), `ui`, `speaker` and an optional
    audit `log`. `answer_source` returns the candidate's current answer text.
    """

    MODEL_NAMES = ('pose', 'face', 'objects')

    def __init__(self, camera, ui, api=None, loaders: Optional[Dict[str, Callable]] = None,
                 answer_source: Optional[Callable[[], str]] = None, speaker=None, log=None,
                 domain: str = None, level: str = None, state: SessionState = None,
                 clock: Callable[[], float] = monotonic_ms,
                 pose_interval_ms: float = POSE_CHECK_MS,
                 object_interval_ms: float = OBJECT_CHECK_MS,
                 question_seconds: int = QUESTION_TIME_SECONDS,
                 countdown_step: float = 1.0):
        self.camera = camera
        self.ui = ui
        self.api = api
        self.loaders = loaders or {}
        self.answer_source = answer_source
        self.speaker = speaker
        self.log = log
        self.domain = domain
        self.level = level
        self.state = state or SessionState()

        self.engine = EscalationEngine(
            self.state, ui=ui, log=log, clock=clock,
            on_strike=self._on_strike, on_terminate=self.terminate,
        )
        self.detectors = {name: None for name in self.MODEL_NAMES}
        self.load_status = {}

        self.pose_interval = pose_interval_ms / 1000.0
        self.object_interval = object_interval_ms / 1000.0
        self.question_seconds = question_seconds
        self.countdown_step = countdown_step

        self.pose_sampler = None
        self.face_object_sampler = None
        self.pose_task = None
        self.object_task = None
        self.countdown = None
        self.finished = None
        self._completion = None

    # ==================== SETUP ====================

    async def setup(self) -> bool:
        """Acquire media, load models and questions. False if the camera is unavailable."""
        self.ui.show_loader('Requesting camera access...')
        try:
            await asyncio.to_thread(self.camera.open)
        except MediaAccessError as e:
            print(f"[SESSION] Camera permission error: {e}")
            self.ui.show_media_error(str(e))
            self.ui.toast('Camera permission required')
            return False

        self.ui.show_loader('Loading ML models (this may take a few seconds)...')
        await self.load_models()

        self.ui.show_loader('Generating interview questions...')
        questions = None
        if self.api is not None:
            questions = await asyncio.to_thread(self.api.fetch_questions, self.domain, self.level)
        if not questions:
            print("[SESSION] Using default question list")
            questions = list(DEFAULT_QUESTIONS)
        self.state.questions = questions

        if self.log is not None:
            self.log.start(self.domain, self.level)
        self.ui.hide_loader()
        return True

    async def load_models(self):
        """Load each model on its own; a failure disables only that modality."""
        for name in self.MODEL_NAMES:
            loader = self.loaders.get(name)
            detector = None
            if loader is not None:
                self.ui.show_loader(f'Loading {name} model...')
                try:
                    detector = await asyncio.to_thread(loader)
                except Exception as e:
                    print(f"[SESSION] {name} model failed to load: {e}")
                    detector = None
            self.detectors[name] = detector
            self.load_status[name] = 'loaded' if detector is not None else 'unavailable'
            if detector is None:
                print(f"[SESSION] {name} detection disabled for this session")

    # ==================== ACTIVE ====================

    def start(self):
        """Enter the Active phase: show the first question and start all schedules."""
        self.finished = asyncio.Event()
        self.state.phase = PHASE_ACTIVE
        self.ui.update_strikes(self.state.strikes, MAX_STRIKES)

        self.pose_sampler = PoseSampler(self.state, self.engine, self.detectors['pose'],
                                        self.camera.read, ui=self.ui)
        self.face_object_sampler = FaceObjectSampler(self.state, self.engine, self.detectors['face'],
                                                     self.detectors['objects'], self.camera.read)
        self.pose_task = PeriodicTask('pose-sampler', self.pose_interval, self.pose_sampler.tick)
        self.object_task = PeriodicTask('face-object-sampler', self.object_interval,
                                        self.face_object_sampler.tick)
        self.countdown = CountdownTimer(self.question_seconds, self.ui.show_timer,
                                        self.submit_answer, step=self.countdown_step)

        print(f"[SESSION] Session {self.state.session_id} active "
              f"({len(self.state.questions)} questions)")
        self.display_question()
        self.pose_task.start()
        self.object_task.start()

    def display_question(self):
        index = self.state.current_index
        text = self.state.current_question or 'Loading...'
        self.ui.show_question(index, len(self.state.questions), text)
        if self.speaker is not None:
            asyncio.get_running_loop().run_in_executor(None, self.speaker.question, text)
        self.countdown.start()

    def submit_answer(self, response: str = None):
        """Record the current answer and advance; also called on countdown expiry."""
        if not self.state.active:
            return
        self.countdown.stop()

        if response is None and self.answer_source is not None:
            response = self.answer_source()
        response = (response or '').strip() or NO_ANSWER_TEXT
        self.state.answers.append({'question': self.state.current_question, 'response': response})
        self.state.current_index += 1

        if self.state.current_index < len(self.state.questions):
            self.display_question()
        else:
            self._completion = asyncio.get_running_loop().create_task(self.complete())

    # ---- browser signals ----

    def on_visibility_change(self, hidden: bool):
        if hidden:
            self._browser_violation(ViolationType.TAB_SWITCH)

    def on_window_blur(self):
        self._browser_violation(ViolationType.FOCUS_LOST)

    def on_fullscreen_change(self, is_fullscreen: bool):
        if not is_fullscreen:
            self._browser_violation(ViolationType.FULLSCREEN)

    def _browser_violation(self, vtype: ViolationType):
        if self.state.active:
            self.engine.handle_violation(vtype, BROWSER_EVENT_MESSAGES[vtype])

    # ==================== END OF SESSION ====================

    def stop_sampling(self):
        for task in (self.pose_task, self.object_task, self.countdown):
            if task is not None:
                task.stop()

    async def complete(self):
        """All questions answered: stop sampling and submit for evaluation."""
        self.stop_sampling()
        self.state.phase = PHASE_COMPLETED
        self.camera.release()
        print(f"[SESSION] All {len(self.state.answers)} questions answered")

        try:
            if self.api is not None:
                await self._evaluate()
        finally:
            if self.log is not None:
                self.log.close(PHASE_COMPLETED)
            self.finished.set()

    async def _evaluate(self):
        self.ui.show_loader('Evaluating your answers...')
        try:
            evaluation = await asyncio.to_thread(
                self.api.evaluate_responses, self.state.answers,
                self.state.posture.current_average(), self.domain,
            )
        except EvaluationError as e:
            print(f"[SESSION] Evaluation error: {e}")
            self.ui.toast('Evaluation failed. See console for details.')
        except Exception as e:
            print(f"[SESSION] Unexpected evaluation failure: {e}")
            self.ui.toast('Evaluation failed. See console for details.')
        else:
            self.state.evaluation = evaluation
            self.ui.show_evaluation(evaluation)
        finally:
            self.ui.hide_loader()

    def terminate(self, reason: str):
        """Strike limit reached. Final: no resume path."""
        self.stop_sampling()
        self.camera.release()
        self.ui.show_termination(reason)
        if self.log is not None:
            self.log.close('terminated')
        if self.finished is not None:
            self.finished.set()

    def _on_strike(self, reason: str, strikes: int):
        if self.speaker is not None:
            asyncio.get_running_loop().run_in_executor(None, self.speaker.strike_alert, strikes)

    async def wait_finished(self):
        await self.finished.wait()
        if self._completion is not None:
            await self._completion
        for task in (self.pose_task, self.object_task):
            if task is not None:
                await task.wait_idle()

    async def run(self) -> SessionState:
        """Setup, then run until completion or termination."""
        if not await self.setup():
            return self.state
        self.start()
        await self.wait_finished()
        return self.state
