"""
PROCTORED INTERVIEW CLIENT - DESKTOP RUNNER

Opens the webcam, loads the pose / face / object models, fetches questions
from the interview server and runs one proctored session. Answers are typed
on stdin; a line containing only /next submits the current answer early.
"""

import asyncio
import queue
import sys
import threading

from config import INTERVIEW_DOMAIN, INTERVIEW_LEVEL, SERVER_URL, AUDIT_ENABLED, MAX_STRIKES
from db import SessionLog
from detection import face_detector, pose_detector, yolo_phone
from proctoring.alerts import Speaker
from proctoring.api_client import InterviewAPI
from proctoring.media import Camera
from proctoring.session import SessionController
from proctoring.state import SessionState, PHASE_TERMINATED
from proctoring.ui import ConsoleUI

SUBMIT_COMMAND = "/next"


class AnswerBuffer:
    """Typed answer lines for the current question, filled by the stdin reader."""

    def __init__(self):
        self.lines = []
        self.lock = threading.Lock()

    def append(self, line: str):
        with self.lock:
            self.lines.append(line)

    def take(self) -> str:
        with self.lock:
            text = " ".join(self.lines)
            self.lines = []
        return text


def start_stdin_reader(lines: "queue.Queue[str]"):
    def _read():
        for line in sys.stdin:
            lines.put(line.rstrip("\n"))
        lines.put(None)

    reader = threading.Thread(target=_read, name="stdin-reader", daemon=True)
    reader.start()
    return reader


async def pump_answers(lines: "queue.Queue[str]", controller, answers: AnswerBuffer):
    """
    Feed typed lines to the session until it finishes.

    A line read after the session has finished (or end of input) is put back
    on the queue so the post-session prompt still sees it.
    """
    while not controller.finished.is_set():
        try:
            line = await asyncio.to_thread(lines.get, True, 0.5)
        except queue.Empty:
            continue
        if line is None or controller.finished.is_set():
            lines.put(line)
            return
        if line.strip() == SUBMIT_COMMAND:
            controller.submit_answer()
        elif line.strip():
            answers.append(line.strip())


async def run_session(lines: "queue.Queue[str]", domain: str, level: str):
    ui = ConsoleUI()
    answers = AnswerBuffer()
    state = SessionState()
    log = SessionLog(state.session_id) if AUDIT_ENABLED else None
    controller = SessionController(
        camera=Camera(),
        ui=ui,
        api=InterviewAPI(SERVER_URL),
        loaders={
            'pose': pose_detector.load_model,
            'face': face_detector.load_model,
            'objects': yolo_phone.load_model,
        },
        answer_source=answers.take,
        speaker=Speaker(),
        log=log,
        domain=domain,
        level=level,
        state=state,
    )

    if not await controller.setup():
        return controller.state
    controller.start()
    pump = asyncio.get_running_loop().create_task(pump_answers(lines, controller, answers))
    await controller.wait_finished()
    await pump
    if log is not None:
        await asyncio.to_thread(log.join)
    return controller.state


def main():
    print("=" * 60)
    print("PROCTORED INTERVIEW - STARTING")
    print("=" * 60)
    print("Rules: keep your head and upper body visible, stay in this window,")
    print("do not use other devices. Type your answer; enter /next to submit.")

    lines = queue.Queue()
    start_stdin_reader(lines)

    while True:
        state = asyncio.run(run_session(lines, INTERVIEW_DOMAIN, INTERVIEW_LEVEL))

        print("\n" + "=" * 60)
        print("INTERVIEW SESSION SUMMARY")
        print("=" * 60)
        print(f"Session: {state.session_id}")
        print(f"Final Status: {state.phase.upper()}")
        print(f"Final Strikes: {state.strikes}/{MAX_STRIKES}")
        print(f"Answered: {len(state.answers)}/{len(state.questions)}")
        print(f"Average spine angle: {state.posture.current_average():.2f}")
        print("=" * 60)

        if state.phase != PHASE_TERMINATED:
            break
        print("Enter 'r' to reload and start again, anything else to return home.")
        choice = lines.get()
        if choice is None or choice.strip().lower() != 'r':
            break


if __name__ == "__main__":
    main()
