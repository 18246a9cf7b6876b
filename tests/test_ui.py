import pytest

from proctoring.ui import ConsoleUI, format_countdown


@pytest.mark.parametrize("remaining,text", [(60, "01:00"), (59, "00:59"), (0, "00:00"), (-3, "00:00"), (125, "02:05")])
def test_format_countdown(remaining, text):
    assert format_countdown(remaining) == text


def test_timer_turns_urgent():
    ui = ConsoleUI(echo=False)
    ui.show_timer(11)
    assert not ui.timer_urgent
    ui.show_timer(10)
    assert ui.timer_urgent
    assert ui.timer_text == "Time Remaining: 00:10"


def test_toasts_expire(monkeypatch):
    ui = ConsoleUI(echo=False)
    clock = [100.0]
    monkeypatch.setattr('proctoring.ui.time.monotonic', lambda: clock[0])
    ui.toast("Rule violation: phone violation (1/3)")
    assert ui.active_toasts() == ["Rule violation: phone violation (1/3)"]
    clock[0] += 10
    assert ui.active_toasts() == []


def test_termination_overlay():
    ui = ConsoleUI(echo=False)
    ui.show_termination("posture-severe")
    assert ui.termination['title'] == "Interview Terminated"
    assert "posture-severe" in ui.termination['message']
    assert ui.termination['actions'] == ["Go to Home", "Reload Page"]


def test_question_counter_is_one_based():
    ui = ConsoleUI(echo=False)
    ui.show_question(0, 5, "Tell me about yourself.")
    assert ui.question_counter == "Question 1 of 5"


def test_expired_toasts_are_dropped(monkeypatch):
    ui = ConsoleUI(echo=False)
    clock = [100.0]
    monkeypatch.setattr('proctoring.ui.time.monotonic', lambda: clock[0])
    for i in range(50):
        ui.toast(f"notice {i}")
        clock[0] += 10
    ui.toast("latest")
    assert [t['message'] for t in ui.toasts] == ["latest"]
