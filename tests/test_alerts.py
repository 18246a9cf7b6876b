from proctoring import alerts
from proctoring.alerts import Speaker


def test_strike_alerts_pick_message(monkeypatch):
    spoken = []
    speaker = Speaker(enabled=True)
    monkeypatch.setattr(speaker, 'say', spoken.append)

    for count in (1, 2, 3):
        speaker.strike_alert(count)
    assert spoken == [alerts.AUDIO_ALERTS['first_strike'],
                      alerts.AUDIO_ALERTS['second_strike'],
                      alerts.AUDIO_ALERTS['third_strike']]


def test_missing_speech_driver_disables_audio(monkeypatch):
    def no_driver():
        raise RuntimeError("no espeak")

    monkeypatch.setattr(alerts.pyttsx3, 'init', no_driver)
    speaker = Speaker(enabled=True)
    speaker.say("Question one")
    assert speaker.enabled is False


def test_questions_only_spoken_when_enabled(monkeypatch):
    spoken = []
    speaker = Speaker(enabled=True, speak_questions=False)
    monkeypatch.setattr(speaker, 'say', spoken.append)
    speaker.question("Tell me about yourself.")
    assert spoken == []
