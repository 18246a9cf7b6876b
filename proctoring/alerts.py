import pyttsx3

from config import USE_AUDIO_ALERTS, SPEAK_QUESTIONS, AUDIO_ALERTS, AUDIO_VOICE_SPEED, AUDIO_VOLUME


class Speaker:
    """
    Spoken questions and strike alerts.

    pyttsx3 blocks until speech ends, so callers run say() in a worker
    thread. A missing speech driver disables speech instead of failing.
    """

    def __init__(self, enabled: bool = USE_AUDIO_ALERTS, speak_questions: bool = SPEAK_QUESTIONS):
        self.enabled = enabled
        self.speak_questions = speak_questions

    def say(self, text: str):
        if not self.enabled or not text:
            return
        try:
            engine = pyttsx3.init()
            engine.setProperty('rate', int(200 * AUDIO_VOICE_SPEED))
            engine.setProperty('volume', AUDIO_VOLUME)
            engine.say(text)
            engine.runAndWait()
        except Exception as e:
            print(f"[AUDIO] Speech failed, disabling audio: {e}")
            self.enabled = False

    def question(self, text: str):
        if self.speak_questions:
            self.say(text)

    def strike_alert(self, strike_count: int):
        if strike_count == 1:
            self.say(AUDIO_ALERTS["first_strike"])
        elif strike_count == 2:
            self.say(AUDIO_ALERTS["second_strike"])
        elif strike_count >= 3:
            self.say(AUDIO_ALERTS["third_strike"])
