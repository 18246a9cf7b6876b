"""
Violation types watched during a proctored interview.

Each type keeps its own warning counter. The strike reason for a type is
"<type> violation"; severe posture escalates under its own reason so its
cooldown is tracked apart from the moderate posture ladder.
"""

from enum import Enum

from config import SEVERE_POSTURE_REASON


class ViolationType(str, Enum):
    POSTURE = "posture"
    LOOK_AWAY = "lookAway"
    PHONE = "phone"
    FACE_ABSENT = "faceAbsent"
    TAB_SWITCH = "tabSwitch"
    FOCUS_LOST = "focusLost"
    FULLSCREEN = "fullscreen"

    @property
    def reason(self) -> str:
        return f"{self.value} violation"


# Browser events carry no payload, they just map to a type
BROWSER_EVENT_MESSAGES = {
    ViolationType.TAB_SWITCH: "Switched tab or minimized window",
    ViolationType.FOCUS_LOST: "Switched focus from interview window",
    ViolationType.FULLSCREEN: "Exited fullscreen mode",
}

SEVERE_POSTURE = SEVERE_POSTURE_REASON
