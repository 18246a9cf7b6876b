# ==== Interview Proctoring Configuration ====
# Thresholds, intervals and endpoints for the proctored interview client
import os

from dotenv import load_dotenv

load_dotenv()

# ==== Sampling schedule ====
POSE_CHECK_MS = 900           # pose sampler interval (ms)
OBJECT_CHECK_MS = 1600        # face/object sampler interval (ms)

# ==== Posture policy ====
POSTURE_BUFFER = 20           # how many angle readings to average
POSTURE_WARN_ANGLE = 20       # avg angle > this => warning ladder
POSTURE_STRIKE_ANGLE = 30     # avg angle > this => severe streak
REQUIRED_CONSECUTIVE_FRAMES = 3  # severe ticks in a row for a posture-severe strike

# Pose detector confidence gate
MIN_POSE_SCORE = 0.4          # overall pose score below this => undetected
MIN_KEYPOINT_CONFIDENCE = 0.6 # required keypoint below this => undetected
REQUIRED_KEYPOINTS = ("leftShoulder", "rightShoulder", "leftHip", "rightHip", "nose")

# ==== Face / object policy ====
LOOK_AWAY_YAW_PERCENT = 18.0  # |normalized yaw| above this => looking away
PHONE_CLASS_KEYWORD = "phone" # object class substring that counts as a phone
PHONE_CONFIDENCE = 0.8        # detection score above this => phone present

# FaceMesh dense-mesh fallback vertex ids
MESH_LEFT_EYE = 33
MESH_RIGHT_EYE = 263
MESH_NOSE_TIP = 1

# ==== Escalation ====
MAX_WARNINGS = 2              # warnings before strike per type
MAX_STRIKES = 3               # interview termination
STRIKE_COOLDOWN_MS = 10000    # per-reason cooldown so single event doesn't spam
SEVERE_POSTURE_REASON = "posture-severe"

# ==== Question loop ====
QUESTION_TIME_SECONDS = 60    # hard per-question countdown
TIMER_URGENT_SECONDS = 10     # countdown shown as urgent at or below this
NO_ANSWER_TEXT = "No answer provided"
TOAST_DURATION = 3.5          # seconds a transient notification stays up

DEFAULT_QUESTIONS = [
    "Tell me about yourself.",
    "Why should we hire you?",
    "What are your strengths and weaknesses?",
    "Where do you see yourself in 5 years?",
    "Why are you interested in this company?",
    "Describe a challenging situation you faced at work.",
    "What motivates you to do your best work?",
    "How do you handle stress and pressure?",
]

INTERVIEW_DOMAIN = os.getenv("INTERVIEW_DOMAIN", "general")
INTERVIEW_LEVEL = os.getenv("INTERVIEW_LEVEL", "medium")

# ==== Camera ====
CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", "0"))  # 0 = default webcam
FRAME_WIDTH = 640
FRAME_HEIGHT = 480

# ==== Detection models ====
POSE_MODEL_COMPLEXITY = 1
FACE_MESH_MAX_FACES = 1
FACE_MIN_DETECTION_CONFIDENCE = 0.5
YOLO_MODEL = "yolov8n.pt"
YOLO_CONFIDENCE = 0.25        # raw inference floor; phone policy applies PHONE_CONFIDENCE

# ==== Audio alerts ====
USE_AUDIO_ALERTS = True
SPEAK_QUESTIONS = True
AUDIO_VOICE_SPEED = 0.95      # Speech speed (1.0 = normal)
AUDIO_VOLUME = 0.8            # Volume level (0.0 to 1.0)
AUDIO_ALERTS = {
    "first_strike": "You have received your first strike. Please follow the interview rules.",
    "second_strike": "You have received your second strike. One more strike will end the interview.",
    "third_strike": "The interview has been terminated due to repeated violations.",
}

# ==== Server / API ====
SERVER_HOST = os.getenv("SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("PORT", "3000"))
SERVER_URL = os.getenv("SERVER_URL", f"http://{SERVER_HOST}:{SERVER_PORT}")
HTTP_TIMEOUT = 30             # seconds for question/evaluation requests
EVALUATION_TIMEOUT = 120

GEMINI_API_KEY = os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY")
GEMINI_MODELS = ["gemini-2.5-flash", "gemini-2.5-pro"]
GEMINI_RETRIES = 3            # attempts per model, backoff 2**attempt seconds

NUM_QUESTIONS = 5
NUM_HR_QUESTIONS = 2

# ==== Database ====
DB_PATH = os.getenv("DB_PATH", "interviews.sqlite")
AUDIT_ENABLED = True
