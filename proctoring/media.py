import threading

import cv2

from config import CAMERA_INDEX, FRAME_WIDTH, FRAME_HEIGHT


class MediaAccessError(RuntimeError):
    """Camera could not be opened; the session cannot start."""


class Camera:
    """
    Webcam capture shared by the samplers.

    Reads happen from worker threads (detections run off the event loop), so
    every access to the capture goes through one lock.
    """

    BACKENDS = [
        (cv2.CAP_AVFOUNDATION, "AVFoundation (macOS)"),
        (cv2.CAP_ANY, "Default backend"),
    ]

    def __init__(self, index: int = CAMERA_INDEX, width: int = FRAME_WIDTH, height: int = FRAME_HEIGHT):
        self.index = index
        self.width = width
        self.height = height
        self.cap = None
        self.lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self.cap is not None

    def open(self):
        """Open the first backend that works, or raise MediaAccessError."""
        for backend, backend_name in self.BACKENDS:
            try:
                print(f"[CAMERA] Trying {backend_name}...")
                cap = cv2.VideoCapture(self.index, backend)
                if cap.isOpened():
                    cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
                    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
                    self.cap = cap
                    print(f"[CAMERA] Camera initialized with {backend_name}")
                    return self
                cap.release()
            except cv2.error as e:
                print(f"[CAMERA] {backend_name} failed: {e}")

        raise MediaAccessError(
            "Camera access is required. Please allow camera access and try again."
        )

    def read(self):
        """Latest frame (BGR ndarray) or None if the camera is closed or the read failed."""
        with self.lock:
            if self.cap is None:
                return None
            ok, frame = self.cap.read()
        return frame if ok else None

    def release(self):
        with self.lock:
            if self.cap is not None:
                self.cap.release()
                self.cap = None
                print("[CAMERA] Camera released")
