# Object detection for prohibited devices via YOLOv8 (Ultralytics).
# Reports every detection; the phone policy lives in proctoring.classifier.

from typing import List

from config import YOLO_MODEL, YOLO_CONFIDENCE


class ObjectDetector:

    def __init__(self, model, confidence: float = YOLO_CONFIDENCE):
        self.model = model
        self.confidence = confidence

    def detect(self, frame) -> List[dict]:
        """Detections as [{ 'class': str, 'score': float, 'bbox': (x1,y1,x2,y2) }].

        Inference errors propagate so the caller can skip the tick.
        """
        results = self.model(frame, conf=self.confidence, verbose=False)

        detections = []
        for r in results:
            names = r.names if hasattr(r, 'names') else {}
            boxes = getattr(r, 'boxes', None)
            if boxes is None or boxes.data is None:
                continue
            for det in boxes.data:
                x1, y1, x2, y2, conf, cls_id = det.tolist()
                label = names.get(int(cls_id), str(int(cls_id)))
                detections.append({
                    'class': label,
                    'score': float(conf),
                    'bbox': (int(x1), int(y1), int(x2), int(y2)),
                })
        return detections


def load_model(weights: str = YOLO_MODEL):
    try:
        from ultralytics import YOLO
        model = YOLO(weights)
        print(f"[YOLO] Loaded {weights} for device detection")
        return ObjectDetector(model)
    except Exception as e:
        print(f"[YOLO] Not available: {e}")
        return None
