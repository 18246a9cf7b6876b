from types import SimpleNamespace

import pytest

from detection.yolo_phone import ObjectDetector
from proctoring.classifier import find_phone


class Row:
    def __init__(self, *values):
        self.values = values

    def tolist(self):
        return list(self.values)


class FakeYOLO:
    def __init__(self, rows, names):
        self.rows = rows
        self.names = names
        self.kwargs = None

    def __call__(self, frame, **kwargs):
        self.kwargs = kwargs
        return [SimpleNamespace(names=self.names, boxes=SimpleNamespace(data=self.rows))]


def test_detections_carry_class_score_and_box():
    model = FakeYOLO([Row(10.4, 20.0, 110.9, 220.0, 0.91, 67), Row(0, 0, 50, 50, 0.7, 0)],
                     {0: 'person', 67: 'cell phone'})
    detector = ObjectDetector(model, confidence=0.25)

    detections = detector.detect(object())
    assert detections[0] == {'class': 'cell phone', 'score': pytest.approx(0.91), 'bbox': (10, 20, 110, 220)}
    assert detections[1]['class'] == 'person'
    assert model.kwargs == {'conf': 0.25, 'verbose': False}
    assert find_phone(detections)['class'] == 'cell phone'


def test_inference_errors_propagate():
    def broken(frame, **kwargs):
        raise RuntimeError("CUDA out of memory")

    with pytest.raises(RuntimeError):
        ObjectDetector(broken).detect(object())
