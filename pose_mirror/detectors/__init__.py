# Detectors package with lazy loading
# Only imports the requested backend (and its ML stack) when needed

from .base import Detector, NullDetector

DETECTOR_NAMES = ('yolo', 'owlv2', 'null')


def get_detector(detector_name, **kwargs):
    """Get detector instance by name with lazy loading"""
    if detector_name == 'yolo':
        from .yolo_detector import YoloDetector
        return YoloDetector(**kwargs)
    elif detector_name == 'owlv2':
        from .owlv2_detector import Owlv2Detector
        return Owlv2Detector(**kwargs)
    elif detector_name == 'null':
        return NullDetector()
    else:
        return None


__all__ = ['Detector', 'NullDetector', 'DETECTOR_NAMES', 'get_detector']
