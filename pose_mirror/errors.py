class PoseMirrorError(Exception):
    """Base class for pipeline errors."""


class AcquisitionError(PoseMirrorError):
    """The capture device could not be opened. Fatal, never retried."""


class ModelInitError(PoseMirrorError):
    """The detection model failed to load. The pipeline runs detection-disabled."""


class DetectionError(PoseMirrorError):
    """A single detect call failed. Only that tick is skipped."""
