"""
Subject Tracker: picks the single person the avatar follows and keeps the
prior tick's detection of that person as the motion baseline.
"""

import logging
from typing import Iterable, Optional

from . import config
from .types import Detection, TrackedSubject

logger = logging.getLogger(__name__)


def select_subject(detections: Iterable[Detection],
                   threshold: float = config.SCORE_THRESHOLD) -> Optional[Detection]:
    """
    Return the first person detection whose score exceeds threshold.

    The scan follows the order the detector returned, so among several
    qualifying persons the earliest one wins. Non-person detections are
    skipped wherever they appear in the list.
    """
    for det in detections:
        if det.is_person and det.score > threshold:
            return det
    return None


class SubjectTracker:
    """
    Owns the TrackedSubject. update() is the only writer of `previous`.

    When the subject disappears the baseline is retained by default, so the
    next reappearance is differenced against the last known position. With
    reset_baseline_on_loss=True the baseline is cleared instead and the
    reappearance yields the zero pose.
    """

    def __init__(self, threshold: float = config.SCORE_THRESHOLD,
                 reset_baseline_on_loss: bool = config.RESET_BASELINE_ON_LOSS):
        self.threshold = threshold
        self.reset_baseline_on_loss = reset_baseline_on_loss
        self._last_seen: Optional[Detection] = None
        self._subject = TrackedSubject()

    @property
    def subject(self) -> TrackedSubject:
        return self._subject

    def update(self, detections: Iterable[Detection]) -> TrackedSubject:
        found = select_subject(detections, self.threshold)

        if found is not None:
            if self._last_seen is None:
                logger.debug(f"[Tracker] Subject acquired at {found.bbox}")
            self._subject = TrackedSubject(current=found, previous=self._last_seen)
            self._last_seen = found
            return self._subject

        if self._subject.present:
            logger.debug("[Tracker] Subject lost")
        if self.reset_baseline_on_loss:
            self._last_seen = None
        # previous always mirrors the baseline the next sighting is measured against
        self._subject = TrackedSubject(current=None, previous=self._last_seen)
        return self._subject

    def reset(self):
        self._last_seen = None
        self._subject = TrackedSubject()
