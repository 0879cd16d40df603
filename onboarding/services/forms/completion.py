"""Step completion tracking and resume point."""

from datetime import datetime, timezone
from typing import Callable

from onboarding.models.document import FormDocument, StepState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepCompletionTracker:
    """Records completed steps on a document.

    ``last_completed_step`` only ever grows; it marks where to reopen the
    wizard and is never used as a submission gate.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock

    def mark_completed(self, document: FormDocument, step: int) -> FormDocument:
        document.step_completion[step] = StepState(completed=True, updated_at=self._clock())
        document.last_completed_step = max(document.last_completed_step, step)
        return document

    @staticmethod
    def compute_resume_step(document: FormDocument, total_steps: int) -> int:
        """Step to reopen a draft at: one past the last completed, within 1..total_steps."""
        return max(1, min(document.last_completed_step + 1, total_steps))
