from abc import ABC, abstractmethod

from app.schemas.submission import Submission


class AbstractNotifier(ABC):
    """Interface for delivering a stored submission to an external channel."""

    @abstractmethod
    async def notify(self, submission: Submission) -> None:
        """Deliver a notification for submission.

        Raises:
            NotificationAppError: If delivery failed.
        """
        ...
