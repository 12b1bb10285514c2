# coding: utf-8

"""
Training Monitor

Waits for a person group training job to reach a terminal state. Polls the
training status with exponential backoff until the job succeeds, fails, the
deadline passes, or the caller cancels.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from azure.ai.vision.face.models import FaceOperationStatus

from .errors import TrainingCancelledError, TrainingFailedError, TrainingTimeoutError


def normalize_status(status: Any) -> FaceOperationStatus:
    """Map a raw status value ("running", "Succeeded", enum member) onto FaceOperationStatus"""
    if isinstance(status, FaceOperationStatus):
        return status
    value = str(status).strip().lower()
    for member in FaceOperationStatus:
        if member.value.lower() == value:
            return member
    raise ValueError(f"Unknown training status: {status!r}")


class TrainingMonitor:
    """
    Training Monitor

    Polls get_status() until training is finished. The first poll happens
    after poll_interval seconds; each following delay is multiplied by
    backoff and capped at max_interval.

    cancel_event is any object with a threading.Event style wait(timeout)
    method; setting it aborts the wait with TrainingCancelledError.
    """

    def __init__(
        self,
        poll_interval: float = 1.0,
        backoff: float = 2.0,
        max_interval: float = 10.0,
        timeout: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None
    ):
        if poll_interval <= 0 or timeout <= 0:
            raise ValueError("poll_interval and timeout must be positive")
        if backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")
        self.poll_interval = poll_interval
        self.backoff = backoff
        self.max_interval = max(max_interval, poll_interval)
        self.timeout = timeout
        self.clock = clock
        self.logger = logger or logging.getLogger("face_quickstart.TrainingMonitor")

    def wait(
        self,
        group_id: str,
        get_status: Callable[[], Any],
        cancel_event: Optional[threading.Event] = None,
        on_status: Optional[Callable[[FaceOperationStatus, Any], None]] = None
    ) -> Any:
        """
        Block until training of group_id finishes

        Args:
            group_id: Group being trained (for logs and errors)
            get_status: Returns the service's training result object (with .status and .message)
            cancel_event: Cancellation token
            on_status: Called with every polled status

        Returns:
            The training result of the succeeded poll

        Raises:
            TrainingFailedError: the service reported failed
            TrainingTimeoutError: not finished before the deadline
            TrainingCancelledError: cancel_event was set
        """
        cancel_event = cancel_event or threading.Event()
        deadline = self.clock() + self.timeout
        delay = self.poll_interval
        status = None

        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                self.logger.error(f"Training of {group_id} did not finish within {self.timeout}s (last status: {status})")
                raise TrainingTimeoutError(
                    f"Training of person group {group_id} did not finish within {self.timeout} seconds",
                    group_id, status.value if status else None
                )

            if cancel_event.wait(min(delay, remaining)):
                self.logger.warning(f"Stopped waiting for training of {group_id}: cancelled")
                raise TrainingCancelledError(
                    f"Waiting for training of person group {group_id} was cancelled",
                    group_id, status.value if status else None
                )

            result = get_status()
            status = normalize_status(result.status)
            self.logger.debug(f"Training status of {group_id}: {status.value}")
            if on_status:
                on_status(status, result)

            if status == FaceOperationStatus.SUCCEEDED:
                self.logger.info(f"Training of {group_id} succeeded")
                return result
            if status == FaceOperationStatus.FAILED:
                message = getattr(result, "message", None) or "no message from service"
                self.logger.error(f"Training of {group_id} failed: {message}")
                raise TrainingFailedError(
                    f"Training of person group {group_id} failed: {message}",
                    group_id, status.value
                )

            delay = min(delay * self.backoff, self.max_interval)
