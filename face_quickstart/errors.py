# coding: utf-8

"""
Quickstart Errors

Exceptions raised by the quickstart itself. Failures reported by the Face
service are not wrapped: they surface as azure.core.exceptions.HttpResponseError
and its subclasses.
"""

from typing import Optional


class FaceQuickstartError(Exception):
    """Base class for all quickstart errors"""


class ConfigurationError(FaceQuickstartError):
    """Missing or invalid configuration (subscription key, region)"""


class NoFaceDetectedError(FaceQuickstartError):
    """An image that must contain a face came back with none"""

    def __init__(self, image_name: str):
        super().__init__(f"No face detected in image: {image_name}")
        self.image_name = image_name


class OperationCancelledError(FaceQuickstartError):
    """The run was cancelled by the caller before the next remote call"""


class TrainingError(FaceQuickstartError):
    """Training of a person group did not reach the succeeded state"""

    def __init__(self, message: str, group_id: str, status: Optional[str] = None):
        super().__init__(message)
        self.group_id = group_id
        self.status = status


class TrainingFailedError(TrainingError):
    """The service reported a failed training run"""


class TrainingTimeoutError(TrainingError):
    """Training was still not finished when the deadline passed"""


class TrainingCancelledError(TrainingError, OperationCancelledError):
    """Waiting for training was cancelled by the caller"""
