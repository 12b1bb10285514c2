# coding: utf-8

"""
Face Quickstart Package

Walkthrough of the Azure AI Vision Face API: face detection, similar face
search, and identification against a trained person group.

Main Components:
- FaceQuickstart: Runs the full walkthrough and prints results
- FaceDetector: Detection and find similar
- PersonGroupManager: Person group create, populate, train and identify
- TrainingMonitor: Bounded wait for training with cancellation
- BaseFaceManager: Shared client handles, logging and image helpers
"""

from .base_face_manager import BaseFaceManager, create_face_clients
from .config import AzureRegion, Settings, load_settings
from .errors import (
	ConfigurationError, FaceQuickstartError, NoFaceDetectedError, OperationCancelledError, TrainingCancelledError,
	TrainingError, TrainingFailedError, TrainingTimeoutError
)
from .face_detector import FaceDetector, SimilarFace
from .person_group import GroupPerson, GroupState, IdentifiedFace, PersonGroupManager
from .quickstart import FaceQuickstart, QuickstartResult
from .training_monitor import TrainingMonitor

__version__ = "1.0.0"

__all__ = [
	"FaceQuickstart",
	"QuickstartResult",
	"FaceDetector",
	"SimilarFace",
	"PersonGroupManager",
	"GroupPerson",
	"GroupState",
	"IdentifiedFace",
	"TrainingMonitor",
	"BaseFaceManager",
	"create_face_clients",
	"AzureRegion",
	"Settings",
	"load_settings",
	"FaceQuickstartError",
	"ConfigurationError",
	"NoFaceDetectedError",
	"OperationCancelledError",
	"TrainingError",
	"TrainingFailedError",
	"TrainingTimeoutError",
	"TrainingCancelledError"
]
