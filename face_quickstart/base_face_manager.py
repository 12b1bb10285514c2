# coding: utf-8

"""
Base Face Manager

Foundation class for the quickstart components providing the shared Azure AI
Vision Face client handles, logger setup and image utilities.

Key Features:
	- Face client construction from settings
	- Injected client handles (no process-wide client)
	- Image source handling (URL, local file, numpy frame)
	- Logging setup
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from azure.ai.vision.face import FaceClient, FaceAdministrationClient
from azure.ai.vision.face.models import FaceDetectionModel, FaceRecognitionModel
from azure.core.credentials import AzureKeyCredential

from .config import Settings, image_name_from_url
from .errors import OperationCancelledError

DETECTION_MODEL = FaceDetectionModel.DETECTION03
RECOGNITION_MODEL = FaceRecognitionModel.RECOGNITION04

# URL string, local file path, or BGR frame
ImageSource = Union[str, Path, np.ndarray]


def create_face_clients(settings: Settings) -> Tuple[FaceClient, FaceAdministrationClient]:
	"""Authenticate against the Face service and return both client handles"""
	credential = AzureKeyCredential(settings.subscription_key)
	face_client = FaceClient(settings.endpoint, credential)
	face_admin_client = FaceAdministrationClient(settings.endpoint, credential)
	return face_client, face_admin_client


def check_cancelled(cancel_event: Optional[threading.Event], step: str) -> None:
	"""Raise OperationCancelledError when cancel_event has been set"""
	if cancel_event is not None and cancel_event.is_set():
		raise OperationCancelledError(f"Cancelled before {step}")


def is_url(image: ImageSource) -> bool:
	return isinstance(image, str) and image.lower().startswith(("http://", "https://"))


def image_display_name(image: ImageSource) -> str:
	"""Default label for an image source"""
	if is_url(image):
		return image_name_from_url(image)
	if isinstance(image, np.ndarray):
		return f"frame {image.shape[1]}x{image.shape[0]}"
	return Path(image).name


class BaseFaceManager:
	"""
	Base Face Manager

	Holds the Face API client handles and provides common helpers. Clients
	are passed in by the caller so a single authenticated pair is shared
	explicitly between components.
	"""

	def __init__(
		self,
		face_client: FaceClient,
		face_admin_client: Optional[FaceAdministrationClient] = None,
		logger: Optional[logging.Logger] = None,
		log_level: int = logging.INFO
	):
		"""Initialize base face manager"""
		self.face_client = face_client
		self.face_admin_client = face_admin_client

		# Setup logger
		self.logger = logger or self._setup_logger(log_level)

	def _setup_logger(self, log_level: int = logging.INFO) -> logging.Logger:
		"""Setup logger for the manager"""
		logger = logging.getLogger(f"face_quickstart.{self.__class__.__name__}")
		if not logger.handlers:
			handler = logging.StreamHandler()
			formatter = logging.Formatter(
				'%(asctime)s %(levelname)s %(message)s',
				datefmt='%Y-%m-%d %H:%M:%S'
			)
			handler.setFormatter(formatter)
			logger.addHandler(handler)
			logger.propagate = False
		logger.setLevel(log_level)
		return logger

	def _require_admin_client(self) -> FaceAdministrationClient:
		if self.face_admin_client is None:
			raise ValueError(f"{self.__class__.__name__} needs a FaceAdministrationClient for group operations")
		return self.face_admin_client

	def _load_image(self, path: Union[str, Path]) -> np.ndarray:
		"""Read a local image file into a BGR frame"""
		image = cv2.imread(str(path))
		if image is None:
			self.logger.error(f"Could not read image file: {path}")
			raise FileNotFoundError(f"Could not read image file: {path}")
		return image

	def _image_to_bytes(self, image: np.ndarray) -> bytes:
		"""Encode a numpy frame as JPEG for the Face API"""
		success, buffer = cv2.imencode('.jpg', image)
		if not success:
			self.logger.error("Error converting image to bytes")
			raise ValueError("Could not encode image as JPEG")
		return buffer.tobytes()

	def _image_content(self, image: ImageSource) -> bytes:
		"""Raw JPEG bytes for a non-URL image source"""
		if isinstance(image, np.ndarray):
			return self._image_to_bytes(image)
		return self._image_to_bytes(self._load_image(image))
