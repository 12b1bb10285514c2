# coding: utf-8

"""
Face Quickstart

High-level walkthrough of the Azure AI Vision Face API: detect faces, find
similar faces, then train a person group and identify people in a new photo.
Results are printed as plain text; diagnostics go to the logger.

Key Features:
	- Face detection from URLs
	- Similar face search across two images
	- Person group training with bounded wait
	- Identification against the trained group
	- Cancellation between remote calls
	- Optional group cleanup
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, TextIO

from azure.ai.vision.face import FaceClient, FaceAdministrationClient
from azure.ai.vision.face.models import FaceOperationStatus
from azure.core.exceptions import HttpResponseError

from .base_face_manager import ImageSource, check_cancelled, create_face_clients, image_display_name, is_url
from .config import (
	DEFAULT_GROUP_ID, FAMILY_IMAGES, GROUP_FACES_URL, IDENTIFICATION_IMAGE, IMAGE_BASE_URL,
	SINGLE_FACE_URL, Settings
)
from .errors import NoFaceDetectedError
from .face_detector import FaceDetector, SimilarFace
from .person_group import GroupState, IdentifiedFace, PersonGroupManager
from .training_monitor import TrainingMonitor


@dataclass
class QuickstartResult:
	"""Everything one quickstart run produced"""
	single_face_ids: List[str] = field(default_factory=list)
	group_face_ids: List[str] = field(default_factory=list)
	similar_faces: List[SimilarFace] = field(default_factory=list)
	person_ids: Mapping[str, str] = field(default_factory=dict)
	identified_faces: List[IdentifiedFace] = field(default_factory=list)


class FaceQuickstart:
	"""
	Face Quickstart

	Runs the detect, find similar and identify walkthrough with an explicit,
	already authenticated client pair. Once cancel_event is set, the next
	step raises OperationCancelledError before making another remote call.
	"""

	def __init__(
		self,
		face_client: FaceClient,
		face_admin_client: FaceAdministrationClient,
		group_id: str = DEFAULT_GROUP_ID,
		training_monitor: Optional[TrainingMonitor] = None,
		output: Optional[TextIO] = None,
		cancel_event: Optional[threading.Event] = None,
		logger: Optional[logging.Logger] = None,
		log_level: int = logging.INFO
	):
		"""
		Initialize Face Quickstart

		Args:
			face_client: Authenticated FaceClient
			face_admin_client: Authenticated FaceAdministrationClient
			group_id: Person group ID used by the identify step
			training_monitor: Polling policy for the training wait
			output: Stream for results (stdout when None)
			cancel_event: Cancellation token checked before every remote call
			logger: Optional logger instance
			log_level: Level for loggers created here
		"""
		self.output = output
		self.cancel_event = cancel_event
		self.detector = FaceDetector(face_client, logger=logger, log_level=log_level)
		self.group_manager = PersonGroupManager(
			face_client,
			face_admin_client,
			group_id=group_id,
			training_monitor=training_monitor,
			logger=logger,
			log_level=log_level
		)
		self.logger = self.detector.logger

	@classmethod
	def from_settings(cls, settings: Settings, **kwargs) -> "FaceQuickstart":
		"""Authenticate with the settings' key and region and build the quickstart"""
		face_client, face_admin_client = create_face_clients(settings)
		monitor = TrainingMonitor(
			poll_interval=settings.poll_interval,
			backoff=settings.poll_backoff,
			max_interval=settings.max_poll_interval,
			timeout=settings.training_timeout
		)
		kwargs.setdefault("training_monitor", monitor)
		return cls(face_client, face_admin_client, group_id=settings.group_id, **kwargs)

	def _print(self, text: str = "") -> None:
		print(text, file=self.output)

	def _use_cancel_event(self, cancel_event: Optional[threading.Event]) -> None:
		if cancel_event is not None:
			self.cancel_event = cancel_event

	def _check_cancelled(self, step: str) -> None:
		check_cancelled(self.cancel_event, step)

	# Detect
	def detect_faces(self, image: ImageSource, image_name: Optional[str] = None) -> List[str]:
		"""Detect faces in an image and print their face IDs"""
		image_name = image_name or image_display_name(image)
		self._check_cancelled(f"detecting faces in {image_name}")
		face_ids = self.detector.detect_faces(image, image_name)

		source = "URL image" if is_url(image) else "image"
		self._print(f"Detected face ID(s) from {source}: {image_name} :")
		for face_id in face_ids:
			self._print(face_id)
		self._print()
		return face_ids

	# Find similar
	def find_similar(self, single_face_ids: Sequence[str], group_face_ids: Sequence[str],
					 group_image_name: str, single_image_name: str = "single face image") -> List[SimilarFace]:
		"""
		Find faces in the group image similar to the first face of the single-face image

		Raises:
			NoFaceDetectedError: the single-face image had no face
		"""
		if not single_face_ids:
			raise NoFaceDetectedError(single_image_name)

		self._check_cancelled(f"finding similar faces in {group_image_name}")
		similar_faces = self.detector.find_similar(single_face_ids[0], group_face_ids)

		self._print()
		self._print(f"Similar faces found in group photo {group_image_name} are:")
		for face in similar_faces:
			self._print(f"Face ID: {face.face_id}")
			# Confidence range is 0.0 to 1.0, closer to 1.0 is more confident
			self._print(f"Confidence: {face.confidence}")
		self._print()
		return similar_faces

	# Identify
	def build_person_group(self, images_by_name: Mapping[str, Sequence[ImageSource]] = FAMILY_IMAGES,
						   image_base_url: str = IMAGE_BASE_URL) -> Mapping[str, str]:
		"""Create the person group and register every person with their images"""
		group_id = self.group_manager.get_group_id()
		self._check_cancelled(f"creating person group {group_id}")
		self._print(f"Creating the person group {group_id} ...")
		self.group_manager.create_group()
		return self.group_manager.add_persons(images_by_name, image_base_url, cancel_event=self.cancel_event)

	def train_person_group(self, cancel_event: Optional[threading.Event] = None) -> Any:
		"""Train the person group and print every polled status"""
		self._use_cancel_event(cancel_event)
		group_id = self.group_manager.get_group_id()
		self._check_cancelled(f"training person group {group_id}")
		self._print()
		self._print(f"Training person group {group_id} ...")
		result = self.group_manager.train_and_wait(
			cancel_event=self.cancel_event,
			on_status=self._print_training_status
		)
		self._print()
		return result

	def _print_training_status(self, status: FaceOperationStatus, result: Any) -> None:
		self._print(f"Training status: {status.value}")

	def identify_in_photo(self, image: ImageSource, image_name: Optional[str] = None) -> List[IdentifiedFace]:
		"""Detect faces in a photo and identify them against the trained group"""
		image_name = image_name or image_display_name(image)
		face_ids = self.detect_faces(image, image_name)
		identified_faces = []
		if face_ids:
			self._check_cancelled(f"identifying faces in {image_name}")
			identified_faces = self.group_manager.identify_faces(face_ids)

		self._print(f"Persons identified in group photo {image_name}: ")
		for face in identified_faces:
			if face.is_identified:
				self._print(f"Person: {face.person_name} (ID: {face.person_id}) "
							f"for face {face.face_id} with confidence {face.confidence}")
			else:
				self._print(f"Face ID: {face.face_id} was not identified")
		return identified_faces

	def identify_faces(
		self,
		image_base_url: str = IMAGE_BASE_URL,
		images_by_name: Mapping[str, Sequence[ImageSource]] = FAMILY_IMAGES,
		group_photo: str = IDENTIFICATION_IMAGE,
		cancel_event: Optional[threading.Event] = None
	) -> QuickstartResult:
		"""Build and train the person group, then identify the people in group_photo"""
		self._use_cancel_event(cancel_event)
		result = QuickstartResult()
		result.person_ids = self.build_person_group(images_by_name, image_base_url)
		self.train_person_group()
		result.identified_faces = self.identify_in_photo(image_base_url + group_photo, group_photo)
		return result

	def run(self, cancel_event: Optional[threading.Event] = None, cleanup: bool = False) -> QuickstartResult:
		"""
		Run the full walkthrough

		Args:
			cancel_event: Set to stop the run before its next remote call
			cleanup: Delete the person group when done, also after a failure

		Returns:
			QuickstartResult with the output of every step
		"""
		self._use_cancel_event(cancel_event)

		self._check_cancelled("face detection")
		self._print("============== Detect Face ==============")
		single_face_ids = self.detect_faces(SINGLE_FACE_URL)
		group_face_ids = self.detect_faces(GROUP_FACES_URL)

		self._check_cancelled("find similar")
		self._print("============== Find Similar ==============")
		similar_faces = self.find_similar(
			single_face_ids, group_face_ids,
			image_display_name(GROUP_FACES_URL), image_display_name(SINGLE_FACE_URL)
		)

		self._check_cancelled("identification")
		self._print("============== Identify ==============")
		try:
			result = self.identify_faces()
		finally:
			if cleanup:
				self._cleanup()

		result.single_face_ids = single_face_ids
		result.group_face_ids = group_face_ids
		result.similar_faces = similar_faces
		return result

	def _cleanup(self) -> None:
		# Nothing to delete if the group was never created
		if self.group_manager.state in (GroupState.NEW, GroupState.DELETED):
			return
		group_id = self.group_manager.get_group_id()
		self._print()
		self._print(f"Deleting the person group {group_id} ...")
		try:
			self.group_manager.delete_group()
		except HttpResponseError as e:
			# Runs from a finally block; the run's own error is the one to report
			self.logger.error(f"Could not delete person group {group_id}, delete it manually: {e}")

	def __str__(self) -> str:
		return f"FaceQuickstart(group_id='{self.group_manager.get_group_id()}')"
