# coding: utf-8

"""
Person Group Management

Manages a large person group of known people using Azure AI Vision Face API:
group creation, person registration, face enrollment, training and
identification against the trained group.

Key Features:
    - Group lifecycle (create, replace, delete)
    - Person registration and face enrollment from URLs or local images
    - Training trigger and bounded wait for completion
    - Face identification with top-candidate results
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from azure.ai.vision.face import FaceClient, FaceAdministrationClient
from azure.ai.vision.face.models import FaceOperationStatus
from azure.core.exceptions import ResourceNotFoundError

from .base_face_manager import (
    BaseFaceManager, DETECTION_MODEL, RECOGNITION_MODEL, ImageSource, check_cancelled, is_url
)
from .errors import TrainingError
from .training_monitor import TrainingMonitor

# The identify endpoint accepts at most this many face IDs per request
MAX_IDENTIFY_BATCH = 10


class GroupState(str, Enum):
    """Local view of where the group is in the training workflow"""
    NEW = "new"
    CREATED = "created"
    POPULATED = "populated"
    TRAINING = "training"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DELETED = "deleted"


@dataclass
class GroupPerson:
    """A person registered in the group during this run"""
    person_id: str
    name: str
    persisted_face_ids: List[str] = field(default_factory=list)


@dataclass
class IdentifiedFace:
    """Identification result for one detected face (top candidate only)"""
    face_id: str
    person_id: Optional[str]
    person_name: Optional[str]
    confidence: Optional[float]

    @property
    def is_identified(self) -> bool:
        return self.person_id is not None


class PersonGroupManager(BaseFaceManager):
    """
    Person Group Manager

    Drives one large person group through create, populate, train and
    identify. Every remote failure is logged and propagated; a failure while
    populating leaves the group partially populated.
    """

    def __init__(
        self,
        face_client: FaceClient,
        face_admin_client: FaceAdministrationClient,
        group_id: str,
        group_name: Optional[str] = None,
        training_monitor: Optional[TrainingMonitor] = None,
        logger: Optional[logging.Logger] = None,
        log_level: int = logging.INFO
    ):
        """Initialize person group manager"""
        super().__init__(face_client, face_admin_client, logger, log_level)

        self.group_id = group_id
        self.group_name = group_name or group_id
        self.training_monitor = training_monitor or TrainingMonitor(logger=self.logger)
        self.state = GroupState.NEW

        # person_id -> GroupPerson
        self.persons: Dict[str, GroupPerson] = {}

    @property
    def _groups(self):
        return self._require_admin_client().large_person_group

    def get_group_id(self) -> str:
        """Get the person group ID"""
        return self.group_id

    def group_exists(self) -> bool:
        """Check whether the group already exists on the service"""
        try:
            self._groups.get(self.group_id)
            return True
        except ResourceNotFoundError:
            return False

    def create_group(self, replace_existing: bool = True) -> None:
        """
        Create the person group

        Args:
            replace_existing: Delete a group with the same ID first so the run starts empty
        """
        try:
            if replace_existing and self.group_exists():
                self.logger.info(f"Group {self.group_id} already exists, deleting it first")
                self._groups.delete(self.group_id)

            self._groups.create(
                self.group_id,
                name=self.group_name,
                recognition_model=RECOGNITION_MODEL
            )
        except Exception as e:
            self.logger.error(f"Error creating group {self.group_id}: {e}")
            raise

        self.persons.clear()
        self.state = GroupState.CREATED
        self.logger.info(f"Created group: {self.group_id}")

    def add_person(self, person_name: str, user_data: Optional[str] = None) -> str:
        """Add a new person to the group and return its person ID"""
        try:
            person = self._groups.create_person(
                self.group_id,
                name=person_name,
                user_data=user_data
            )
        except Exception as e:
            self.logger.error(f"Error adding person '{person_name}' to group {self.group_id}: {e}")
            raise

        person_id = str(person.person_id)
        self.persons[person_id] = GroupPerson(person_id=person_id, name=person_name)
        self.logger.info(f"Added person '{person_name}' with ID: {person_id}")
        return person_id

    def add_face_to_person(self, person_id: str, image: ImageSource, user_data: Optional[str] = None) -> str:
        """
        Attach one face image to a person

        Args:
            person_id: Person created by add_person
            image: Image URL, local file path or BGR frame
            user_data: Optional note stored with the face

        Returns:
            Persisted face ID
        """
        try:
            if is_url(image):
                face = self._groups.add_face_from_url(
                    self.group_id,
                    person_id,
                    url=image,
                    detection_model=DETECTION_MODEL,
                    user_data=user_data
                )
            else:
                face = self._groups.add_face(
                    self.group_id,
                    person_id,
                    self._image_content(image),
                    detection_model=DETECTION_MODEL,
                    user_data=user_data
                )
        except Exception as e:
            self.logger.error(f"Error adding face to person {person_id} in group {self.group_id}: {e}")
            raise

        persisted_face_id = str(face.persisted_face_id)
        if person_id in self.persons:
            self.persons[person_id].persisted_face_ids.append(persisted_face_id)
        self.logger.debug(f"Added face {persisted_face_id} to person {person_id}")
        return persisted_face_id

    def add_persons(self, images_by_name: Mapping[str, Sequence[ImageSource]], image_base_url: str = "",
                    cancel_event: Optional[threading.Event] = None) -> Dict[str, str]:
        """
        Register every named person with all of their images

        Args:
            images_by_name: Person name -> image references
            image_base_url: Prefix joined to string image references
            cancel_event: Checked before every remote call; the group stays partially populated when set

        Returns:
            Person name -> person ID
        """
        person_ids = {}
        for person_name, images in images_by_name.items():
            check_cancelled(cancel_event, f"adding person '{person_name}'")
            person_id = self.add_person(person_name)
            for image in images:
                if image_base_url and isinstance(image, str):
                    image = image_base_url + image
                check_cancelled(cancel_event, f"adding a face to '{person_name}'")
                self.add_face_to_person(person_id, image)
            person_ids[person_name] = person_id

        self.state = GroupState.POPULATED
        self.logger.info(f"Populated group {self.group_id} with {len(person_ids)} persons")
        return person_ids

    def train_group(self) -> None:
        """Trigger training; does not wait for it"""
        if self.state not in (GroupState.POPULATED, GroupState.SUCCEEDED, GroupState.FAILED):
            self.logger.warning(f"Training group {self.group_id} in state {self.state.value}")
        try:
            # polling=False: completion is tracked by wait_for_training
            self._groups.begin_train(self.group_id, polling=False)
        except Exception as e:
            self.logger.error(f"Error starting training for group {self.group_id}: {e}")
            raise

        self.state = GroupState.TRAINING
        self.logger.info(f"Training started for group: {self.group_id}")

    def get_training_status(self) -> Any:
        """Raw training result from the service"""
        return self._groups.get_training_status(self.group_id)

    def wait_for_training(
        self,
        cancel_event: Optional[threading.Event] = None,
        on_status: Optional[Callable[[FaceOperationStatus, Any], None]] = None
    ) -> Any:
        """Wait until training finishes; see TrainingMonitor.wait for errors raised"""
        try:
            result = self.training_monitor.wait(
                self.group_id,
                self.get_training_status,
                cancel_event=cancel_event,
                on_status=on_status
            )
        except TrainingError as e:
            if e.status == FaceOperationStatus.FAILED.value:
                self.state = GroupState.FAILED
            raise

        self.state = GroupState.SUCCEEDED
        return result

    def train_and_wait(self, cancel_event: Optional[threading.Event] = None,
                       on_status: Optional[Callable[[FaceOperationStatus, Any], None]] = None) -> Any:
        """Trigger training and block until it finishes"""
        self.train_group()
        return self.wait_for_training(cancel_event=cancel_event, on_status=on_status)

    def identify_faces(self, face_ids: Sequence[str]) -> List[IdentifiedFace]:
        """
        Identify detected faces against the trained group

        Args:
            face_ids: Face IDs from a recent detection

        Returns:
            One IdentifiedFace per input face, in input order; faces without a
            candidate come back unidentified
        """
        face_ids = [str(face_id) for face_id in face_ids]
        by_face_id: Dict[str, IdentifiedFace] = {}

        for start in range(0, len(face_ids), MAX_IDENTIFY_BATCH):
            batch = face_ids[start:start + MAX_IDENTIFY_BATCH]
            try:
                results = self.face_client.identify_from_large_person_group(
                    face_ids=batch,
                    large_person_group_id=self.group_id
                )
            except Exception as e:
                self.logger.error(f"Error identifying faces against group {self.group_id}: {e}")
                raise

            for result in results or []:
                face_id = str(result.face_id)
                if result.candidates:
                    candidate = result.candidates[0]
                    person_id = str(candidate.person_id)
                    by_face_id[face_id] = IdentifiedFace(
                        face_id=face_id,
                        person_id=person_id,
                        person_name=self.get_person_name(person_id),
                        confidence=candidate.confidence
                    )

        identified = [by_face_id.get(face_id) or IdentifiedFace(face_id, None, None, None) for face_id in face_ids]
        count = sum(1 for face in identified if face.is_identified)
        self.logger.info(f"Identified {count} of {len(face_ids)} face(s) against group {self.group_id}")
        return identified

    def get_person_name(self, person_id: str) -> Optional[str]:
        """Name of a person registered during this run"""
        person = self.persons.get(person_id)
        return person.name if person else None

    def delete_group(self) -> None:
        """Delete the group and everything in it from the service"""
        try:
            self._groups.delete(self.group_id)
        except Exception as e:
            self.logger.error(f"Error deleting group {self.group_id}: {e}")
            raise

        self.persons.clear()
        self.state = GroupState.DELETED
        self.logger.info(f"Deleted group: {self.group_id}")
