# coding: utf-8

"""
Shared fixtures: an in-memory stand-in for the Face service and a fake clock
so training waits run instantly.
"""

import io
import itertools
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from face_quickstart.config import FAMILY_IMAGES, GROUP_FACES_URL, IDENTIFICATION_IMAGE, IMAGE_BASE_URL, SINGLE_FACE_URL
from face_quickstart.quickstart import FaceQuickstart
from face_quickstart.training_monitor import TrainingMonitor


class FakeFaceService:
    """
    Keeps just enough state to answer the calls the quickstart makes.
    Every image is registered with the identities of the people on it;
    detection hands out a fresh face ID per face, like the real service.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.images: Dict[str, List[str]] = {}
        self.face_identity: Dict[str, str] = {}
        self.groups: Dict[str, Dict] = {}
        self.training_statuses: List[str] = ["running", "succeeded"]
        self.training_message: Optional[str] = None
        self.calls: List[tuple] = []
        self.fail_on_url: Optional[str] = None

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids):04d}"

    def register_image(self, url: str, identities: List[str]):
        self.images[url] = list(identities)

    def detect(self, key: str) -> List[SimpleNamespace]:
        faces = []
        for identity in self.images.get(key, []):
            face_id = self.next_id("face")
            self.face_identity[face_id] = identity
            faces.append(SimpleNamespace(face_id=face_id))
        return faces

    def group(self, group_id: str) -> Dict:
        if group_id not in self.groups:
            raise ResourceNotFoundError(message=f"Large person group {group_id} is not found.")
        return self.groups[group_id]


class FakeFaceClient:
    def __init__(self, service: FakeFaceService):
        self.service = service

    def detect_from_url(self, *, url, detection_model=None, recognition_model=None, return_face_id=None, **kwargs):
        self.service.calls.append(("detect_from_url", url, return_face_id))
        if url == self.service.fail_on_url:
            raise HttpResponseError(message="(InvalidURL) Invalid image URL.")
        return self.service.detect(url)

    def detect(self, image_content, *, detection_model=None, recognition_model=None, return_face_id=None, **kwargs):
        self.service.calls.append(("detect", len(image_content), return_face_id))
        return self.service.detect("<bytes>")

    def find_similar(self, *, face_id, face_ids, **kwargs):
        self.service.calls.append(("find_similar", face_id, list(face_ids)))
        identity = self.service.face_identity[face_id]
        return [
            SimpleNamespace(face_id=candidate, confidence=0.93)
            for candidate in face_ids
            if self.service.face_identity.get(candidate) == identity
        ]

    def identify_from_large_person_group(self, *, face_ids, large_person_group_id, **kwargs):
        self.service.calls.append(("identify", list(face_ids), large_person_group_id))
        if len(face_ids) > 10:
            raise HttpResponseError(message="(BadArgument) The argument faceIds has too many items.")
        group = self.service.group(large_person_group_id)
        results = []
        for face_id in face_ids:
            identity = self.service.face_identity.get(face_id)
            candidates = [
                SimpleNamespace(person_id=person_id, confidence=0.91)
                for person_id, person in group["persons"].items()
                if person["name"] == identity and person["faces"]
            ]
            results.append(SimpleNamespace(face_id=face_id, candidates=candidates))
        return results


class FakeLargePersonGroupOperations:
    def __init__(self, service: FakeFaceService):
        self.service = service

    def get(self, large_person_group_id, **kwargs):
        group = self.service.group(large_person_group_id)
        return SimpleNamespace(large_person_group_id=large_person_group_id, name=group["name"])

    def create(self, large_person_group_id, *, name, user_data=None, recognition_model=None, **kwargs):
        self.service.calls.append(("create_group", large_person_group_id, name, recognition_model))
        if large_person_group_id in self.service.groups:
            raise HttpResponseError(message="(PersonGroupExists) The person group already exists.")
        self.service.groups[large_person_group_id] = {"name": name, "persons": {}, "trained": False}

    def delete(self, large_person_group_id, **kwargs):
        self.service.calls.append(("delete_group", large_person_group_id))
        self.service.group(large_person_group_id)
        del self.service.groups[large_person_group_id]

    def create_person(self, large_person_group_id, *, name, user_data=None, **kwargs):
        group = self.service.group(large_person_group_id)
        person_id = self.service.next_id("person")
        group["persons"][person_id] = {"name": name, "faces": []}
        return SimpleNamespace(person_id=person_id)

    def add_face_from_url(self, large_person_group_id, person_id, *, url, detection_model=None, user_data=None, **kwargs):
        self.service.calls.append(("add_face_from_url", person_id, url))
        if url == self.service.fail_on_url:
            raise HttpResponseError(message="(InvalidImage) No face detected in the image.")
        return self._add(large_person_group_id, person_id)

    def add_face(self, large_person_group_id, person_id, image_content, *, detection_model=None, user_data=None, **kwargs):
        self.service.calls.append(("add_face", person_id, len(image_content)))
        return self._add(large_person_group_id, person_id)

    def _add(self, large_person_group_id, person_id):
        persisted_face_id = self.service.next_id("persisted")
        self.service.group(large_person_group_id)["persons"][person_id]["faces"].append(persisted_face_id)
        return SimpleNamespace(persisted_face_id=persisted_face_id)

    def begin_train(self, large_person_group_id, **kwargs):
        self.service.calls.append(("begin_train", large_person_group_id, kwargs))
        self.service.group(large_person_group_id)
        self._statuses = iter(self.service.training_statuses)
        self._last = "notStarted"

    def get_training_status(self, large_person_group_id, **kwargs):
        self.service.calls.append(("get_training_status", large_person_group_id))
        self._last = next(self._statuses, self._last)
        return SimpleNamespace(status=self._last, message=self.service.training_message)


class FakeClock:
    """Monotonic clock that only moves when someone waits on it"""

    def __init__(self):
        self.now = 0.0
        self.waits: List[float] = []

    def __call__(self) -> float:
        return self.now


class FakeCancelEvent:
    """threading.Event stand-in: wait() advances the fake clock; optionally reports cancellation on the n-th wait"""

    def __init__(self, clock: FakeClock, cancel_on_wait: Optional[int] = None):
        self.clock = clock
        self.cancel_on_wait = cancel_on_wait
        self.cancelled = False

    def set(self):
        self.cancelled = True

    def is_set(self) -> bool:
        return self.cancelled

    def wait(self, timeout=None) -> bool:
        self.clock.waits.append(timeout)
        self.clock.now += timeout
        if self.cancel_on_wait is not None and len(self.clock.waits) >= self.cancel_on_wait:
            self.cancelled = True
        return self.cancelled


@pytest.fixture
def face_service():
    service = FakeFaceService()
    service.register_image(SINGLE_FACE_URL, ["JFK"])
    service.register_image(GROUP_FACES_URL, ["Jackie", "JFK", "Caroline", "John Jr."])
    for person_name, images in FAMILY_IMAGES.items():
        for image in images:
            service.register_image(IMAGE_BASE_URL + image, [person_name])
    service.register_image(IMAGE_BASE_URL + IDENTIFICATION_IMAGE, ["Family1-Dad", "Family1-Mom", "Stranger"])
    return service


@pytest.fixture
def face_client(face_service):
    return FakeFaceClient(face_service)


@pytest.fixture
def face_admin_client(face_service):
    return SimpleNamespace(large_person_group=FakeLargePersonGroupOperations(face_service))


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def training_monitor(fake_clock):
    return TrainingMonitor(poll_interval=1.0, backoff=2.0, max_interval=10.0, timeout=300.0, clock=fake_clock)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def quickstart(face_client, face_admin_client, training_monitor, output):
    return FaceQuickstart(face_client, face_admin_client, training_monitor=training_monitor, output=output)
