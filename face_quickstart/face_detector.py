# coding: utf-8

"""
Face Detector

Face detection and similar-face search using Azure AI Vision Face API.

Key Features:
    - Detection from image URLs, local files and numpy frames
    - Face ID retrieval for follow-up calls
    - Similar face search between face ID lists
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .base_face_manager import (
    BaseFaceManager, DETECTION_MODEL, RECOGNITION_MODEL, ImageSource, image_display_name, is_url
)


@dataclass
class SimilarFace:
    """A candidate face returned by find similar"""
    face_id: str
    confidence: float


class FaceDetector(BaseFaceManager):
    """
    Face Detector

    Wraps the detection and find-similar operations of the Face client.
    Service errors are logged and re-raised.
    """

    def detect_faces(self, image: ImageSource, image_name: Optional[str] = None) -> List[str]:
        """
        Detect the faces in an image and return their face IDs

        Args:
            image: Image URL, local file path or BGR frame
            image_name: Display name used in logs (defaults to the URL's last segment or file name)

        Returns:
            Face IDs in the order the service returned them
        """
        image_name = image_name or image_display_name(image)
        try:
            if is_url(image):
                detected_faces = self.face_client.detect_from_url(
                    url=image,
                    detection_model=DETECTION_MODEL,
                    recognition_model=RECOGNITION_MODEL,
                    return_face_id=True
                )
            else:
                detected_faces = self.face_client.detect(
                    self._image_content(image),
                    detection_model=DETECTION_MODEL,
                    recognition_model=RECOGNITION_MODEL,
                    return_face_id=True
                )
        except Exception as e:
            self.logger.error(f"Error detecting faces in {image_name}: {e}")
            raise

        face_ids = [str(face.face_id) for face in detected_faces or []]
        self.logger.info(f"Detected {len(face_ids)} face(s) in {image_name}")
        return face_ids

    def find_similar(self, face_id: str, candidate_face_ids: Sequence[str]) -> List[SimilarFace]:
        """
        Find faces among the candidates that are similar to face_id

        No local threshold is applied; results keep the service's ranking.
        """
        try:
            similar_faces = self.face_client.find_similar(
                face_id=face_id,
                face_ids=list(candidate_face_ids)
            )
        except Exception as e:
            self.logger.error(f"Error finding faces similar to {face_id}: {e}")
            raise

        results = [SimilarFace(str(face.face_id), face.confidence) for face in similar_faces or []]
        self.logger.info(f"Found {len(results)} face(s) similar to {face_id} among {len(candidate_face_ids)} candidates")
        return results
