"""Face embedding comparison and detector variants."""
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import numpy as np

from attendance_api.utils.errors import (
    EmbeddingLengthMismatchError, MultipleFacesError, NoFaceDetectedError, ValidationError
)
from attendance_api.utils.validators import Validator

@dataclass(frozen=True)
class FaceMatchResult:
    """Comparison of a captured embedding against a reference."""
    distance: float
    confidence: float
    is_match: bool

    def to_dict(self) -> Dict:
        return {
            'distance': round(self.distance, 6),
            'confidence': round(self.confidence, 4),
            'is_match': self.is_match
        }

class FaceService:
    """Embedding math used for enrollment and verification."""

    @staticmethod
    def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
        vec_a = np.asarray(a, dtype=np.float64)
        vec_b = np.asarray(b, dtype=np.float64)
        if vec_a.shape != vec_b.shape:
            raise EmbeddingLengthMismatchError(
                f'Embedding dimensions do not match ({vec_a.size} vs {vec_b.size})'
            )
        return float(np.linalg.norm(vec_a - vec_b))

    @classmethod
    def compare(cls, reference: Sequence[float], captured: Sequence[float],
                threshold: float = 0.6) -> FaceMatchResult:
        """Score ``captured`` against ``reference``.

        confidence = max(0, 1 - d / sqrt(N)); a match needs
        confidence >= threshold.
        """
        if len(reference) == 0 or len(captured) == 0:
            raise ValidationError('Embeddings must not be empty')

        distance = cls.euclidean_distance(reference, captured)
        confidence = max(0.0, 1.0 - distance / float(np.sqrt(len(reference))))

        return FaceMatchResult(
            distance=distance,
            confidence=confidence,
            is_match=confidence >= threshold
        )

    @staticmethod
    def validate_embedding(value: Any, length: int) -> List[float]:
        """Parse an embedding of ``length`` components in [-1, 1]."""
        vector = Validator.vector(value)
        if len(vector) != length:
            raise EmbeddingLengthMismatchError(
                f'Embedding must have {length} components, got {len(vector)}'
            )
        if any(component < -1.0 or component > 1.0 for component in vector):
            raise ValidationError('Embedding components must be between -1 and 1')
        return vector

class FaceDetector:
    """Turns a capture payload into exactly one embedding."""

    kind = 'base'

    def __init__(self, embedding_length: int):
        self.embedding_length = embedding_length

    def extract(self, payload: Dict) -> List[float]:
        raise NotImplementedError

class ClientDescriptorDetector(FaceDetector):
    """Descriptors computed in the browser by the face detection model.

    The payload carries ``faces`` (every descriptor found in the frame) or a
    single ``embedding``. Zero or several faces are rejected.
    """

    kind = 'client'

    def extract(self, payload: Dict) -> List[float]:
        if 'faces' in payload:
            faces = payload['faces']
            if not isinstance(faces, list):
                raise ValidationError('faces must be a list of descriptors')
        elif payload.get('embedding') is not None:
            faces = [payload['embedding']]
        else:
            faces = []

        if not faces:
            raise NoFaceDetectedError()
        if len(faces) > 1:
            raise MultipleFacesError()

        return FaceService.validate_embedding(faces[0], self.embedding_length)

class MockFaceDetector(FaceDetector):
    """Random descriptors for demos without a camera model."""

    kind = 'mock'

    def __init__(self, embedding_length: int, seed: int = None):
        super().__init__(embedding_length)
        self._rng = np.random.default_rng(seed)

    def extract(self, payload: Dict) -> List[float]:
        return self._rng.uniform(0.0, 1.0, self.embedding_length).tolist()

DETECTORS = {
    ClientDescriptorDetector.kind: ClientDescriptorDetector,
    MockFaceDetector.kind: MockFaceDetector,
}

def build_detector(kind: str, embedding_length: int) -> FaceDetector:
    """Instantiate the configured detector variant."""
    try:
        detector_class = DETECTORS[kind]
    except KeyError:
        raise ValueError(f"Unknown face detector '{kind}', expected one of {sorted(DETECTORS)}")
    return detector_class(embedding_length)
