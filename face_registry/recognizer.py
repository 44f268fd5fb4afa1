"""
Face Recognition Module

Enrollment and recognition flows on top of the identity store, the matcher
and the embedding generator. Every outcome, including failures, is returned
as a result dictionary carrying a user-facing error message.
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional

import numpy as np

from .embedding_generator import EmbeddingGenerator
from .frame_buffer import LatestFrameBuffer
from .identity_store import Identity, IdentityStore
from .matcher import FaceMatcher
from .vector_math import VectorLike, validate_embedding

logger = logging.getLogger(__name__)


class FaceRecognizer:
    """Enrollment and recognition facade."""

    def __init__(self, config: Dict[str, Any],
                 store: Optional[IdentityStore] = None,
                 matcher: Optional[FaceMatcher] = None,
                 embedding_generator: Optional[EmbeddingGenerator] = None):
        """
        Initialize face recognizer.

        Args:
            config: Configuration dictionary
            store: Identity store shared with other flows (created from config if None)
            matcher: Face matcher (created from config if None)
            embedding_generator: Embedding generator (created without a model if None)
        """
        self.config = config
        self.embedding_dim = config.get('embedding', {}).get('embedding_size', 128)

        self.store = store if store is not None else IdentityStore(config)
        self.matcher = matcher if matcher is not None else FaceMatcher(config)
        self.embedding_generator = (embedding_generator if embedding_generator is not None
                                    else EmbeddingGenerator(config))

        self.reset_statistics()

        logger.info("Face recognizer initialized successfully")

    def enroll_embedding(self, name: str, embedding: VectorLike) -> Dict[str, Any]:
        """
        Enroll a person from a precomputed embedding.

        Args:
            name: Person name
            embedding: Face embedding

        Returns:
            Enrollment result
        """
        person_name = name.strip() if isinstance(name, str) else ''
        result = {
            'success': False,
            'person_name': person_name,
            'error': None
        }

        if not person_name:
            result['error'] = 'Please enter a name.'
            return result

        validation = validate_embedding(embedding, self.embedding_dim)
        if not validation['valid']:
            result['error'] = f"Invalid embedding: {validation['reason']}"
            self.stats['failed_enrollments'] += 1
            return result

        if not self.store.append(Identity.create(person_name, embedding)):
            result['error'] = 'Failed to save face. Please try again.'
            self.stats['failed_enrollments'] += 1
            return result

        self.stats['enrollments'] += 1
        result['success'] = True
        return result

    def enroll_face(self, name: str, face_image: np.ndarray) -> Dict[str, Any]:
        """
        Enroll a person from a cropped face image.

        Args:
            name: Person name
            face_image: Cropped face image

        Returns:
            Enrollment result
        """
        if not isinstance(name, str) or not name.strip():
            return {'success': False, 'person_name': '', 'error': 'Please enter a name.'}

        embedding = self.embedding_generator.generate_embedding(face_image)
        if embedding is None:
            self.stats['failed_embeddings'] += 1
            return {'success': False, 'person_name': name.strip(), 'error': 'Failed to extract embedding.'}

        return self.enroll_embedding(name, embedding)

    def recognize_embedding(self, probe: VectorLike) -> Dict[str, Any]:
        """
        Identify a probe embedding against all enrolled identities.

        Args:
            probe: Probe embedding

        Returns:
            Recognition result; 'person_name' is the unknown label when no
            identity is close enough
        """
        identities = self.store.load_all()
        match = self.matcher.match(probe, identities)

        self.stats['recognitions'] += 1
        if match['matched']:
            self.stats['successful_recognitions'] += 1
            logger.info(f"Recognized '{match['name']}' (distance {match['distance']:.4f})")
        else:
            logger.info("No enrolled identity matched")

        return {
            'success': True,
            'matched': match['matched'],
            'person_name': match['label'],
            'distance': match['distance'],
            'candidates': len(identities),
            'store_status': self.store.last_load_status,
            'error': None
        }

    def recognize_face(self, face_image: np.ndarray) -> Dict[str, Any]:
        """
        Identify a cropped face image.

        Args:
            face_image: Detected face crop

        Returns:
            Recognition result
        """
        embedding = self.embedding_generator.generate_embedding(face_image)
        if embedding is None:
            self.stats['failed_embeddings'] += 1
            return {
                'success': False,
                'matched': False,
                'person_name': self.matcher.unknown_label,
                'distance': None,
                'error': 'Failed to extract embedding.'
            }

        return self.recognize_embedding(embedding)

    def capture_frame(self, frame_buffer: LatestFrameBuffer) -> Dict[str, Any]:
        """
        Take the most recent camera frame for enrollment or recognition.

        Args:
            frame_buffer: Buffer filled by the frame delivery thread

        Returns:
            Capture result with the frame on success
        """
        frame = frame_buffer.get()
        if frame is None:
            return {'success': False, 'frame': None, 'error': 'No camera frame available.'}
        return {'success': True, 'frame': frame, 'error': None}

    def get_recognition_statistics(self) -> Dict[str, Any]:
        """Get recognition system statistics."""
        store_stats = self.store.get_statistics()

        return {
            **self.stats,
            **store_stats,
            'recognition_rate': (
                self.stats['successful_recognitions'] /
                max(1, self.stats['recognitions'])
            )
        }

    def reset_statistics(self):
        """Reset recognition statistics."""
        self.stats = {
            'enrollments': 0,
            'failed_enrollments': 0,
            'recognitions': 0,
            'successful_recognitions': 0,
            'failed_embeddings': 0,
            'session_start': datetime.now().isoformat()
        }
