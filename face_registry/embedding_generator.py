"""
Embedding Generation Module

Prepares cropped face images for an external embedding model and turns the
model output into a validated embedding vector. The model itself is a black
box: any callable taking an RGB float32 image and returning a sequence of
floats.
"""

import logging
from typing import Any, Callable, Dict, Optional, Sequence

import cv2
import numpy as np

from .vector_math import as_vector, validate_embedding

logger = logging.getLogger(__name__)

EmbeddingModel = Callable[[np.ndarray], Sequence[float]]


class EmbeddingGenerator:
    """Generate face embeddings through an injected inference model."""

    def __init__(self, config: Dict[str, Any], model: Optional[EmbeddingModel] = None):
        """
        Initialize embedding generator.

        Args:
            config: Configuration dictionary with embedding settings
            model: Inference callable (image -> embedding)
        """
        self.config = config.get('embedding', {})
        self.embedding_size = self.config.get('embedding_size', 128)
        self.input_size = tuple(self.config.get('input_size', [160, 160]))
        self.normalization = self.config.get('normalization', False)

        self.model = model

        logger.info(f"Embedding generator initialized with input size {self.input_size[0]}x{self.input_size[1]}")

    def preprocess_face(self, face_image: np.ndarray) -> Optional[np.ndarray]:
        """
        Convert a cropped face to the model input format.

        Args:
            face_image: Grayscale, BGR or BGRA face crop

        Returns:
            RGB float32 image of the configured size in [0, 1], or None
        """
        if face_image is None or not isinstance(face_image, np.ndarray) or face_image.size == 0:
            return None

        image = face_image
        if image.dtype != np.uint8:
            # If normalized [0,1], scale back to [0,255]
            if image.max() <= 1.0:
                image = image * 255
            image = np.clip(image, 0, 255).astype(np.uint8)

        if image.ndim == 3 and image.shape[2] == 1:
            image = np.ascontiguousarray(image[:, :, 0])

        if image.ndim == 2:
            image = cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)
        elif image.ndim == 3 and image.shape[2] == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        elif image.ndim == 3 and image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGB)
        else:
            logger.warning(f"Unsupported face image shape: {face_image.shape}")
            return None

        width, height = self.input_size
        image = cv2.resize(image, (int(width), int(height)), interpolation=cv2.INTER_AREA)

        return image.astype(np.float32) / 255.0

    def generate_embedding(self, face_image: np.ndarray) -> Optional[np.ndarray]:
        """
        Generate embedding from a cropped face image.

        Args:
            face_image: Cropped face image

        Returns:
            Embedding vector or None if generation fails
        """
        if self.model is None:
            logger.error("No embedding model configured")
            return None

        prepared = self.preprocess_face(face_image)
        if prepared is None:
            logger.warning("Face preprocessing failed")
            return None

        try:
            output = self.model(prepared)
            embedding = as_vector(output)
        except Exception as e:
            logger.error(f"Embedding generation failed: {e}")
            return None

        validation = validate_embedding(embedding, self.embedding_size)
        if not validation['valid']:
            logger.error(f"Invalid embedding from model: {validation['reason']}")
            return None

        if self.normalization:
            embedding = self.normalize_embedding(embedding)

        return embedding

    def normalize_embedding(self, embedding: np.ndarray) -> np.ndarray:
        """
        Normalize embedding vector using L2 normalization.

        Args:
            embedding: Raw embedding vector

        Returns:
            Normalized embedding vector
        """
        if embedding is None or len(embedding) == 0:
            return embedding

        # L2 normalization
        norm = np.linalg.norm(embedding)
        if norm == 0:
            return embedding

        return embedding / norm
