"""
Face Registry

Enrolls faces as (name, embedding) pairs in a local identity store and
recognizes probe embeddings by nearest cosine distance.
"""

__version__ = "1.0.0"

from .identity_store import Identity, IdentityStore
from .matcher import FaceMatcher
from .embedding_generator import EmbeddingGenerator
from .frame_buffer import LatestFrameBuffer
from .recognizer import FaceRecognizer

__all__ = [
    "Identity",
    "IdentityStore",
    "FaceMatcher",
    "EmbeddingGenerator",
    "LatestFrameBuffer",
    "FaceRecognizer"
]
