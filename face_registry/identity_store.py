"""
Identity Store Module

Durable, ordered storage of enrolled identities in a single JSON document.
The whole collection is read at session start and rewritten after every
append; there is no locking, so callers must serialize access.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Sequence

import numpy as np

from .vector_math import as_vector, validate_embedding

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """One enrolled face: a name and its embedding."""

    name: str
    embedding: tuple

    @classmethod
    def create(cls, name: str, embedding: Sequence[float]) -> 'Identity':
        """Build an identity from any numeric sequence or array."""
        return cls(name=name, embedding=tuple(float(x) for x in as_vector(embedding)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Identity':
        """Decode one persisted entry, raising ValueError if it is malformed."""
        if not isinstance(data, dict):
            raise ValueError("entry is not an object")
        name = data.get('name')
        embedding = data.get('embedding')
        if not isinstance(name, str):
            raise ValueError("entry name is not text")
        if not isinstance(embedding, list) or not all(
                isinstance(x, (int, float)) and not isinstance(x, bool) for x in embedding):
            raise ValueError(f"entry '{name}' has a non-numeric embedding")
        try:
            values = tuple(float(x) for x in embedding)
        except OverflowError as e:
            raise ValueError(f"entry '{name}' has an out-of-range value") from e
        return cls(name=name, embedding=values)

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'embedding': list(self.embedding)}

    @property
    def vector(self) -> np.ndarray:
        return np.asarray(self.embedding, dtype=np.float64)


def check_identities(identities: Sequence[Identity],
                     expected_dim: Optional[int] = None) -> Optional[str]:
    """
    Check a collection against the store invariants.

    Every identity needs a non-empty name and a valid embedding, and all
    embeddings share one length.

    Args:
        identities: Collection to check
        expected_dim: Required embedding length (first entry decides if None)

    Returns:
        Description of the first problem found, or None
    """
    dim = expected_dim
    for index, identity in enumerate(identities):
        if not isinstance(identity.name, str) or not identity.name.strip():
            return f"entry {index} has an empty name"
        validation = validate_embedding(identity.embedding, dim)
        if not validation['valid']:
            return f"entry {index} ('{identity.name}'): {validation['reason']}"
        if dim is None:
            dim = validation['size']
    return None


class IdentityStore:
    """Append-only persisted collection of identities."""

    STATUS_OK = 'ok'
    STATUS_MISSING = 'missing'
    STATUS_CORRUPT = 'corrupt'

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize identity store.

        Args:
            config: Configuration dictionary with storage and embedding settings
        """
        self.config = config
        self.storage_config = config.get('storage', {})
        self.embedding_config = config.get('embedding', {})

        self.database_file = self.storage_config.get('database_file', 'data/faces.json')
        self.embedding_dim = self.embedding_config.get('embedding_size', 128)

        self.last_load_status: Optional[str] = None

        logger.info(f"Identity store using {self.database_file}")

    def load_all(self) -> List[Identity]:
        """
        Read the full persisted collection.

        A missing, unreadable or malformed document is treated as an empty
        collection; the outcome is kept in `last_load_status`.

        Returns:
            Identities in insertion order
        """
        if not os.path.exists(self.database_file):
            logger.info("No existing identity file found, starting fresh")
            self.last_load_status = self.STATUS_MISSING
            return []

        try:
            with open(self.database_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError("document is not an array")
            identities = [Identity.from_dict(entry) for entry in data]
            problem = check_identities(identities)
            if problem is not None:
                raise ValueError(problem)
        except (OSError, ValueError) as e:
            logger.warning(f"Identity file {self.database_file} is unreadable, treating as empty: {e}")
            self.last_load_status = self.STATUS_CORRUPT
            return []

        self.last_load_status = self.STATUS_OK
        logger.debug(f"Loaded {len(identities)} identities from {self.database_file}")
        return identities

    def append(self, identity: Identity) -> bool:
        """
        Add one identity at the end of the persisted collection.

        Args:
            identity: Identity to enroll

        Returns:
            True if the full collection was written back successfully
        """
        if not isinstance(identity.name, str) or not identity.name.strip():
            logger.error("Refusing to store identity with empty name")
            return False

        validation = validate_embedding(identity.embedding, self.embedding_dim)
        if not validation['valid']:
            logger.error(f"Refusing to store '{identity.name}': {validation['reason']}")
            return False

        identities = self.load_all()
        if identities and len(identities[0].embedding) != len(identity.embedding):
            logger.error(
                f"Refusing to store '{identity.name}': embedding size {len(identity.embedding)} "
                f"does not match stored size {len(identities[0].embedding)}"
            )
            return False

        identities.append(identity)
        if not self.save_all(identities):
            return False

        logger.info(f"Enrolled '{identity.name}' ({len(identities)} identities stored)")
        return True

    def save_all(self, identities: Sequence[Identity]) -> bool:
        """
        Replace the persisted collection.

        The document is written to a temporary file next to the target and
        then moved into place.

        Args:
            identities: Complete collection to persist

        Returns:
            True if saved successfully
        """
        problem = check_identities(identities, self.embedding_dim)
        if problem is not None:
            logger.error(f"Refusing to save identities: {problem}")
            return False

        directory = os.path.dirname(os.path.abspath(self.database_file))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile('w', encoding='utf-8', dir=directory,
                                             prefix='.faces-', suffix='.tmp',
                                             delete=False) as f:
                tmp_path = f.name
                json.dump([identity.to_dict() for identity in identities], f, allow_nan=False)
            os.replace(tmp_path, self.database_file)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save identities: {e}")
            return False
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

        logger.debug(f"Identities saved to {self.database_file}")
        return True

    def get_statistics(self) -> Dict[str, Any]:
        """Get store statistics."""
        identities = self.load_all()
        return {
            'total_identities': len(identities),
            'unique_names': len({identity.name for identity in identities}),
            'embedding_dimension': len(identities[0].embedding) if identities else self.embedding_dim,
            'database_file': self.database_file,
            'last_load_status': self.last_load_status
        }
