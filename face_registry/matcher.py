"""
Face Matching Module

Nearest-neighbour search of a probe embedding over enrolled identities
using cosine distance and a strict acceptance threshold.
"""

import logging
import math
from typing import Dict, Any, Optional, Sequence

from .identity_store import Identity
from .vector_math import VectorLike, cosine_distance

logger = logging.getLogger(__name__)


class FaceMatcher:
    """Stateless matcher: (probe, candidates) -> best identity or unknown."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize face matcher.

        Args:
            config: Configuration dictionary with recognition settings
        """
        self.recognition_config = config.get('recognition', {})

        # Match is accepted only when distance < threshold
        self.threshold = float(self.recognition_config.get('match_threshold', 0.6))
        self.unknown_label = self.recognition_config.get('unknown_label', 'Unknown')

    def match(self, probe: VectorLike, candidates: Sequence[Identity]) -> Dict[str, Any]:
        """
        Find the enrolled identity closest to a probe embedding.

        Args:
            probe: Probe embedding vector
            candidates: Enrolled identities, scanned in order

        Returns:
            Match result with 'matched', 'name', 'label', 'distance' and 'index'
        """
        best_index = None
        best_distance = math.inf

        for index, candidate in enumerate(candidates):
            distance = cosine_distance(probe, candidate.embedding)
            # Strict comparison keeps the first of equally distant candidates
            if distance < best_distance:
                best_index = index
                best_distance = distance

        result = {
            'matched': False,
            'name': None,
            'label': self.unknown_label,
            'distance': best_distance if best_index is not None else None,
            'index': best_index
        }

        if best_index is not None and best_distance < self.threshold:
            name = candidates[best_index].name
            result.update({
                'matched': True,
                'name': name,
                'label': name
            })
            logger.debug(f"Matched '{name}' at distance {best_distance:.4f}")
        else:
            logger.debug(f"No match among {len(candidates)} candidates")

        return result

    def best_name(self, probe: VectorLike, candidates: Sequence[Identity]) -> Optional[str]:
        """Name of the matching identity, or None."""
        return self.match(probe, candidates)['name']
