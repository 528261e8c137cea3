"""Target room weights per face, with a permissive text form."""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


def parse_weights_line(line: str) -> List[float]:
    """Positive finite numbers of a whitespace-separated line; anything else is dropped."""
    weights = []
    for token in line.split():
        try:
            value = float(token)
        except ValueError:
            continue
        if math.isfinite(value) and value > 0:
            weights.append(value)
    return weights


class RoomsDefinition:
    """Room weights for each face, indexed in region order."""

    def __init__(self, rooms: Optional[Sequence[Sequence[float]]] = None):
        self._rooms_per_region: List[List[float]] = [list(r) for r in (rooms or [])]
        self._listeners: List[Callable[[], None]] = []

    def room_weights(self, i: int) -> List[float]:
        """Weights for face ``i``; a single room when none are configured."""
        if 0 <= i < len(self._rooms_per_region) and self._rooms_per_region[i]:
            return list(self._rooms_per_region[i])
        return [1.0]

    def num_rooms(self, i: int) -> int:
        return len(self.room_weights(i))

    def num_regions(self) -> int:
        return len(self._rooms_per_region)

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def encode(self) -> str:
        return "\n".join(
            " ".join(f"{w:g}" for w in rooms) for rooms in self._rooms_per_region
        )

    def decode(self, text: str) -> None:
        rooms_per_region = []
        for line in text.splitlines():
            if not line.strip():
                continue
            rooms_per_region.append(parse_weights_line(line))
        self._rooms_per_region = rooms_per_region
        logger.debug("Decoded room weights for %d faces", len(rooms_per_region))
        for listener in self._listeners:
            listener()

    @classmethod
    def from_text(cls, text: str) -> "RoomsDefinition":
        definition = cls()
        definition.decode(text)
        return definition


def default_rooms_definition() -> RoomsDefinition:
    return RoomsDefinition([[1, 1, 1, 1]])


def default_many_rooms() -> RoomsDefinition:
    return RoomsDefinition([[1, 1, 1, 1], [2, 1], [1], [3, 1, 1]])
