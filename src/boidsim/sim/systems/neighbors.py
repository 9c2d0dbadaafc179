from __future__ import annotations

import math
from typing import Callable, Iterator, List, NamedTuple, Sequence

from pygame.math import Vector2

from ..core.agent import FrameAgent


class Neighbor(NamedTuple):
    agent: FrameAgent
    offset: Vector2
    distance: float


class NeighborScanner:
    """Brute-force neighbor scan over the frame captured at the start of a tick.

    Every scan visits each other agent exactly once. The reference agent is
    skipped by id, so agents sharing a position still see each other.
    """

    def __init__(self, frame: Sequence[FrameAgent]) -> None:
        self._frame: List[FrameAgent] = list(frame)
        self.checks = 0

    def scan(self, reference: FrameAgent, accept: Callable[[float], bool]) -> Iterator[Neighbor]:
        ref_id = reference.id
        pos_x = reference.position.x
        pos_y = reference.position.y
        for other in self._frame:
            if other.id == ref_id:
                continue
            self.checks += 1
            offset_x = other.position.x - pos_x
            offset_y = other.position.y - pos_y
            distance = math.sqrt(offset_x * offset_x + offset_y * offset_y)
            if accept(distance):
                yield Neighbor(other, Vector2(offset_x, offset_y), distance)
