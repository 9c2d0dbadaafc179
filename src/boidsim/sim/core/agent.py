from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from pygame.math import Vector2


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2
    velocity: Vector2
    cohesion: Vector2 = field(default_factory=Vector2)
    cohesion_count: int = 0
    separation: Vector2 = field(default_factory=Vector2)
    alignment: Vector2 = field(default_factory=Vector2)
    facing: Vector2 = field(default_factory=Vector2)
    heading: float = 0.0


class FrameAgent(NamedTuple):
    """Read-only copy of an agent's kinematic state taken at the start of a tick."""

    id: int
    position: Vector2
    velocity: Vector2

    @classmethod
    def capture(cls, agent: Agent) -> "FrameAgent":
        return cls(agent.id, Vector2(agent.position), Vector2(agent.velocity))
