"""Per-agent flocking influences.

Each behavior runs one neighbor scan against the tick frame and returns a
fresh vector. None of them touch position or velocity; an empty neighborhood
always yields the zero vector.
"""

from __future__ import annotations

from pygame.math import Vector2

from ..core.agent import FrameAgent
from .neighbors import NeighborScanner


def cohesion(scanner: NeighborScanner, agent: FrameAgent, radius: float) -> tuple[Vector2, int]:
    """Centroid of neighbors strictly closer than ``radius``, with how many qualified."""
    sum_x = 0.0
    sum_y = 0.0
    count = 0
    for neighbor in scanner.scan(agent, lambda distance: distance < radius):
        position = neighbor.agent.position
        sum_x += position.x
        sum_y += position.y
        count += 1
    if count == 0:
        return Vector2(), 0
    inv = 1.0 / count
    return Vector2(sum_x * inv, sum_y * inv), count


def separation(scanner: NeighborScanner, agent: FrameAgent, radius: float, average: bool = False) -> Vector2:
    """Summed push away from neighbors at or inside ``radius``."""
    accum_x = 0.0
    accum_y = 0.0
    count = 0
    for neighbor in scanner.scan(agent, lambda distance: distance <= radius):
        accum_x -= neighbor.offset.x
        accum_y -= neighbor.offset.y
        count += 1
    if count == 0:
        return Vector2()
    if average:
        inv = 1.0 / count
        return Vector2(accum_x * inv, accum_y * inv)
    return Vector2(accum_x, accum_y)


def alignment(scanner: NeighborScanner, agent: FrameAgent, radius: float) -> Vector2:
    """Mean neighbor velocity, each term scaled by ``distance / radius``.

    Farther neighbors inside the range weigh more than nearer ones.
    """
    if radius <= 0.0:
        return Vector2()
    sum_x = 0.0
    sum_y = 0.0
    count = 0
    for neighbor in scanner.scan(agent, lambda distance: distance < radius):
        weight = neighbor.distance / radius
        velocity = neighbor.agent.velocity
        sum_x += velocity.x * weight
        sum_y += velocity.y * weight
        count += 1
    if count == 0:
        return Vector2()
    inv = 1.0 / count
    return Vector2(sum_x * inv, sum_y * inv)
