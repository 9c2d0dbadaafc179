from __future__ import annotations

from pygame.math import Vector2

from boidsim.sim.core.agent import Agent, FrameAgent


def _make_agent(agent_id: int) -> Agent:
    return Agent(id=agent_id, position=Vector2(), velocity=Vector2())


def test_agent_uses_slots_and_isolates_default_vectors():
    agent_a = _make_agent(1)
    agent_b = _make_agent(2)

    assert not hasattr(agent_a, "__dict__")
    assert hasattr(Agent, "__slots__")

    assert agent_a.cohesion is not agent_b.cohesion
    agent_a.separation.x = 1.5
    assert agent_b.separation.x == 0.0


def test_frame_capture_is_detached_from_agent():
    agent = Agent(id=3, position=Vector2(1.0, 2.0), velocity=Vector2(3.0, 4.0))
    frame = FrameAgent.capture(agent)

    agent.position.update(10.0, 10.0)
    agent.velocity.update(0.0, 0.0)

    assert frame.id == 3
    assert frame.position == Vector2(1.0, 2.0)
    assert frame.velocity == Vector2(3.0, 4.0)
