import math

import pytest

from beeswarm.app.headless import run_headless
from beeswarm.config import ScatterPolicy, SwarmConfig


@pytest.mark.long_run
@pytest.mark.parametrize("policy", list(ScatterPolicy))
def test_ten_minutes_of_frames_stay_finite(policy):
    config = SwarmConfig(seed=2024)
    config.oscillation.scatter_policy = policy
    config.population.count = 60

    flock = run_headless(frames=36_000, seed=None, log_path=None, config=config)

    assert flock.tick == 36_001
    for agent in flock.agents:
        assert math.isfinite(agent.position.x)
        assert math.isfinite(agent.position.y)
        assert agent.velocity.length() == pytest.approx(1.0)
