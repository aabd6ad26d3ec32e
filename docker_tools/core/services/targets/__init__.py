"""
Per-target install strategies.
"""

from docker_tools.core.models.target import TargetName
from docker_tools.core.services.targets.base import TargetStrategy
from docker_tools.core.services.targets.buildx import BuildxStrategy
from docker_tools.core.services.targets.compose import ComposeStrategy
from docker_tools.core.services.targets.engine import EngineStrategy

STRATEGIES: dict[TargetName, type[TargetStrategy]] = {
    TargetName.ENGINE: EngineStrategy,
    TargetName.COMPOSE: ComposeStrategy,
    TargetName.BUILDX: BuildxStrategy,
}


def strategy_for(name: TargetName, *args, **kwargs) -> TargetStrategy:
    """Instantiate the strategy of ``name`` with the usual constructor arguments."""
    return STRATEGIES[name](*args, **kwargs)


__all__ = [
    "STRATEGIES",
    "BuildxStrategy",
    "ComposeStrategy",
    "EngineStrategy",
    "TargetStrategy",
    "strategy_for",
]
