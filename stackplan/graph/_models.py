from enum import Enum

from stackplan.core import FrozenDataModel


class EdgeStrength(str, Enum):
    HARD = "hard"
    """Dependency must exist and, if monitored, be healthy."""

    SOFT = "soft"
    """Ordering only."""


class DependencyEdge(FrozenDataModel):
    """Declared dependency.

    Attributes:
        source: Dependent resource identifier.
        target: Dependency resource identifier.
        strength: Edge strength.
    """

    source: str
    target: str
    strength: EdgeStrength = EdgeStrength.HARD
