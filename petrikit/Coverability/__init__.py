"""
Public API for :mod:`petrikit.Coverability`.

Re-exported names
-----------------
- :class:`~petrikit.Coverability.graph.CoverabilityGraph`, :class:`~petrikit.Coverability.graph.Mode`
- :func:`~petrikit.Coverability.graph.build`, :func:`~petrikit.Coverability.graph.get_cached`
- :func:`~petrikit.Coverability.lts.to_lts` and its variants
- :class:`~petrikit.Coverability.interrupt.CancellationToken`
"""

from .interrupt import CancellationToken
from .node import CoverabilityGraphNode, CoverabilityGraphEdge
from .graph import CoverabilityGraph, Mode, build, get_cached
from .lts import to_lts, to_coverability_lts, to_reachability_lts

__all__ = [
    "CancellationToken",
    "CoverabilityGraphNode",
    "CoverabilityGraphEdge",
    "CoverabilityGraph",
    "Mode",
    "build",
    "get_cached",
    "to_lts",
    "to_coverability_lts",
    "to_reachability_lts",
]
