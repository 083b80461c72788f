"""
petrikit: state-space exploration for Petri nets.

Re-exported classes
-------------------
- :class:`~petrikit.PN.petri_net.PetriNet`, :class:`~petrikit.PN.marking.Marking`,
  :class:`~petrikit.PN.token.Token`
- :class:`~petrikit.TS.transition_system.TransitionSystem`
- :class:`~petrikit.Coverability.graph.CoverabilityGraph` and its entry points
"""

from __future__ import annotations
from typing import List

from .version import __version__
from .PN import Marking, PetriNet, Token
from .TS import TransitionSystem
from .Coverability import (
    CancellationToken,
    CoverabilityGraph,
    Mode,
    build,
    get_cached,
    to_lts,
    to_reachability_lts,
)

__all__: List[str] = [
    "__version__",
    "Marking",
    "PetriNet",
    "Token",
    "TransitionSystem",
    "CancellationToken",
    "CoverabilityGraph",
    "Mode",
    "build",
    "get_cached",
    "to_lts",
    "to_reachability_lts",
]
