from __future__ import annotations

from typing import Dict, Optional

from ..exceptions import UnboundedError
from ..TS.transition_system import State, TransitionSystem
from .graph import CoverabilityGraph, Mode
from .interrupt import CancellationToken, check_cancelled

MARKING_KEY = "marking"
NODE_KEY = "coverability_node"
TRANSITION_KEY = "transition"
EDGE_KEY = "coverability_edge"
NET_KEY = "petri_net"


def _convert(
    graph: CoverabilityGraph,
    *,
    reachability: bool,
    check_bounded: bool,
    cancel: Optional[CancellationToken],
) -> TransitionSystem:
    kind = "Reachability" if reachability else "Coverability"
    lts = TransitionSystem(f"{kind} graph of {graph.net.name}")
    lts.put_extension(NET_KEY, graph.net)

    states: Dict[int, State] = {}
    for node in graph.nodes:
        check_cancelled(cancel)
        if check_bounded and node.marking.has_omega():
            raise UnboundedError(graph.net.name)
        state = lts.create_state(f"s{node.index}")
        state.put_extension(MARKING_KEY, node.marking)
        state.put_extension(NODE_KEY, node)
        states[node.index] = state

    for edge in graph.edges:
        check_cancelled(cancel)
        arc = lts.create_arc(
            states[edge.source.index], states[edge.target.index], edge.label
        )
        arc.put_extension(TRANSITION_KEY, edge.transition)
        arc.put_extension(EDGE_KEY, edge)

    lts.initial_state = states[graph.initial_node.index]
    return lts


def to_lts(
    graph: CoverabilityGraph, *, cancel: Optional[CancellationToken] = None
) -> TransitionSystem:
    """
    Convert a coverability/reachability graph into a :class:`TransitionSystem`.

    One state per graph node (state id ``s<index>``, extension
    ``"marking"``), one arc per graph edge labelled with the transition
    label (extension ``"transition"``); parallel edges become parallel
    arcs. Each call returns a new, independent transition system.

    :param graph: Explored graph.
    :type graph: CoverabilityGraph
    :param cancel: Optional token checked for every state and arc.
    :type cancel: Optional[CancellationToken]
    :returns: The derived transition system.
    :rtype: TransitionSystem
    """
    return _convert(
        graph,
        reachability=graph.mode is Mode.REACHABILITY,
        check_bounded=False,
        cancel=cancel,
    )


to_coverability_lts = to_lts


def to_reachability_lts(
    graph: CoverabilityGraph, *, cancel: Optional[CancellationToken] = None
) -> TransitionSystem:
    """
    Like :func:`to_lts` but insists on a finite reachability graph.

    :raises UnboundedError: If any node marking contains OMEGA.
    """
    return _convert(graph, reachability=True, check_bounded=True, cancel=cancel)
