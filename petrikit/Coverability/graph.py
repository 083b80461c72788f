"""
Coverability and reachability graphs of Petri nets.

The graph is built with the Karp–Miller procedure in its graph-sharing
form: markings are explored breadth first, every marking is represented by
exactly one node, and (in coverability mode) a fired marking that strictly
covers one of its ancestors is widened by setting the increased places to
OMEGA. Widening makes the coverability graph finite for every net.

Reachability mode skips widening. It only terminates for bounded nets;
establishing boundedness is the caller's responsibility.

Built graphs are cached on the net as an extension (see :func:`get_cached`)
and dropped automatically on the first structural change of the net.

References
----------
- Karp & Miller (1969), J. Comput. Syst. Sci., "Parallel program schemata".
- Murata (1989), Proc. IEEE, "Petri nets: Properties, analysis and applications".
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

import networkx as nx

from ..Graph.extension import ExtensionProperty
from ..Graph.listener import StructuralExtensionRemover
from ..PN.marking import Marking
from ..PN.petri_net import PetriNet, Transition
from .interrupt import CancellationToken, check_cancelled
from .node import CoverabilityGraphEdge, CoverabilityGraphNode

logger = logging.getLogger(__name__)


class Mode(Enum):
    """Exploration mode; the value doubles as the cache extension key."""

    COVERABILITY = "coverability"
    REACHABILITY = "reachability"


class CoverabilityGraph:
    """
    Explored coverability (or reachability) graph of a Petri net.

    Instances are normally obtained from :func:`build` or :func:`get_cached`,
    which explore the full graph. Downstream code should treat them as
    read-only values.

    :param net: Source net.
    :type net: PetriNet
    :param mode: Exploration mode.
    :type mode: Mode
    """

    def __init__(self, net: PetriNet, mode: Mode = Mode.COVERABILITY) -> None:
        self._net = net
        self._mode = mode
        self._initial_marking = net.initial_marking
        self._states: Dict[Marking, CoverabilityGraphNode] = {}
        self._nodes: List[CoverabilityGraphNode] = []
        self._edges: List[CoverabilityGraphEdge] = []
        self._preset: Dict[int, List[CoverabilityGraphEdge]] = {}
        self._worklist: Deque[CoverabilityGraphNode] = deque()
        self._get_node(self._initial_marking, None, None, None)

    # ------------------------------------------------------------------
    # Exploration
    # ------------------------------------------------------------------
    def calculate_nodes(self, *, cancel: Optional[CancellationToken] = None) -> int:
        """
        Explore until no unvisited node remains.

        :param cancel: Optional token checked before every transition firing.
        :returns: Number of nodes.
        :raises AnalysisCancelledError: If ``cancel`` was triggered.
        """
        while self._worklist:
            self._visit(self._worklist.popleft(), cancel)
        return len(self._nodes)

    @property
    def complete(self) -> bool:
        return not self._worklist

    def _visit(
        self, node: CoverabilityGraphNode, cancel: Optional[CancellationToken]
    ) -> None:
        marking = node.marking
        for t in self._net.transitions:
            check_cancelled(cancel)
            if not self._net.is_enabled(marking, t):
                continue
            fired = self._net.fire(marking, t)
            covered: Optional[CoverabilityGraphNode] = None
            if self._mode is Mode.COVERABILITY:
                covered, fired = self._check_cover(fired, node)
            target = self._get_node(fired, node, t, covered)
            edge = CoverabilityGraphEdge(node, t, target)
            node._postset_edges.append(edge)
            self._preset.setdefault(target.index, []).append(edge)
            self._edges.append(edge)

    @staticmethod
    def _check_cover(
        marking: Marking, parent: CoverabilityGraphNode
    ) -> Tuple[Optional[CoverabilityGraphNode], Marking]:
        # nearest ancestor against which some finite place can be widened
        for ancestor in parent.ancestors():
            widened = marking.cover(ancestor.marking)
            if widened is not None:
                return ancestor, widened
        return None, marking

    def _get_node(
        self,
        marking: Marking,
        parent: Optional[CoverabilityGraphNode],
        transition: Optional[Transition],
        covered: Optional[CoverabilityGraphNode],
    ) -> CoverabilityGraphNode:
        node = self._states.get(marking)
        if node is None:
            node = CoverabilityGraphNode(
                self, len(self._nodes), marking, parent, transition, covered
            )
            self._states[marking] = node
            self._nodes.append(node)
            self._worklist.append(node)
        return node

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def net(self) -> PetriNet:
        return self._net

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def initial_marking(self) -> Marking:
        """Initial marking of the net at the time the graph was built."""
        return self._initial_marking

    @property
    def initial_node(self) -> CoverabilityGraphNode:
        return self._nodes[0]

    @property
    def nodes(self) -> List[CoverabilityGraphNode]:
        return list(self._nodes)

    @property
    def edges(self) -> List[CoverabilityGraphEdge]:
        return list(self._edges)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def get_node(self, marking: Marking) -> Optional[CoverabilityGraphNode]:
        """
        Node holding ``marking``, or ``None`` if it was not explored.

        Lookups go through the marking hash. Removing a place that holds
        tokens in some explored marking changes that marking's hash, so
        query a graph only while its net is structurally unchanged; graphs
        obtained from :func:`get_cached` are dropped on such changes anyway.
        """
        return self._states.get(marking)

    def postset_edges(self, node: CoverabilityGraphNode) -> List[CoverabilityGraphEdge]:
        return list(node.postset_edges)

    def preset_edges(self, node: CoverabilityGraphNode) -> List[CoverabilityGraphEdge]:
        return list(self._preset.get(node.index, []))

    def has_omega(self) -> bool:
        """``True`` if some node marking contains OMEGA (the net is unbounded)."""
        return any(n.marking.has_omega() for n in self._nodes)

    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Export as a NetworkX MultiDiGraph.

        Nodes are the node indices with attributes ``marking`` (the
        :class:`Marking`) and ``initial``; edges carry ``label`` and
        ``transition`` (transition id). Parallel edges are preserved.
        """
        G = nx.MultiDiGraph(name=f"{self._mode.value} graph of {self._net.name}")
        for node in self._nodes:
            G.add_node(node.index, marking=node.marking, initial=node.index == 0)
        for edge in self._edges:
            G.add_edge(
                edge.source.index,
                edge.target.index,
                label=edge.label,
                transition=edge.transition.id,
            )
        return G

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return (
            f"CoverabilityGraph({self._net.name!r}, mode={self._mode.value}, "
            f"nodes={len(self._nodes)}, edges={len(self._edges)})"
        )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build(
    net: PetriNet,
    mode: Mode = Mode.COVERABILITY,
    *,
    cancel: Optional[CancellationToken] = None,
) -> CoverabilityGraph:
    """
    Build the complete coverability or reachability graph of ``net``.

    :param net: Source net.
    :type net: PetriNet
    :param mode: :attr:`Mode.COVERABILITY` (always terminates) or
        :attr:`Mode.REACHABILITY` (terminates only for bounded nets).
    :type mode: Mode
    :param cancel: Optional cancellation token, checked before every
        transition firing.
    :type cancel: Optional[CancellationToken]
    :returns: Fully explored graph.
    :rtype: CoverabilityGraph
    :raises AnalysisCancelledError: If ``cancel`` was triggered.

    Examples
    --------
    >>> pn = PetriNet("generator")
    >>> _ = pn.create_place("p")
    >>> _ = pn.create_transition("t")
    >>> _ = pn.create_flow("t", "p")
    >>> build(pn).node_count
    2
    """
    logger.debug("Building %s graph of %r", mode.value, net)
    graph = CoverabilityGraph(net, mode)
    graph.calculate_nodes(cancel=cancel)
    logger.debug(
        "Built %s graph of %r: %d nodes, %d edges",
        mode.value,
        net,
        graph.node_count,
        graph.edge_count,
    )
    return graph


def _has_remover(net: PetriNet, key: str) -> bool:
    return any(
        isinstance(listener, StructuralExtensionRemover) and listener.key == key
        for listener in net.listeners
    )


def get_cached(
    net: PetriNet,
    mode: Mode = Mode.COVERABILITY,
    *,
    cancel: Optional[CancellationToken] = None,
) -> CoverabilityGraph:
    """
    Return the graph of ``net`` for ``mode``, building it on first use.

    The result is stored on the net as a ``NOCOPY`` extension keyed by
    ``mode.value`` together with a :class:`StructuralExtensionRemover`, so the
    first structural change of the net drops it. A graph built for an
    initial marking that has since changed is rebuilt as well. Cancelled
    builds cache nothing.

    :param net: Source net.
    :param mode: Exploration mode; both modes are cached independently.
    :param cancel: Optional cancellation token used when building.
    :raises AnalysisCancelledError: If ``cancel`` was triggered during a build.
    """
    key = mode.value
    if net.has_extension(key):
        cached = net.get_extension(key)
        if (
            isinstance(cached, CoverabilityGraph)
            and cached.initial_marking == net.initial_marking
        ):
            logger.debug("Using cached %s graph of %r", key, net)
            return cached
        logger.debug("Initial marking of %r changed, rebuilding %s graph", net, key)
        net.remove_extension(key)

    graph = build(net, mode, cancel=cancel)
    net.put_extension(key, graph, ExtensionProperty.NOCOPY)
    if not _has_remover(net, key):
        net.add_listener(StructuralExtensionRemover(key))
    return graph
