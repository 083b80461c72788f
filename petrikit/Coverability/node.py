from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, List, Optional, Set, Tuple

from ..PN.marking import Marking
from ..PN.petri_net import Transition

if TYPE_CHECKING:
    from .graph import CoverabilityGraph


class CoverabilityGraphNode:
    """
    One explored marking of a :class:`CoverabilityGraph`.

    Besides the marking a node remembers how it was first reached: the
    parent node, the transition fired there, and, if the marking was
    widened, the ancestor whose marking it covered. Two nodes are equal iff
    their markings are equal.

    :param graph: Owning graph.
    :param index: Position in discovery order (breadth first).
    :param marking: Explored marking.
    :param parent: Node this one was first reached from (``None`` for the root).
    :param transition: Transition fired in ``parent``.
    :param covered: Ancestor strictly covered by the fired marking, if any.
    """

    __slots__ = (
        "_graph",
        "_index",
        "_marking",
        "_parent",
        "_transition",
        "_covered",
        "_postset_edges",
    )

    def __init__(
        self,
        graph: "CoverabilityGraph",
        index: int,
        marking: Marking,
        parent: Optional["CoverabilityGraphNode"] = None,
        transition: Optional[Transition] = None,
        covered: Optional["CoverabilityGraphNode"] = None,
    ) -> None:
        self._graph = graph
        self._index = index
        self._marking = marking
        self._parent = parent
        self._transition = transition
        self._covered = covered
        self._postset_edges: List["CoverabilityGraphEdge"] = []

    @property
    def graph(self) -> "CoverabilityGraph":
        return self._graph

    @property
    def index(self) -> int:
        return self._index

    @property
    def marking(self) -> Marking:
        return self._marking

    @property
    def parent(self) -> Optional["CoverabilityGraphNode"]:
        return self._parent

    @property
    def reaching_transition(self) -> Optional[Transition]:
        return self._transition

    @property
    def covered_node(self) -> Optional["CoverabilityGraphNode"]:
        return self._covered

    def ancestors(self) -> Iterator["CoverabilityGraphNode"]:
        """Yield this node, its parent, ... up to the root."""
        node: Optional[CoverabilityGraphNode] = self
        while node is not None:
            yield node
            node = node._parent

    def firing_sequence(self) -> List[Transition]:
        """Transitions fired from the initial node to reach this node."""
        seq = [n._transition for n in self.ancestors() if n._transition is not None]
        seq.reverse()
        return seq

    def firing_sequence_from_covered_node(self) -> Optional[List[Transition]]:
        """
        The part of :meth:`firing_sequence` after the covered ancestor, i.e.
        the sequence whose repetition pumps the OMEGA places.

        :returns: ``None`` if this node was not created by widening.
        """
        if self._covered is None:
            return None
        prefix = len(self._covered.firing_sequence())
        return self.firing_sequence()[prefix:]

    @property
    def postset_edges(self) -> Tuple["CoverabilityGraphEdge", ...]:
        return tuple(self._postset_edges)

    @property
    def postset(self) -> Set["CoverabilityGraphNode"]:
        return {e.target for e in self._postset_edges}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CoverabilityGraphNode):
            return NotImplemented
        return self._marking == other._marking

    def __hash__(self) -> int:
        return hash(self._marking)

    def __repr__(self) -> str:
        return f"CoverabilityGraphNode({self._index}, {self._marking})"


class CoverabilityGraphEdge:
    """
    Firing of ``transition`` from ``source`` to ``target``.

    Edges compare by identity: parallel edges with the same label between
    the same nodes stay distinct.
    """

    __slots__ = ("_source", "_transition", "_target")

    def __init__(
        self,
        source: CoverabilityGraphNode,
        transition: Transition,
        target: CoverabilityGraphNode,
    ) -> None:
        self._source = source
        self._transition = transition
        self._target = target

    @property
    def source(self) -> CoverabilityGraphNode:
        return self._source

    @property
    def transition(self) -> Transition:
        return self._transition

    @property
    def label(self) -> str:
        return self._transition.label

    @property
    def target(self) -> CoverabilityGraphNode:
        return self._target

    def __repr__(self) -> str:
        return (
            f"CoverabilityGraphEdge({self._source.index} -[{self.label}]-> "
            f"{self._target.index})"
        )
