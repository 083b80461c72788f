from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

import networkx as nx
import numpy as np

from ..exceptions import (
    FlowExistsError,
    IllegalFlowError,
    NoSuchEdgeError,
    NoSuchNodeError,
    NodeExistsError,
    StructureError,
    TransitionFireError,
)
from ..Graph.base import AbstractGraph
from ..Graph.extension import Extensible
from .marking import Marking
from .token import Token, TokenLike

logger = logging.getLogger(__name__)

EdgeKey = Tuple[str, str]


# ---------------------------------------------------------------------------
# Nodes and flows
# ---------------------------------------------------------------------------


class Node(Extensible):
    """
    Place or transition of a :class:`PetriNet`.

    Nodes are bound to the net that created them; equality is identity.

    :param net: Owning net.
    :param node_id: Identifier, unique within the net.
    """

    def __init__(self, net: "PetriNet", node_id: str) -> None:
        super().__init__()
        self._net = net
        self._id = node_id

    @property
    def net(self) -> "PetriNet":
        return self._net

    @property
    def id(self) -> str:
        return self._id

    @property
    def preset_edges(self) -> Set["Flow"]:
        return self._net.get_preset_edges(self._id)

    @property
    def postset_edges(self) -> Set["Flow"]:
        return self._net.get_postset_edges(self._id)

    @property
    def preset(self) -> Set["Node"]:
        return self._net.get_preset_nodes(self._id)

    @property
    def postset(self) -> Set["Node"]:
        return self._net.get_postset_nodes(self._id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._id!r})"

    def __str__(self) -> str:
        return self._id


class Place(Node):
    """A place; its initial token count lives in the net's initial marking."""

    @property
    def initial_token(self) -> Token:
        return self._net.initial_marking.get_token(self._id)

    @initial_token.setter
    def initial_token(self, value: TokenLike) -> None:
        self._net.set_initial_token(self._id, value)


class Transition(Node):
    """
    A transition with a label (defaults to the id).

    Several transitions may share a label; they then produce parallel
    arcs with that label in derived transition systems.
    """

    def __init__(self, net: "PetriNet", node_id: str, label: Optional[str] = None) -> None:
        super().__init__(net, node_id)
        self._label = node_id if label is None else label

    @property
    def label(self) -> str:
        return self._label

    @label.setter
    def label(self, value: str) -> None:
        self._net._set_transition_label(self._id, value)

    def is_fireable(self, marking: Marking) -> bool:
        return self._net.is_enabled(marking, self)

    def fire(self, marking: Marking) -> Marking:
        return self._net.fire(marking, self)


class Flow(Extensible):
    """Weighted arc between a place and a transition."""

    def __init__(self, net: "PetriNet", source: Node, target: Node, weight: int) -> None:
        super().__init__()
        self._net = net
        self._source = source
        self._target = target
        self._weight = weight

    @property
    def net(self) -> "PetriNet":
        return self._net

    @property
    def source(self) -> Node:
        return self._source

    @property
    def target(self) -> Node:
        return self._target

    @property
    def key(self) -> EdgeKey:
        return (self._source.id, self._target.id)

    @property
    def place(self) -> Place:
        return self._source if isinstance(self._source, Place) else self._target

    @property
    def transition(self) -> Transition:
        return self._source if isinstance(self._source, Transition) else self._target

    @property
    def weight(self) -> int:
        return self._weight

    @weight.setter
    def weight(self, value: int) -> None:
        self._net._set_flow_weight(self._source.id, self._target.id, value)

    def __repr__(self) -> str:
        return f"Flow({self._source.id!r} -> {self._target.id!r}, weight={self._weight})"


# ---------------------------------------------------------------------------
# Petri net
# ---------------------------------------------------------------------------


class PetriNet(AbstractGraph):
    """
    Weighted place/transition net.

    Every structural change (nodes, flows, flow weights, labels) notifies
    the registered listeners; changing the initial marking does not.

    :param name: Net name.
    :type name: str

    Examples
    --------
    >>> pn = PetriNet("producer")
    >>> p = pn.create_place("p", initial_token=1)
    >>> t = pn.create_transition("t")
    >>> _ = pn.create_flow("p", "t")
    >>> pn.is_enabled(pn.initial_marking, "t")
    True
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(name)
        self._places: Dict[str, Place] = {}
        self._transitions: Dict[str, Transition] = {}
        self._flows: Dict[EdgeKey, Flow] = {}
        self._preset: Dict[str, Dict[EdgeKey, Flow]] = {}
        self._postset: Dict[str, Dict[EdgeKey, Flow]] = {}
        self._place_ids: Tuple[str, ...] = ()
        self._next_place_id = 0
        self._next_transition_id = 0
        self._initial_marking = Marking(self)

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------
    def copy(self) -> "PetriNet":
        """
        Structural copy: nodes, labels, flows, initial marking and copyable
        extensions. Listeners and ``NOCOPY`` extensions (cached analysis
        results) are not carried over.
        """
        pn = PetriNet(self.name)
        pn._next_place_id = self._next_place_id
        pn._next_transition_id = self._next_transition_id
        for pid, place in self._places.items():
            pn._add_node(Place(pn, pid)).copy_extensions(place)
        for tid, trans in self._transitions.items():
            pn._add_node(Transition(pn, tid, trans.label)).copy_extensions(trans)
        pn._refresh_place_ids()
        for (src, tgt), flow in self._flows.items():
            new = Flow(pn, pn.get_node(src), pn.get_node(tgt), flow.weight)
            new.copy_extensions(flow)
            pn._add_flow(new)
        pn._initial_marking = self._initial_marking.copy_to(pn)
        pn.copy_extensions(self)
        return pn

    __copy__ = copy

    # ------------------------------------------------------------------
    # Node creation / removal
    # ------------------------------------------------------------------
    def _add_node(self, node: Node) -> Node:
        if node.id in self._places or node.id in self._transitions:
            raise NodeExistsError(self.name, node.id)
        if isinstance(node, Place):
            self._places[node.id] = node
        else:
            self._transitions[node.id] = node
        self._preset[node.id] = {}
        self._postset[node.id] = {}
        return node

    def _refresh_place_ids(self) -> None:
        self._place_ids = tuple(sorted(self._places))

    def _fresh_id(self, prefix: str) -> str:
        while True:
            if prefix == "p":
                candidate = f"p{self._next_place_id}"
                self._next_place_id += 1
            else:
                candidate = f"t{self._next_transition_id}"
                self._next_transition_id += 1
            if not self.contains_node(candidate):
                return candidate

    def create_place(
        self, place_id: Optional[str] = None, *, initial_token: TokenLike = 0
    ) -> Place:
        """
        Add a place.

        :param place_id: Identifier; generated (``p0``, ``p1``, ...) if ``None``.
        :param initial_token: Initial token count of the new place.
        :raises NodeExistsError: If the id is already used.
        """
        if place_id is None:
            place_id = self._fresh_id("p")
        place = self._add_node(Place(self, place_id))
        self._refresh_place_ids()
        if Token.value_of(initial_token) != Token.ZERO:
            self._initial_marking = self._initial_marking.set_token_count(
                place_id, initial_token
            )
        self.invoke_listeners()
        return place

    def create_places(self, *ids: Union[str, int]) -> List[Place]:
        """
        Add several places: ``create_places("a", "b")`` or ``create_places(3)``.
        """
        if len(ids) == 1 and isinstance(ids[0], int):
            return [self.create_place() for _ in range(ids[0])]
        return [self.create_place(str(i)) for i in ids]

    def create_transition(
        self, transition_id: Optional[str] = None, label: Optional[str] = None
    ) -> Transition:
        """
        Add a transition.

        :param transition_id: Identifier; generated (``t0``, ``t1``, ...) if ``None``.
        :param label: Label; defaults to the id.
        :raises NodeExistsError: If the id is already used.
        """
        if transition_id is None:
            transition_id = self._fresh_id("t")
        trans = self._add_node(Transition(self, transition_id, label))
        self.invoke_listeners()
        return trans

    def create_transitions(self, *ids: Union[str, int]) -> List[Transition]:
        if len(ids) == 1 and isinstance(ids[0], int):
            return [self.create_transition() for _ in range(ids[0])]
        return [self.create_transition(str(i)) for i in ids]

    def _remove_node_flows(self, node_id: str) -> None:
        for key in list(self._preset[node_id]) + list(self._postset[node_id]):
            if key in self._flows:
                self._drop_flow(key)
        del self._preset[node_id]
        del self._postset[node_id]

    def remove_place(self, place: Union[str, Place]) -> None:
        """
        Remove a place together with its flows.

        :raises NoSuchNodeError: If the place does not exist.
        """
        pid = self.get_place(place if isinstance(place, str) else place.id).id
        self._remove_node_flows(pid)
        del self._places[pid]
        self._refresh_place_ids()
        self.invoke_listeners()

    def remove_transition(self, transition: Union[str, Transition]) -> None:
        """
        Remove a transition together with its flows.

        :raises NoSuchNodeError: If the transition does not exist.
        """
        tid = self.get_transition(
            transition if isinstance(transition, str) else transition.id
        ).id
        self._remove_node_flows(tid)
        del self._transitions[tid]
        self.invoke_listeners()

    def remove_node(self, node: Union[str, Node]) -> None:
        node = self.get_node(node if isinstance(node, str) else node.id)
        if isinstance(node, Place):
            self.remove_place(node)
        else:
            self.remove_transition(node)

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------
    def _add_flow(self, flow: Flow) -> Flow:
        key = flow.key
        self._flows[key] = flow
        self._postset[key[0]][key] = flow
        self._preset[key[1]][key] = flow
        return flow

    def _drop_flow(self, key: EdgeKey) -> None:
        del self._flows[key]
        self._postset[key[0]].pop(key, None)
        self._preset[key[1]].pop(key, None)

    def create_flow(
        self, source: Union[str, Node], target: Union[str, Node], weight: int = 1
    ) -> Flow:
        """
        Add a weighted flow between a place and a transition.

        :param source: Source node or id.
        :param target: Target node or id.
        :param weight: Positive arc weight.
        :raises ValueError: If ``weight < 1``.
        :raises NoSuchNodeError: If an endpoint does not exist.
        :raises IllegalFlowError: If both endpoints are places or both are
            transitions.
        :raises FlowExistsError: If the flow already exists.
        """
        src = self.get_node(source if isinstance(source, str) else source.id)
        tgt = self.get_node(target if isinstance(target, str) else target.id)
        if weight < 1:
            raise ValueError(f"Flow weight must be positive, got {weight}")
        if isinstance(src, Place) == isinstance(tgt, Place):
            raise IllegalFlowError(self.name, src.id, tgt.id)
        if (src.id, tgt.id) in self._flows:
            raise FlowExistsError(self.name, src.id, tgt.id)
        flow = self._add_flow(Flow(self, src, tgt, int(weight)))
        self.invoke_listeners()
        return flow

    def remove_flow(self, source: Union[str, Node], target: Union[str, Node]) -> None:
        """
        :raises NoSuchEdgeError: If no such flow exists.
        """
        key = (
            source if isinstance(source, str) else source.id,
            target if isinstance(target, str) else target.id,
        )
        if key not in self._flows:
            raise NoSuchEdgeError(self.name, *key)
        self._drop_flow(key)
        self.invoke_listeners()

    def get_flow(self, source: Union[str, Node], target: Union[str, Node]) -> Flow:
        """
        :raises NoSuchEdgeError: If no such flow exists.
        """
        key = (
            source if isinstance(source, str) else source.id,
            target if isinstance(target, str) else target.id,
        )
        try:
            return self._flows[key]
        except KeyError:
            raise NoSuchEdgeError(self.name, *key) from None

    def _set_flow_weight(self, source_id: str, target_id: str, weight: int) -> None:
        flow = self.get_flow(source_id, target_id)
        if weight < 1:
            self.remove_flow(source_id, target_id)
            return
        flow._weight = int(weight)
        self.invoke_listeners()

    def _set_transition_label(self, transition_id: str, label: str) -> None:
        self.get_transition(transition_id)._label = label
        self.invoke_listeners()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get_place(self, place_id: str) -> Place:
        """
        :raises NoSuchNodeError: If no place has this id.
        """
        try:
            return self._places[place_id]
        except KeyError:
            raise NoSuchNodeError(self.name, place_id) from None

    def get_transition(self, transition_id: str) -> Transition:
        """
        :raises NoSuchNodeError: If no transition has this id.
        """
        try:
            return self._transitions[transition_id]
        except KeyError:
            raise NoSuchNodeError(self.name, transition_id) from None

    def get_node(self, node_id: str) -> Node:
        node = self._places.get(node_id) or self._transitions.get(node_id)
        if node is None:
            raise NoSuchNodeError(self.name, node_id)
        return node

    def contains_node(self, node_id: str) -> bool:
        return node_id in self._places or node_id in self._transitions

    def contains_place(self, place_id: str) -> bool:
        return place_id in self._places

    def contains_transition(self, transition_id: str) -> bool:
        return transition_id in self._transitions

    @property
    def place_ids(self) -> Tuple[str, ...]:
        """Sorted place ids; a new tuple object after every place change."""
        return self._place_ids

    @property
    def places(self) -> List[Place]:
        return [self._places[p] for p in self._place_ids]

    @property
    def transitions(self) -> List[Transition]:
        return [self._transitions[t] for t in sorted(self._transitions)]

    @property
    def flows(self) -> List[Flow]:
        return [self._flows[k] for k in sorted(self._flows)]

    @property
    def nodes(self) -> List[Node]:
        return sorted(
            list(self._places.values()) + list(self._transitions.values()),
            key=lambda n: n.id,
        )

    def _node_id(self, node: Union[str, Node]) -> str:
        node_id = node if isinstance(node, str) else node.id
        if not self.contains_node(node_id):
            raise NoSuchNodeError(self.name, node_id)
        return node_id

    def get_preset_edges(self, node: Union[str, Node]) -> Set[Flow]:
        return set(self._preset[self._node_id(node)].values())

    def get_postset_edges(self, node: Union[str, Node]) -> Set[Flow]:
        return set(self._postset[self._node_id(node)].values())

    def get_preset_nodes(self, node: Union[str, Node]) -> Set[Node]:
        return {f.source for f in self._preset[self._node_id(node)].values()}

    def get_postset_nodes(self, node: Union[str, Node]) -> Set[Node]:
        return {f.target for f in self._postset[self._node_id(node)].values()}

    # ------------------------------------------------------------------
    # Markings and firing
    # ------------------------------------------------------------------
    @property
    def initial_marking(self) -> Marking:
        return self._initial_marking

    @initial_marking.setter
    def initial_marking(self, marking: Marking) -> None:
        if marking.net is not self:
            raise StructureError(f"Marking does not belong to net {self.name!r}.")
        self._initial_marking = marking

    def set_initial_token(self, place_id: str, token: TokenLike) -> None:
        self._initial_marking = self._initial_marking.set_token_count(place_id, token)

    def _check_marking(self, marking: Marking) -> None:
        if marking.net is not self:
            raise StructureError(f"Marking does not belong to net {self.name!r}.")

    def is_enabled(self, marking: Marking, transition: Union[str, Transition]) -> bool:
        """
        A transition is enabled if every input place holds OMEGA or at
        least the flow weight.
        """
        self._check_marking(marking)
        tid = transition if isinstance(transition, str) else transition.id
        self.get_transition(tid)
        for (pid, _), flow in self._preset[tid].items():
            if marking.get_token(pid) < flow.weight:
                return False
        return True

    def enabled_transitions(self, marking: Marking) -> List[Transition]:
        return [t for t in self.transitions if self.is_enabled(marking, t)]

    def fire(self, marking: Marking, transition: Union[str, Transition]) -> Marking:
        """
        Fire ``transition`` in ``marking``.

        Input weights are subtracted and output weights added; OMEGA places
        stay OMEGA.

        :raises TransitionFireError: If the transition is not enabled.
        """
        tid = transition if isinstance(transition, str) else transition.id
        if not self.is_enabled(marking, tid):
            raise TransitionFireError(
                f"Transition {tid!r} is not fireable in marking {marking}."
            )
        result = marking
        for (pid, _), flow in self._preset[tid].items():
            result = result.add_token_count(pid, -flow.weight)
        for (_, pid), flow in self._postset[tid].items():
            result = result.add_token_count(pid, flow.weight)
        return result

    # ------------------------------------------------------------------
    # Matrix / NetworkX views
    # ------------------------------------------------------------------
    def incidence_matrix(self) -> np.ndarray:
        """
        Incidence matrix ``C`` with ``C[p, t] = W(t, p) - W(p, t)``.

        Rows follow :attr:`place_ids`, columns the sorted transition ids.

        :returns: Integer matrix of shape ``(n_places, n_transitions)``.
        :rtype: numpy.ndarray
        """
        trans_ids = sorted(self._transitions)
        row = {p: i for i, p in enumerate(self._place_ids)}
        col = {t: j for j, t in enumerate(trans_ids)}
        C = np.zeros((len(row), len(col)), dtype=np.int64)
        for (src, tgt), flow in self._flows.items():
            if src in row:
                C[row[src], col[tgt]] -= flow.weight
            else:
                C[row[tgt], col[src]] += flow.weight
        return C

    def to_bipartite(self) -> nx.DiGraph:
        """
        Export as a bipartite NetworkX DiGraph.

        Node attributes: ``kind`` (``"place"``/``"transition"``),
        ``bipartite`` (0 for places, 1 for transitions), ``label`` and, for
        places, ``tokens`` (initial token as string). Edge attribute:
        ``weight``.
        """
        G = nx.DiGraph(name=self.name)
        for place in self.places:
            G.add_node(
                place.id,
                kind="place",
                bipartite=0,
                label=place.id,
                tokens=str(self._initial_marking.get_token(place.id)),
            )
        for trans in self.transitions:
            G.add_node(trans.id, kind="transition", bipartite=1, label=trans.label)
        for flow in self.flows:
            G.add_edge(flow.source.id, flow.target.id, weight=flow.weight)
        return G

    # ------------------------------------------------------------------
    # Container helpers
    # ------------------------------------------------------------------
    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, str) and self.contains_node(node_id)

    def __len__(self) -> int:
        return len(self._places) + len(self._transitions)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __repr__(self) -> str:
        return (
            f"PetriNet({self.name!r}, places={len(self._places)}, "
            f"transitions={len(self._transitions)}, flows={len(self._flows)})"
        )
