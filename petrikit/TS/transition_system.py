from __future__ import annotations

from typing import Dict, List, Optional, Set, Union

import networkx as nx

from ..exceptions import NoSuchEdgeError, NoSuchNodeError, NodeExistsError, StructureError
from ..Graph.base import AbstractGraph
from ..Graph.extension import Extensible


class State(Extensible):
    """State of a :class:`TransitionSystem`; equality is identity."""

    def __init__(self, ts: "TransitionSystem", state_id: str) -> None:
        super().__init__()
        self._ts = ts
        self._id = state_id

    @property
    def graph(self) -> "TransitionSystem":
        return self._ts

    @property
    def id(self) -> str:
        return self._id

    @property
    def postset_edges(self) -> List["Arc"]:
        return self._ts._out_arcs(self._id)

    @property
    def preset_edges(self) -> List["Arc"]:
        return self._ts._in_arcs(self._id)

    @property
    def postset_nodes(self) -> Set["State"]:
        return {a.target for a in self.postset_edges}

    @property
    def preset_nodes(self) -> Set["State"]:
        return {a.source for a in self.preset_edges}

    def postset_edges_by_label(self, label: str) -> List["Arc"]:
        return [a for a in self.postset_edges if a.label == label]

    def preset_edges_by_label(self, label: str) -> List["Arc"]:
        return [a for a in self.preset_edges if a.label == label]

    def postset_nodes_by_label(self, label: str) -> Set["State"]:
        return {a.target for a in self.postset_edges_by_label(label)}

    def preset_nodes_by_label(self, label: str) -> Set["State"]:
        return {a.source for a in self.preset_edges_by_label(label)}

    def __repr__(self) -> str:
        return f"State({self._id!r})"

    def __str__(self) -> str:
        return self._id


class Arc(Extensible):
    """Labelled arc; several arcs may join the same states with the same label."""

    def __init__(self, ts: "TransitionSystem", source: State, target: State, label: str, key: int) -> None:
        super().__init__()
        self._ts = ts
        self._source = source
        self._target = target
        self._label = label
        self._key = key

    @property
    def graph(self) -> "TransitionSystem":
        return self._ts

    @property
    def source(self) -> State:
        return self._source

    @property
    def target(self) -> State:
        return self._target

    @property
    def label(self) -> str:
        return self._label

    def __repr__(self) -> str:
        return f"Arc({self._source.id!r} -[{self._label}]-> {self._target.id!r})"


class TransitionSystem(AbstractGraph):
    """
    Labelled transition system stored in a :class:`networkx.MultiDiGraph`.

    Node keys are state ids (node attribute ``state``); edges carry the
    :class:`Arc` object (attribute ``arc``) and its ``label``. Parallel
    arcs are kept, including several arcs with the same label between the
    same pair of states.

    Adding or removing states and arcs notifies the graph listeners.

    :param name: Name of the transition system.
    :type name: str
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(name)
        self._g = nx.MultiDiGraph()
        self._initial: Optional[State] = None
        self._next_state_id = 0

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------
    def create_state(self, state_id: Optional[str] = None) -> State:
        """
        Add a state; ids default to ``s0``, ``s1``, ...

        :raises NodeExistsError: If ``state_id`` is taken.
        """
        if state_id is None:
            while f"s{self._next_state_id}" in self._g:
                self._next_state_id += 1
            state_id = f"s{self._next_state_id}"
            self._next_state_id += 1
        elif state_id in self._g:
            raise NodeExistsError(self.name, state_id)
        state = State(self, state_id)
        self._g.add_node(state_id, state=state)
        self.invoke_listeners()
        return state

    def create_states(self, *ids: Union[str, int]) -> List[State]:
        if len(ids) == 1 and isinstance(ids[0], int):
            return [self.create_state() for _ in range(ids[0])]
        return [self.create_state(str(i)) for i in ids]

    def get_state(self, state_id: str) -> State:
        """
        :raises NoSuchNodeError: If the state does not exist.
        """
        if state_id not in self._g:
            raise NoSuchNodeError(self.name, state_id)
        return self._g.nodes[state_id]["state"]

    def _state_id(self, state: Union[str, State]) -> str:
        if isinstance(state, State):
            if state.graph is not self:
                raise StructureError(
                    f"State {state.id!r} does not belong to {self.name!r}."
                )
            state = state.id
        return self.get_state(state).id

    def remove_state(self, state: Union[str, State]) -> None:
        """Remove a state and all arcs touching it."""
        sid = self._state_id(state)
        if self._initial is not None and self._initial.id == sid:
            self._initial = None
        self._g.remove_node(sid)
        self.invoke_listeners()

    def contains_state(self, state_id: str) -> bool:
        return state_id in self._g

    @property
    def states(self) -> List[State]:
        return [data for _, data in self._g.nodes(data="state")]

    @property
    def initial_state(self) -> State:
        """
        :raises StructureError: If no initial state was set.
        """
        if self._initial is None:
            raise StructureError(f"Initial state is not set in {self.name!r}.")
        return self._initial

    @initial_state.setter
    def initial_state(self, state: Union[str, State]) -> None:
        self._initial = self.get_state(self._state_id(state))

    # ------------------------------------------------------------------
    # Arcs
    # ------------------------------------------------------------------
    def create_arc(
        self, source: Union[str, State], target: Union[str, State], label: str
    ) -> Arc:
        """
        Add an arc ``source --label--> target``. Parallel arcs are allowed.

        :raises NoSuchNodeError: If an endpoint does not exist.
        """
        src = self.get_state(self._state_id(source))
        tgt = self.get_state(self._state_id(target))
        key = self._g.new_edge_key(src.id, tgt.id)
        arc = Arc(self, src, tgt, label, key)
        self._g.add_edge(src.id, tgt.id, key=key, arc=arc, label=label)
        self.invoke_listeners()
        return arc

    def remove_arc(self, arc: Arc) -> None:
        """
        :raises NoSuchEdgeError: If the arc is not part of this system.
        """
        src, tgt = arc.source.id, arc.target.id
        if arc.graph is not self or not self._g.has_edge(src, tgt, arc._key):
            raise NoSuchEdgeError(self.name, src, tgt)
        self._g.remove_edge(src, tgt, arc._key)
        self.invoke_listeners()

    def get_arcs(
        self,
        source: Union[str, State],
        target: Union[str, State],
        label: Optional[str] = None,
    ) -> List[Arc]:
        """All arcs from ``source`` to ``target``, optionally filtered by label."""
        src, tgt = self._state_id(source), self._state_id(target)
        data: Dict[int, Dict] = self._g.get_edge_data(src, tgt) or {}
        return [
            attrs["arc"]
            for attrs in data.values()
            if label is None or attrs["label"] == label
        ]

    @property
    def arcs(self) -> List[Arc]:
        return [arc for _, _, arc in self._g.edges(data="arc")]

    def _out_arcs(self, state_id: str) -> List[Arc]:
        return [arc for _, _, arc in self._g.out_edges(state_id, data="arc")]

    def _in_arcs(self, state_id: str) -> List[Arc]:
        return [arc for _, _, arc in self._g.in_edges(state_id, data="arc")]

    @property
    def alphabet(self) -> Set[str]:
        return {label for _, _, label in self._g.edges(data="label")}

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Copy of the underlying graph with plain attributes only: node attr
        ``initial`` (bool) and edge attr ``label``.
        """
        G = nx.MultiDiGraph(name=self.name)
        initial = self._initial.id if self._initial is not None else None
        for sid in self._g.nodes:
            G.add_node(sid, initial=(sid == initial))
        for u, v, k, label in self._g.edges(keys=True, data="label"):
            G.add_edge(u, v, key=k, label=label)
        return G

    def __len__(self) -> int:
        return self._g.number_of_nodes()

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._g

    def __repr__(self) -> str:
        return (
            f"TransitionSystem({self.name!r}, states={self._g.number_of_nodes()}, "
            f"arcs={self._g.number_of_edges()})"
        )
