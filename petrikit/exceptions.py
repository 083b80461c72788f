from __future__ import annotations


class PetriKitError(RuntimeError):
    """Base class for all petrikit-specific errors."""


class StructureError(PetriKitError):
    """Raised when a graph is used or built in a structurally invalid way."""


class NoSuchNodeError(StructureError):
    """Raised when a node id (place, transition or state) is not part of a graph."""

    def __init__(self, graph_name: str, node_id: str) -> None:
        super().__init__(f"Node {node_id!r} does not exist in graph {graph_name!r}.")
        self.node_id = node_id


class NoSuchEdgeError(StructureError):
    """Raised when a flow or arc between two nodes does not exist."""

    def __init__(self, graph_name: str, source_id: str, target_id: str) -> None:
        super().__init__(
            f"Edge {source_id!r} -> {target_id!r} does not exist in graph {graph_name!r}."
        )


class NodeExistsError(StructureError):
    """Raised when a node id is already taken."""

    def __init__(self, graph_name: str, node_id: str) -> None:
        super().__init__(f"Node {node_id!r} already exists in graph {graph_name!r}.")


class FlowExistsError(StructureError):
    """Raised when a flow between the same pair of nodes already exists."""

    def __init__(self, graph_name: str, source_id: str, target_id: str) -> None:
        super().__init__(
            f"Flow {source_id!r} -> {target_id!r} already exists in net {graph_name!r}."
        )


class IllegalFlowError(StructureError):
    """Raised for flows between two places or between two transitions."""

    def __init__(self, graph_name: str, source_id: str, target_id: str) -> None:
        super().__init__(
            f"Flow {source_id!r} -> {target_id!r} in net {graph_name!r} must connect "
            "a place and a transition."
        )


class TransitionFireError(PetriKitError):
    """Raised when a transition is fired in a marking that does not enable it."""


class UnboundedError(PetriKitError):
    """Raised when a reachability result is requested for an unbounded net."""

    def __init__(self, net_name: str) -> None:
        super().__init__(f"Petri net {net_name!r} is unbounded.")
        self.net_name = net_name


class AnalysisCancelledError(PetriKitError):
    """Raised at the next check point after an analysis was cancelled."""
