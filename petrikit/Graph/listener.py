from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from .base import AbstractGraph

logger = logging.getLogger(__name__)


@runtime_checkable
class GraphListener(Protocol):
    """
    Observer of structural changes of an :class:`AbstractGraph`.

    ``on_graph_change`` is called after every node or edge addition or
    removal. Returning ``False`` unregisters the listener.
    """

    def on_graph_change(self, graph: "AbstractGraph") -> bool: ...


ListenerLike = Union[GraphListener, Callable[[Any], bool]]


class StructuralExtensionRemover:
    """
    Single-shot listener deleting the extension ``key`` on the first
    structural change of the graph it is registered on.

    :param key: Name of the extension to remove.
    :type key: str
    """

    def __init__(self, key: str) -> None:
        self.key = key

    def on_graph_change(self, graph: "AbstractGraph") -> bool:
        logger.debug("Structure of %r changed, dropping extension %r", graph, self.key)
        graph.remove_extension(self.key)
        return False

    def __repr__(self) -> str:
        return f"StructuralExtensionRemover({self.key!r})"
