from __future__ import annotations

from typing import List

from .extension import Extensible
from .listener import ListenerLike


class AbstractGraph(Extensible):
    """
    Common base of :class:`~petrikit.PN.petri_net.PetriNet` and
    :class:`~petrikit.TS.transition_system.TransitionSystem`.

    Holds the graph name, its extensions and the list of structural change
    listeners. Subclasses call :meth:`invoke_listeners` after every
    structural mutation.

    :param name: Human-readable graph name.
    :type name: str
    """

    def __init__(self, name: str = "") -> None:
        super().__init__()
        self.name = name
        self._listeners: List[ListenerLike] = []

    def add_listener(self, listener: ListenerLike) -> bool:
        """
        Register ``listener``.

        :returns: ``False`` if the listener was already registered.
        """
        if any(existing is listener for existing in self._listeners):
            return False
        self._listeners.append(listener)
        return True

    def remove_listener(self, listener: ListenerLike) -> bool:
        """
        Unregister ``listener``.

        :returns: ``False`` if the listener was not registered.
        """
        for idx, existing in enumerate(self._listeners):
            if existing is listener:
                del self._listeners[idx]
                return True
        return False

    @property
    def listeners(self) -> List[ListenerLike]:
        return list(self._listeners)

    def invoke_listeners(self) -> None:
        """
        Notify all listeners; drop those whose callback returns ``False``.

        Any other return value, ``None`` included, keeps the listener.
        """
        for listener in list(self._listeners):
            callback = getattr(listener, "on_graph_change", listener)
            if callback(self) is False:
                self.remove_listener(listener)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
