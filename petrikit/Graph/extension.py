from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Tuple

from ..exceptions import StructureError


class ExtensionProperty(Enum):
    """Flags attached to an extension."""

    WRITE_TO_FILE = "write_to_file"  # renderers should serialise this extension
    NOCOPY = "nocopy"  # not carried over by copy_extensions()


@dataclass(frozen=True)
class _Extension:
    value: Any
    properties: FrozenSet[ExtensionProperty] = field(default_factory=frozenset)


class Extensible:
    """
    Mixin storing named side-channel data ("extensions") on an object.

    Extensions are arbitrary values keyed by string. Each entry can carry
    :class:`ExtensionProperty` flags; entries flagged ``NOCOPY`` are skipped
    by :meth:`copy_extensions`, which is how derived data (for example a
    cached coverability graph) stays bound to the object it was computed on.
    """

    def __init__(self) -> None:
        self._extensions: Dict[str, _Extension] = {}

    def has_extension(self, key: str) -> bool:
        return key in self._extensions

    def put_extension(
        self, key: str, value: Any, *properties: ExtensionProperty
    ) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        :param key: Extension name.
        :param value: Arbitrary value.
        :param properties: Optional :class:`ExtensionProperty` flags.
        """
        self._extensions[key] = _Extension(value, frozenset(properties))

    def remove_extension(self, key: str) -> None:
        """Remove ``key``; removing a missing key is a no-op."""
        self._extensions.pop(key, None)

    def get_extension(self, key: str) -> Any:
        """
        :raises StructureError: If no extension named ``key`` exists.
        """
        ext = self._extensions.get(key)
        if ext is None:
            raise StructureError(f"Extension {key!r} not found.")
        return ext.value

    def get_extensions(self) -> List[Tuple[str, Any]]:
        return [(k, e.value) for k, e in self._extensions.items()]

    def get_extensions_with_property(
        self, prop: ExtensionProperty
    ) -> List[Tuple[str, Any]]:
        return [(k, e.value) for k, e in self._extensions.items() if prop in e.properties]

    def get_extensions_without_property(
        self, prop: ExtensionProperty
    ) -> List[Tuple[str, Any]]:
        return [
            (k, e.value) for k, e in self._extensions.items() if prop not in e.properties
        ]

    def get_write_to_file_extensions(self) -> List[Tuple[str, Any]]:
        return self.get_extensions_with_property(ExtensionProperty.WRITE_TO_FILE)

    def get_copy_extensions(self) -> List[Tuple[str, Any]]:
        return self.get_extensions_without_property(ExtensionProperty.NOCOPY)

    def copy_extensions(self, other: "Extensible") -> None:
        """Copy every extension of ``other`` that is not flagged ``NOCOPY``."""
        for key, value in other.get_copy_extensions():
            self.put_extension(key, value)
