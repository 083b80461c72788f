from .extension import Extensible, ExtensionProperty
from .listener import GraphListener, StructuralExtensionRemover
from .base import AbstractGraph

__all__ = [
    "Extensible",
    "ExtensionProperty",
    "GraphListener",
    "StructuralExtensionRemover",
    "AbstractGraph",
]
