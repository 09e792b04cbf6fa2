from . import types
from . import mapping
from . import manifest
from . import loader

__all__ = [
    "types",
    "mapping",
    "manifest",
    "loader",
]
