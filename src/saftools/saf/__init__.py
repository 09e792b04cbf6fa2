from . import render
from . import materialize
from . import package

__all__ = [
    "render",
    "materialize",
    "package",
]
