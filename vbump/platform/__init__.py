"""Process and filesystem primitives."""

from .files import atomic_write_text, read_text_exact
from .process import ProcessError, run

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "read_text_exact",
    "run",
]
