"""Platform abstraction layer."""

from .files import (
    atomic_write_text,
    is_empty_dir,
    remove_tree,
)
from .process import (
    ProcessError,
    run,
)

__all__ = [
    # files
    "atomic_write_text",
    "is_empty_dir",
    "remove_tree",
    # process
    "ProcessError",
    "run",
]
