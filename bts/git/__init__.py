"""Git operations module.

- TransientRepository: one ephemeral clone (clone, checkout, cleanup)
- RepositorySet: scoped acquisition and release of several clones
- remote_latest_revision: default branch tip of a remote without cloning
"""

from bts.git.pool import (
    RepositoryFactory,
    RepositorySet,
)
from bts.git.repository import (
    GitError,
    RepositoryHandle,
    RepositorySpec,
    TransientRepository,
    remote_latest_revision,
)

__all__ = [
    # Repository
    "GitError",
    "RepositoryHandle",
    "RepositorySpec",
    "TransientRepository",
    "remote_latest_revision",
    # Pool
    "RepositoryFactory",
    "RepositorySet",
]
