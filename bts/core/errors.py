"""Error codes for CLI exit status.

Every fatal outcome of a sync run maps to one of these codes, so scripts
wrapping `bts-sync` can tell a bad invocation from a network failure or a
broken upstream schema.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the sync command.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (invalid sync type, bad configuration)
    - 2: Environment error (git missing, unusable working directory)
    - 3: Code generation error (stitching, conversion, schema validation)
    - 4: Network error (clone or checkout failed)
    - 5: I/O error (OpenAPI document missing, artifact not writable)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    CODEGEN_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
