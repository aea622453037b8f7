"""Process exit codes.

A release either completes (including the benign early exits: help, version,
self-update and "nothing to release") or aborts. Every abort uses the same
code so CI scripts only have to test for non-zero.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the ``semship`` command.

    - 0: Success or informational early exit
    - 1: Any fatal condition (usage, environment, collaborator, declined)
    """

    OK = 0
    FATAL = 1

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
