"""Process exit codes.

Values follow the BSD ``sysexits.h`` convention so that CI scripts wrapping
``modpub`` can branch on the class of failure:

- 0: success
- 64: usage error (bad arguments)
- 67: no user (not logged in / no credentials)
- 70: software error (build, extraction or service failure)
- 78: configuration error (missing or invalid project metadata)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands. These values must remain stable."""

    OK = 0
    USAGE = 64
    NO_USER = 67
    SOFTWARE = 70
    CONFIG = 78
