"""REST API client models package.

Contains the response envelope returned by every client call.
"""

from .response import ApiResponse, ErrorKind

__all__ = ["ApiResponse", "ErrorKind"]
