"""
Error taxonomy shared by the scheduler, the aggregator and the external
collaborator adapters.

"Not found" on delete/toggle is not an error: those operations are silent
no-ops. Absence of data is an empty result, never an exception.
"""

from typing import Optional


class ParkaError(Exception):
    """Base class for every error raised by this service."""
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class InvalidInput(ParkaError):
    """A required field is empty or a value cannot be interpreted."""
    status_code = 400


class NotFound(ParkaError):
    status_code = 404


class AuthorizationDenied(ParkaError):
    """The wearable data source refused read access."""
    status_code = 403


class Unavailable(ParkaError):
    """A collaborator cannot be reached or is not configured."""
    status_code = 503


class RequestFailed(ParkaError):
    """A collaborator answered with a non-success status code."""
    status_code = 502

    def __init__(self, code: Optional[int], message: str = ""):
        super().__init__(message or f"Request failed with code: {code}")
        self.code = code


class NoContent(ParkaError):
    """The language model answered without any generated text."""
    status_code = 502


class DecodeFailed(ParkaError):
    """A collaborator payload could not be decoded."""
    status_code = 502


class Timeout(ParkaError):
    status_code = 504


class RenderFailed(ParkaError):
    """A report document could not be produced."""
    status_code = 500
