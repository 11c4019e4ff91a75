"""Error taxonomy for external I/O: data store and identity provider."""
from typing import Literal

AuthErrorCode = Literal["email-in-use", "invalid-credential", "other"]


class NurseryError(Exception):
    """Base class for errors raised by the nursery backend."""


class StoreError(NurseryError):
    """A read or write against the hosted database failed."""


class StoreUnavailableError(StoreError):
    """The hosted database could not be reached (network / service down)."""


class AuthError(NurseryError):
    def __init__(self, code: AuthErrorCode, message: str = ""):
        self.code = code
        super().__init__(message or code)


class InvalidSettingsError(StoreError):
    """The stored settings node does not describe valid scan windows."""
