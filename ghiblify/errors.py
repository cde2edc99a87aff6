"""
Exceptions raised by Ghiblify outside of the HTTP response contract.
"""


class GhiblifyError(Exception):
    """Base class for Ghiblify errors."""


class ConfigurationError(GhiblifyError, ValueError):
    """Settings cannot be used to build an image editor."""


class NoFileSelected(GhiblifyError, ValueError):
    """A submission was attempted without a file."""

    def __init__(self, message: str = "Please select an image file first."):
        super().__init__(message)


class SubmissionInProgress(GhiblifyError, RuntimeError):
    """A generation request is already in flight on this controller."""

    def __init__(self, message: str = "An image is already being generated. Please wait."):
        super().__init__(message)
