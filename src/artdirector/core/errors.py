"""Exception types shared across the Art Director core.

Every exception carries a message intended to be shown to the user.  The
API layer maps them to ``{"error": message}`` responses; see
:mod:`artdirector.api.main`.
"""


class ArtDirectorError(Exception):
    """Base class for all user-facing errors raised by the core."""

    status_code: int = 400


class CSVParseError(ArtDirectorError):
    """The uploaded CSV cannot be turned into a task list."""


class StyleNotFoundError(ArtDirectorError):
    """A preset style or template identifier is unknown."""

    status_code = 404


class PromptError(ArtDirectorError):
    """A prompt cannot be generated from the given inputs."""


class InvalidTransitionError(ArtDirectorError):
    """A CSV task was asked to move to a status its lifecycle forbids."""

    status_code = 409


class ProviderError(ArtDirectorError):
    """An external provider call failed.

    Attributes:
        status_code: HTTP status to propagate to the client.  Upstream
            non-2xx statuses are passed through unchanged; network failures
            use 500.
        provider: Human-readable provider name (``"OpenAI"``, ``"Unsplash"``...).
    """

    def __init__(self, message: str, status_code: int = 500, provider: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider
