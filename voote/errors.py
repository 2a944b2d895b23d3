"""Exceptions raised by the Voote deployment toolchain."""

from typing import Iterable, Tuple


class VooteError(Exception):
    """Base class for every error reported by the toolchain."""


class ConfigurationError(VooteError, ValueError):
    """A required environment variable is missing or malformed."""

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing: Tuple[str, ...] = tuple(missing)


class ArtifactNotFound(VooteError, LookupError):
    """No deployable build artifact matches the requested contract name."""


class CompilationError(VooteError):
    """The Solidity compiler rejected the project sources."""


class DeploymentError(VooteError):
    """Base class for failures after an artifact has been resolved."""


class SubmissionError(DeploymentError):
    """The network rejected or never received the deployment transaction."""


class ConfirmationError(DeploymentError):
    """The deployment transaction was dropped, reverted, or never observed."""

    def __init__(self, message: str, transaction_hash: str | None = None) -> None:
        super().__init__(message)
        self.transaction_hash = transaction_hash


class ConfirmationTimeout(ConfirmationError):
    """No receipt was observed before the client timeout elapsed."""


class VerificationError(VooteError):
    """The block explorer refused or failed to verify the contract source."""
