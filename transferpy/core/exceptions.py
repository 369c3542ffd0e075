"""
Custom exceptions for transfer operations.

Every component raises its own exception class carrying a ``kind``
(what went wrong) and an optional ``detail`` (engine or process output).
"""
from enum import Enum
from typing import Optional


class AgentErrorKind(Enum):
    """Failure modes of the external transfer agent."""
    EXECUTABLE_NOT_FOUND = "executable_not_found"
    NON_ZERO_EXIT = "non_zero_exit"
    EMPTY_RESPONSE = "empty_response"
    CANCELLED = "cancelled"


class KeyringErrorKind(Enum):
    """Failure modes of the local keyring."""
    BACKEND_UNAVAILABLE = "backend_unavailable"
    INVALID_RECORD = "invalid_record"


class EncryptionErrorKind(Enum):
    """Failure modes of the encryption step."""
    NO_PASSPHRASE = "no_passphrase"
    BACKEND_FAILURE = "backend_failure"
    UNKNOWN_RECIPIENT = "unknown_recipient"


class TransferError(Exception):
    """Base exception for all transferpy errors."""

    def __init__(
        self,
        message: str,
        kind: Optional[Enum] = None,
        detail: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            kind: Error kind enum member (if applicable)
            detail: Extra diagnostic text (engine message, stderr...)
        """
        self.kind = kind
        self.detail = detail
        super().__init__(message)


class ConfigurationError(TransferError):
    """Raised when no usable agent exists or the configuration is invalid."""
    pass


class AgentError(TransferError):
    """Exception raised by the external transfer agent."""

    def __init__(
        self,
        message: str,
        kind: AgentErrorKind,
        detail: Optional[str] = None,
        exit_status: Optional[int] = None,
        output: str = ""
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            kind: Agent failure kind
            detail: Captured stderr of the agent (if any)
            exit_status: Process exit status (None if it never ran)
            output: Partial stdout, surfaced for diagnostics
        """
        self.exit_status = exit_status
        self.output = output
        super().__init__(message, kind, detail)


class KeyringError(TransferError):
    """Exception raised when the keyring cannot be read."""

    def __init__(
        self,
        message: str,
        kind: KeyringErrorKind = KeyringErrorKind.BACKEND_UNAVAILABLE,
        detail: Optional[str] = None
    ) -> None:
        super().__init__(message, kind, detail)


class EncryptionError(TransferError):
    """Exception raised when content cannot be encrypted or decrypted."""

    def __init__(
        self,
        message: str,
        kind: EncryptionErrorKind = EncryptionErrorKind.BACKEND_FAILURE,
        detail: Optional[str] = None
    ) -> None:
        super().__init__(message, kind, detail)
