"""Exception hierarchy for token-manager.

All exceptions derive from TokenManagerError, enabling broad catch patterns
at the transport boundary while allowing fine-grained handling internally.
"""

from __future__ import annotations


class TokenManagerError(Exception):
    """Base exception for all token-manager errors."""


class _TokenOperationError(TokenManagerError):
    """An operation on a single token id failed.

    Attributes:
        token_id: The id the operation referenced.
        operation: Name of the table operation (``'create'``, ``'write'``, ...).
    """

    _template = "token with id {token_id!r} failed during {operation}"

    def __init__(self, token_id: str, operation: str) -> None:
        self.token_id = token_id
        self.operation = operation
        super().__init__(self._template.format(token_id=token_id, operation=operation))


class TokenNotFoundError(_TokenOperationError):
    """The referenced token id is not present in the table.

    Raised by write, read and drop (and inspection) when the id was never
    created or has already been dropped.
    """

    _template = "{operation}: token with id {token_id!r} does not exist"


class TokenAlreadyExistsError(_TokenOperationError):
    """``create`` was called with an id that is already present."""

    _template = "{operation}: token with id {token_id!r} already exists"


class OperationAbortedError(TokenManagerError):
    """A scan was abandoned between hash computations.

    Raised when the caller-supplied abort check fires mid-scan. Nothing is
    committed to the token when this is raised.
    """


class ConfigValidationError(TokenManagerError):
    """Configuration field validation failed.

    Raised for unknown override keys or unknown strategy names
    (e.g. an unregistered ``lock_mode``).
    """
