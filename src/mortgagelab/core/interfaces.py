"""
Collaborator contracts for MortgageLab.

The engine does not persist anything. Storage adapters written by callers
satisfy the protocol below and only ever receive or return plain domain values.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .result import Result

if TYPE_CHECKING:
    # Only imported for type checking to avoid runtime cycles
    from ..portfolio import MortgageEntry


class RepositoryError(str, Enum):
    """Failure kinds a repository implementation may report."""

    NOT_FOUND = "NotFound"
    STORAGE_FAILURE = "StorageFailure"
    SERIALIZATION_FAILURE = "SerializationFailure"


@runtime_checkable
class MortgageRepository(Protocol):
    """
    Contract for mortgage storage adapters.

    Every method returns a ``Result`` whose error is a ``RepositoryError``.
    """

    def save(self, entry: MortgageEntry) -> Result[MortgageEntry]:
        """Store (insert or replace) an entry and return it."""
        ...

    def find_by_id(self, mortgage_id: str) -> Result[MortgageEntry]:
        """Look up a single entry by id."""
        ...

    def find_all(self) -> Result[list[MortgageEntry]]:
        """Return every stored entry."""
        ...

    def delete(self, mortgage_id: str) -> Result[None]:
        """Remove an entry by id."""
        ...
