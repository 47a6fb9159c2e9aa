"""Transaction boundary around the store's repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from types import TracebackType

    from ldapmerge.domain.ports.persistence import (
        ConnectionProfileRepository,
        HistoryRepository,
    )


@dataclass(slots=True)
class StoreRepositories:
    history: HistoryRepository
    profiles: ConnectionProfileRepository


class StoreUnitOfWork(Protocol):
    """Use as a context manager; nothing is kept unless ``commit`` is called.

    Leaving the block with an exception rolls the transaction back.
    """

    @property
    def repositories(self) -> StoreRepositories: ...

    def __enter__(self) -> StoreUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
