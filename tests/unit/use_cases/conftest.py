"""Fixtures for use case tests: a unit of work made of AsyncMock stores."""

from types import TracebackType
from unittest.mock import AsyncMock

import pytest

from scentledger.core.interfaces.unit_of_work import IUnitOfWork


class FakeUnitOfWork(IUnitOfWork):
    """Counts commits and rollbacks instead of touching a database."""

    def __init__(self):
        self.ledger = AsyncMock()
        self.sales = AsyncMock()
        self.products = AsyncMock()
        self.customers = AsyncMock()
        self.committed = 0
        self.rolled_back = 0

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.committed += 1
        else:
            self.rolled_back += 1


@pytest.fixture
def uow() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(uow):
    return lambda: uow
