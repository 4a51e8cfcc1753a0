"""Abstract unit of work spanning every store a sale touches."""

from abc import ABC, abstractmethod
from types import TracebackType

from scentledger.core.interfaces.catalog_store import ICustomerStore, IProductStore
from scentledger.core.interfaces.ledger_store import ILedgerStore
from scentledger.core.interfaces.sales_store import ISalesStore


class IUnitOfWork(ABC):
    """
    Transactional scope.

    Usage:
        async with uow_factory() as uow:
            await uow.ledger.decrement_lot(...)

    Commits when the block exits cleanly, rolls back on any exception.
    """

    ledger: ILedgerStore
    sales: ISalesStore
    products: IProductStore
    customers: ICustomerStore

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass
