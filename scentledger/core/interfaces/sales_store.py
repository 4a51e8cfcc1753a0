"""Abstract interface for sales storage."""

from abc import ABC, abstractmethod

from scentledger.core.entities.sale import Payment, Sale


class ISalesStore(ABC):
    """Interface for sale, sale line and payment persistence."""

    @abstractmethod
    async def create_sale(self, sale: Sale) -> Sale:
        """Create a sale header with all its lines."""
        pass

    @abstractmethod
    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with lines and their allocations."""
        pass

    @abstractmethod
    async def list_sales(
        self,
        customer_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Sale]:
        """List sales, newest first."""
        pass

    @abstractmethod
    async def count_sales(self, customer_id: int | None = None) -> int:
        """Number of sales, optionally for one customer."""
        pass

    @abstractmethod
    async def update_payments(self, sale: Sale) -> Sale:
        """Persist sale-level and line-level payment figures."""
        pass

    @abstractmethod
    async def add_payment(self, payment: Payment) -> Payment:
        """Record a payment."""
        pass

    @abstractmethod
    async def list_payments(self, sale_id: int) -> list[Payment]:
        """Payments of a sale, oldest first."""
        pass
