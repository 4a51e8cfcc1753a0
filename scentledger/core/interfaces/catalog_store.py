"""Abstract interfaces for product catalog and customer storage."""

from abc import ABC, abstractmethod

from scentledger.core.entities.product import Product, ProductIdentity
from scentledger.core.entities.sale import Customer


class IProductStore(ABC):
    """Interface for product catalog persistence."""

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a catalog product."""
        pass

    @abstractmethod
    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_by_identity(self, identity: ProductIdentity) -> Product | None:
        """Get product by (brand, name, size), case-insensitive."""
        pass

    @abstractmethod
    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        """List products ordered by brand and name."""
        pass


class ICustomerStore(ABC):
    """Interface for customer persistence."""

    @abstractmethod
    async def create_customer(self, customer: Customer) -> Customer:
        """Create a customer."""
        pass

    @abstractmethod
    async def get_customer(self, customer_id: int) -> Customer | None:
        """Get customer by ID."""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Customer | None:
        """Get customer by name, case-insensitive."""
        pass
