"""SQLite implementation of product catalog and customer storage."""

from datetime import datetime

import aiosqlite

from scentledger.config import get_logger
from scentledger.core.entities.product import Product, ProductIdentity
from scentledger.core.entities.sale import Customer
from scentledger.core.interfaces.catalog_store import ICustomerStore, IProductStore
from scentledger.infrastructure.storage.sqlite.base import SQLiteStore, parse_datetime

logger = get_logger(__name__)


class SQLiteProductStore(SQLiteStore, IProductStore):
    """SQLite implementation of the product catalog."""

    async def create_product(self, product: Product) -> Product:
        """Create a catalog product."""
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO products (sku, brand, name, size, sale_price, active, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product.sku,
                    product.brand,
                    product.name,
                    product.size,
                    product.sale_price,
                    int(product.active),
                    product.created_at.isoformat(),
                ),
            )
            product.id = cursor.lastrowid
            logger.info("product_created", product_id=product.id, product=str(product.identity))
            return product

    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID."""
        async with self._read() as conn:
            cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    async def get_by_identity(self, identity: ProductIdentity) -> Product | None:
        """Get product by (brand, name, size); columns compare case-insensitively."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE brand = ? AND name = ? AND size = ?",
                (identity.brand, identity.name, identity.size),
            )
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        """List products ordered by brand and name."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products ORDER BY brand, name, size LIMIT ? OFFSET ?",
                (limit, offset),
            )
            return [self._row_to_product(row) for row in await cursor.fetchall()]

    def _row_to_product(self, row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            sku=row["sku"],
            brand=row["brand"],
            name=row["name"],
            size=row["size"],
            sale_price=row["sale_price"],
            active=bool(row["active"]),
            created_at=parse_datetime(row["created_at"]),
        )


class SQLiteCustomerStore(SQLiteStore, ICustomerStore):
    """SQLite implementation of customer storage."""

    async def create_customer(self, customer: Customer) -> Customer:
        """Create a customer."""
        now = datetime.utcnow()
        customer.created_at = now
        customer.updated_at = now
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO customers (name, phone, email, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    customer.name,
                    customer.phone,
                    customer.email,
                    customer.notes,
                    customer.created_at.isoformat(),
                    customer.updated_at.isoformat(),
                ),
            )
            customer.id = cursor.lastrowid
            logger.info("customer_created", customer_id=customer.id)
            return customer

    async def get_customer(self, customer_id: int) -> Customer | None:
        """Get customer by ID."""
        async with self._read() as conn:
            cursor = await conn.execute("SELECT * FROM customers WHERE id = ?", (customer_id,))
            row = await cursor.fetchone()
            return self._row_to_customer(row) if row else None

    async def get_by_name(self, name: str) -> Customer | None:
        """Get customer by name, case-insensitive."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM customers WHERE name = ?", (name.strip(),)
            )
            row = await cursor.fetchone()
            return self._row_to_customer(row) if row else None

    def _row_to_customer(self, row: aiosqlite.Row) -> Customer:
        return Customer(
            id=row["id"],
            name=row["name"],
            phone=row["phone"],
            email=row["email"],
            notes=row["notes"],
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
        )
