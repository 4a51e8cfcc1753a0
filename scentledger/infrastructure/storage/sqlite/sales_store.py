"""SQLite implementation of sales storage."""

from datetime import datetime

import aiosqlite

from scentledger.config import get_logger
from scentledger.core.entities.product import ProductIdentity
from scentledger.core.entities.sale import (
    Currency,
    Payment,
    PaymentStatus,
    Sale,
    SaleLine,
)
from scentledger.core.interfaces.sales_store import ISalesStore
from scentledger.infrastructure.storage.sqlite.base import (
    SQLiteStore,
    iso,
    parse_date,
    parse_datetime,
)
from scentledger.infrastructure.storage.sqlite.ledger_store import row_to_allocation

logger = get_logger(__name__)


class SQLiteSalesStore(SQLiteStore, ISalesStore):
    """SQLite implementation of sales, sale lines and payments."""

    async def create_sale(self, sale: Sale) -> Sale:
        """Create a sale header with all its lines."""
        now = datetime.utcnow()
        sale.created_at = now
        sale.updated_at = now
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO sales (
                    customer_id, sale_date, currency, exchange_rate_used,
                    total_amount, amount_paid, outstanding_balance, payment_status,
                    payment_method, notes, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    sale.customer_id,
                    sale.sale_date.isoformat(),
                    sale.currency.value,
                    sale.exchange_rate_used,
                    sale.total_amount,
                    sale.amount_paid,
                    sale.outstanding_balance,
                    sale.payment_status.value,
                    sale.payment_method,
                    sale.notes,
                    sale.created_at.isoformat(),
                    sale.updated_at.isoformat(),
                ),
            )
            sale.id = cursor.lastrowid

            for line in sale.lines:
                line.sale_id = sale.id
                line.created_at = now
                cursor = await conn.execute(
                    """
                    INSERT INTO sale_items (
                        sale_id, product_id, quantity, unit_price,
                        line_total, amount_paid, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        line.sale_id,
                        line.product_id,
                        line.quantity,
                        line.unit_price,
                        line.line_total,
                        line.amount_paid,
                        line.created_at.isoformat(),
                    ),
                )
                line.id = cursor.lastrowid

            logger.info(
                "sale_record_created",
                sale_id=sale.id,
                lines=len(sale.lines),
                total=sale.total_amount,
                currency=sale.currency.value,
            )
            return sale

    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale with lines and allocations."""
        async with self._read() as conn:
            cursor = await conn.execute(
                """
                SELECT s.*, c.name AS customer_name
                FROM sales s
                LEFT JOIN customers c ON c.id = s.customer_id
                WHERE s.id = ?
                """,
                (sale_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            cursor = await conn.execute(
                """
                SELECT it.*, p.brand, p.name, p.size
                FROM sale_items it
                JOIN products p ON p.id = it.product_id
                WHERE it.sale_id = ?
                ORDER BY it.id
                """,
                (sale_id,),
            )
            lines = [self._row_to_line(r) for r in await cursor.fetchall()]

            cursor = await conn.execute(
                """
                SELECT a.*, si.shipment_id
                FROM sale_item_allocations a
                JOIN shipment_items si ON si.id = a.shipment_item_id
                JOIN sale_items it ON it.id = a.sale_item_id
                WHERE it.sale_id = ?
                ORDER BY a.id
                """,
                (sale_id,),
            )
            by_line: dict[int, list] = {}
            for r in await cursor.fetchall():
                by_line.setdefault(r["sale_item_id"], []).append(row_to_allocation(r))
            for line in lines:
                line.allocations = by_line.get(line.id, [])

            return self._row_to_sale(row, lines)

    async def list_sales(
        self,
        customer_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Sale]:
        """List sale headers, newest first."""
        query = """
            SELECT s.*, c.name AS customer_name
            FROM sales s
            LEFT JOIN customers c ON c.id = s.customer_id
        """
        params: list = []
        if customer_id is not None:
            query += " WHERE s.customer_id = ?"
            params.append(customer_id)
        query += " ORDER BY s.sale_date DESC, s.id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        async with self._read() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_sale(row, []) for row in rows]

    async def count_sales(self, customer_id: int | None = None) -> int:
        query = "SELECT COUNT(*) FROM sales"
        params: list = []
        if customer_id is not None:
            query += " WHERE customer_id = ?"
            params.append(customer_id)

        async with self._read() as conn:
            cursor = await conn.execute(query, params)
            (count,) = await cursor.fetchone()
            return count

    async def update_payments(self, sale: Sale) -> Sale:
        """Persist sale-level and line-level payment figures."""
        sale.updated_at = datetime.utcnow()
        async with self._write() as conn:
            await conn.execute(
                """
                UPDATE sales SET
                    amount_paid = ?, outstanding_balance = ?, payment_status = ?,
                    payment_method = COALESCE(?, payment_method), updated_at = ?
                WHERE id = ?
                """,
                (
                    sale.amount_paid,
                    sale.outstanding_balance,
                    sale.payment_status.value,
                    sale.payment_method,
                    sale.updated_at.isoformat(),
                    sale.id,
                ),
            )
            await conn.executemany(
                "UPDATE sale_items SET amount_paid = ? WHERE id = ? AND sale_id = ?",
                [(line.amount_paid, line.id, sale.id) for line in sale.lines],
            )
            logger.info(
                "sale_payments_updated",
                sale_id=sale.id,
                amount_paid=sale.amount_paid,
                status=sale.payment_status.value,
            )
            return sale

    async def add_payment(self, payment: Payment) -> Payment:
        """Record a payment."""
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO payments (
                    sale_id, sale_item_id, amount, payment_method,
                    payment_date, notes, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    payment.sale_id,
                    payment.sale_item_id,
                    payment.amount,
                    payment.payment_method,
                    payment.payment_date.isoformat(),
                    payment.notes,
                    payment.created_at.isoformat(),
                ),
            )
            payment.id = cursor.lastrowid
            return payment

    async def list_payments(self, sale_id: int) -> list[Payment]:
        """Payments of a sale, oldest first."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM payments WHERE sale_id = ? ORDER BY payment_date, id",
                (sale_id,),
            )
            rows = await cursor.fetchall()
            return [
                Payment(
                    id=row["id"],
                    sale_id=row["sale_id"],
                    sale_item_id=row["sale_item_id"],
                    amount=row["amount"],
                    payment_method=row["payment_method"],
                    payment_date=parse_date(row["payment_date"]),
                    notes=row["notes"],
                    created_at=parse_datetime(row["created_at"]),
                )
                for row in rows
            ]

    def _row_to_line(self, row: aiosqlite.Row) -> SaleLine:
        return SaleLine(
            id=row["id"],
            sale_id=row["sale_id"],
            product_id=row["product_id"],
            identity=ProductIdentity(brand=row["brand"], name=row["name"], size=row["size"]),
            quantity=row["quantity"],
            unit_price=row["unit_price"],
            amount_paid=row["amount_paid"],
            created_at=parse_datetime(row["created_at"]),
        )

    def _row_to_sale(self, row: aiosqlite.Row, lines: list[SaleLine]) -> Sale:
        sale = Sale(
            id=row["id"],
            customer_id=row["customer_id"],
            customer_name=row["customer_name"],
            sale_date=parse_date(row["sale_date"]),
            currency=Currency(row["currency"]),
            exchange_rate_used=row["exchange_rate_used"],
            total_amount=row["total_amount"],
            amount_paid=row["amount_paid"],
            payment_method=row["payment_method"],
            notes=row["notes"],
            lines=lines,
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
        )
        # payment_status is always derived; a stored value that disagrees is reported
        if sale.payment_status != PaymentStatus(row["payment_status"]):
            logger.warning(
                "sale_status_drift",
                sale_id=sale.id,
                stored=row["payment_status"],
                derived=sale.payment_status.value,
            )
        return sale
