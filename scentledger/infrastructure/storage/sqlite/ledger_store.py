"""SQLite implementation of the inventory ledger."""

from datetime import datetime

import aiosqlite

from scentledger.config import get_logger
from scentledger.core.entities.allocation import AllocationRecord, AvailableLot
from scentledger.core.entities.product import ProductIdentity
from scentledger.core.entities.settlement import SettlementRow, ShipmentTotals
from scentledger.core.entities.shipment import (
    InventoryAdjustment,
    InventorySummary,
    Shipment,
    ShipmentLot,
    ShipmentStatus,
)
from scentledger.core.exceptions import DatabaseError
from scentledger.core.interfaces.ledger_store import ILedgerStore
from scentledger.infrastructure.storage.sqlite.base import (
    SQLiteStore,
    iso,
    parse_date,
    parse_datetime,
)

logger = get_logger(__name__)

_LOT_COLUMNS = """
    si.id, si.shipment_id, si.product_id, si.quantity, si.unit_cost,
    si.remaining_inventory, si.created_at, p.brand, p.name, p.size
"""

# Oldest shipment first; shipment id then lot id keep ties deterministic
_FIFO_ORDER = "s.created_at ASC, s.id ASC, si.id ASC"


class SQLiteLedgerStore(SQLiteStore, ILedgerStore):
    """SQLite implementation of shipments, lots, allocations and adjustments."""

    # Shipments

    async def create_shipment(self, shipment: Shipment) -> Shipment:
        """Create a shipment and its lots."""
        now = datetime.utcnow()
        shipment.created_at = shipment.created_at or now
        shipment.updated_at = now
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO shipments (
                    shipment_number, status, shipped_date, delivered_date,
                    shipping_cost, additional_costs, total_cost, total_revenue,
                    cost_of_goods_sold, net_profit, notes, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    shipment.shipment_number,
                    shipment.status.value,
                    iso(shipment.shipped_date),
                    iso(shipment.delivered_date),
                    shipment.shipping_cost,
                    shipment.additional_costs,
                    shipment.total_cost,
                    shipment.total_revenue,
                    shipment.cost_of_goods_sold,
                    shipment.net_profit,
                    shipment.notes,
                    shipment.created_at.isoformat(),
                    shipment.updated_at.isoformat(),
                ),
            )
            shipment.id = cursor.lastrowid

            for lot in shipment.lots:
                lot.shipment_id = shipment.id
                lot.created_at = shipment.created_at
                cursor = await conn.execute(
                    """
                    INSERT INTO shipment_items (
                        shipment_id, product_id, quantity, unit_cost,
                        remaining_inventory, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        lot.shipment_id,
                        lot.product_id,
                        lot.quantity,
                        lot.unit_cost,
                        lot.remaining_inventory,
                        lot.created_at.isoformat(),
                    ),
                )
                lot.id = cursor.lastrowid

            logger.info(
                "shipment_created",
                shipment_id=shipment.id,
                shipment_number=shipment.shipment_number,
                lots=len(shipment.lots),
            )
            return shipment

    async def get_shipment(self, shipment_id: int) -> Shipment | None:
        """Get shipment by ID with its lots."""
        async with self._read() as conn:
            cursor = await conn.execute("SELECT * FROM shipments WHERE id = ?", (shipment_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            shipment = self._row_to_shipment(row)

            cursor = await conn.execute(
                f"""
                SELECT {_LOT_COLUMNS}
                FROM shipment_items si
                JOIN products p ON p.id = si.product_id
                WHERE si.shipment_id = ?
                ORDER BY si.id
                """,
                (shipment_id,),
            )
            shipment.lots = [self._row_to_lot(r) for r in await cursor.fetchall()]
            return shipment

    async def list_shipments(
        self,
        status: ShipmentStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Shipment]:
        """List shipments, newest first, without lots."""
        query = "SELECT * FROM shipments"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status.value)
        query += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        async with self._read() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_shipment(row) for row in rows]

    async def count_shipments(self, status: ShipmentStatus | None = None) -> int:
        query = "SELECT COUNT(*) FROM shipments"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status.value)

        async with self._read() as conn:
            cursor = await conn.execute(query, params)
            (count,) = await cursor.fetchone()
            return count

    async def update_shipment_status(self, shipment: Shipment) -> Shipment:
        """Persist status and lifecycle dates."""
        shipment.updated_at = datetime.utcnow()
        async with self._write() as conn:
            await conn.execute(
                """
                UPDATE shipments SET
                    status = ?, shipped_date = ?, delivered_date = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    shipment.status.value,
                    iso(shipment.shipped_date),
                    iso(shipment.delivered_date),
                    shipment.updated_at.isoformat(),
                    shipment.id,
                ),
            )
            logger.info("shipment_status_updated", shipment_id=shipment.id, status=shipment.status.value)
            return shipment

    async def update_shipment_aggregates(self, totals: ShipmentTotals) -> None:
        """Write derived aggregates."""
        async with self._write() as conn:
            await conn.execute(
                """
                UPDATE shipments SET
                    total_cost = ?, total_revenue = ?, cost_of_goods_sold = ?,
                    net_profit = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    totals.total_cost,
                    totals.total_revenue,
                    totals.cost_of_goods_sold,
                    totals.net_profit,
                    datetime.utcnow().isoformat(),
                    totals.shipment_id,
                ),
            )

    # Lots

    async def get_lot(self, lot_id: int) -> ShipmentLot | None:
        """Get a lot by ID."""
        async with self._read() as conn:
            cursor = await conn.execute(
                f"""
                SELECT {_LOT_COLUMNS}
                FROM shipment_items si
                JOIN products p ON p.id = si.product_id
                WHERE si.id = ?
                """,
                (lot_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_lot(row)

    async def get_available_inventory(self, identity: ProductIdentity) -> list[AvailableLot]:
        """Lots of a product that still hold stock, in FIFO order."""
        async with self._read() as conn:
            cursor = await conn.execute(
                f"""
                SELECT si.id, si.shipment_id, s.created_at, si.remaining_inventory, si.unit_cost
                FROM shipment_items si
                JOIN products p ON p.id = si.product_id
                JOIN shipments s ON s.id = si.shipment_id
                WHERE p.brand = ? AND p.name = ? AND p.size = ?
                  AND si.remaining_inventory > 0
                ORDER BY {_FIFO_ORDER}
                """,
                (identity.brand, identity.name, identity.size),
            )
            rows = await cursor.fetchall()
            return [
                AvailableLot(
                    lot_id=row["id"],
                    shipment_id=row["shipment_id"],
                    arrival_key=parse_datetime(row["created_at"]),
                    remaining_quantity=row["remaining_inventory"],
                    unit_cost=row["unit_cost"],
                )
                for row in rows
            ]

    async def decrement_lot(self, lot_id: int, quantity: int) -> bool:
        """Conditional decrement; False when the lot holds fewer units."""
        try:
            async with self._write() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE shipment_items
                    SET remaining_inventory = remaining_inventory - ?
                    WHERE id = ? AND remaining_inventory >= ?
                    """,
                    (quantity, lot_id, quantity),
                )
                return cursor.rowcount == 1
        except aiosqlite.Error as e:
            raise DatabaseError("decrement_lot", str(e)) from e

    async def compare_and_set_remaining(
        self, lot_id: int, expected: int, new_remaining: int
    ) -> bool:
        """Set remaining_inventory if it still equals expected."""
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                UPDATE shipment_items SET remaining_inventory = ?
                WHERE id = ? AND remaining_inventory = ?
                """,
                (new_remaining, lot_id, expected),
            )
            return cursor.rowcount == 1

    async def update_lot_cost(self, lot_id: int, unit_cost: float) -> None:
        """Change a lot's unit cost."""
        async with self._write() as conn:
            await conn.execute(
                "UPDATE shipment_items SET unit_cost = ? WHERE id = ?",
                (unit_cost, lot_id),
            )

    async def consolidated_inventory(self) -> list[InventorySummary]:
        """Remaining stock per product with the next FIFO unit cost."""
        async with self._read() as conn:
            cursor = await conn.execute(
                """
                SELECT p.brand, p.name, p.size,
                       SUM(si.remaining_inventory) AS total_remaining,
                       COUNT(si.id) AS lot_count,
                       (
                           SELECT nxt.unit_cost
                           FROM shipment_items nxt
                           JOIN shipments s ON s.id = nxt.shipment_id
                           WHERE nxt.product_id = p.id AND nxt.remaining_inventory > 0
                           ORDER BY s.created_at ASC, s.id ASC, nxt.id ASC
                           LIMIT 1
                       ) AS next_unit_cost
                FROM shipment_items si
                JOIN products p ON p.id = si.product_id
                WHERE si.remaining_inventory > 0
                GROUP BY p.id
                ORDER BY p.brand, p.name, p.size
                """
            )
            rows = await cursor.fetchall()
            return [
                InventorySummary(
                    identity=ProductIdentity(brand=row["brand"], name=row["name"], size=row["size"]),
                    total_remaining=row["total_remaining"],
                    lot_count=row["lot_count"],
                    next_unit_cost=row["next_unit_cost"],
                )
                for row in rows
            ]

    # Allocations

    async def insert_allocation(self, record: AllocationRecord) -> AllocationRecord:
        """Insert an allocation record."""
        try:
            async with self._write() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO sale_item_allocations (
                        sale_item_id, shipment_item_id, quantity, unit_cost, created_at
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        record.sale_item_id,
                        record.shipment_item_id,
                        record.quantity,
                        record.unit_cost,
                        record.created_at.isoformat(),
                    ),
                )
                record.id = cursor.lastrowid
                return record
        except aiosqlite.Error as e:
            raise DatabaseError("insert_allocation", str(e)) from e

    async def list_allocations_for_lot(self, lot_id: int) -> list[AllocationRecord]:
        """All allocation records drawn from a lot."""
        async with self._read() as conn:
            cursor = await conn.execute(
                """
                SELECT a.*, si.shipment_id
                FROM sale_item_allocations a
                JOIN shipment_items si ON si.id = a.shipment_item_id
                WHERE a.shipment_item_id = ?
                ORDER BY a.id
                """,
                (lot_id,),
            )
            rows = await cursor.fetchall()
            return [row_to_allocation(row) for row in rows]

    async def rewrite_allocation_costs(self, lot_id: int, unit_cost: float) -> int:
        """Set unit_cost on every allocation of a lot."""
        async with self._write() as conn:
            cursor = await conn.execute(
                "UPDATE sale_item_allocations SET unit_cost = ? WHERE shipment_item_id = ?",
                (unit_cost, lot_id),
            )
            return cursor.rowcount

    async def list_settlement_rows(self, shipment_id: int) -> list[SettlementRow]:
        """Allocations of a shipment's lots with their sale price and currency."""
        async with self._read() as conn:
            cursor = await conn.execute(
                """
                SELECT a.quantity, a.unit_cost, it.unit_price,
                       sa.currency, sa.exchange_rate_used
                FROM sale_item_allocations a
                JOIN shipment_items si ON si.id = a.shipment_item_id
                JOIN sale_items it ON it.id = a.sale_item_id
                JOIN sales sa ON sa.id = it.sale_id
                WHERE si.shipment_id = ?
                ORDER BY a.id
                """,
                (shipment_id,),
            )
            rows = await cursor.fetchall()
            return [
                SettlementRow(
                    quantity=row["quantity"],
                    unit_cost=row["unit_cost"],
                    unit_price=row["unit_price"],
                    currency=row["currency"],
                    exchange_rate_used=row["exchange_rate_used"],
                )
                for row in rows
            ]

    # Adjustments

    async def add_adjustment(self, adjustment: InventoryAdjustment) -> InventoryAdjustment:
        """Record an inventory adjustment."""
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO inventory_adjustments (
                    shipment_item_id, adjustment_quantity, previous_remaining,
                    new_remaining, reason, adjusted_by, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    adjustment.shipment_item_id,
                    adjustment.adjustment_quantity,
                    adjustment.previous_remaining,
                    adjustment.new_remaining,
                    adjustment.reason,
                    adjustment.adjusted_by,
                    adjustment.created_at.isoformat(),
                ),
            )
            adjustment.id = cursor.lastrowid
            return adjustment

    async def list_adjustments(self, lot_id: int) -> list[InventoryAdjustment]:
        """Adjustments of a lot, newest first."""
        async with self._read() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM inventory_adjustments
                WHERE shipment_item_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (lot_id,),
            )
            rows = await cursor.fetchall()
            return [
                InventoryAdjustment(
                    id=row["id"],
                    shipment_item_id=row["shipment_item_id"],
                    adjustment_quantity=row["adjustment_quantity"],
                    previous_remaining=row["previous_remaining"],
                    new_remaining=row["new_remaining"],
                    reason=row["reason"],
                    adjusted_by=row["adjusted_by"],
                    created_at=parse_datetime(row["created_at"]),
                )
                for row in rows
            ]

    # Row mappers

    def _row_to_shipment(self, row: aiosqlite.Row) -> Shipment:
        return Shipment(
            id=row["id"],
            shipment_number=row["shipment_number"],
            status=ShipmentStatus(row["status"]),
            shipped_date=parse_date(row["shipped_date"]),
            delivered_date=parse_date(row["delivered_date"]),
            shipping_cost=row["shipping_cost"],
            additional_costs=row["additional_costs"],
            total_cost=row["total_cost"],
            total_revenue=row["total_revenue"],
            cost_of_goods_sold=row["cost_of_goods_sold"],
            net_profit=row["net_profit"],
            notes=row["notes"],
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
        )

    def _row_to_lot(self, row: aiosqlite.Row) -> ShipmentLot:
        return ShipmentLot(
            id=row["id"],
            shipment_id=row["shipment_id"],
            product_id=row["product_id"],
            identity=ProductIdentity(brand=row["brand"], name=row["name"], size=row["size"]),
            quantity=row["quantity"],
            unit_cost=row["unit_cost"],
            remaining_inventory=row["remaining_inventory"],
            created_at=parse_datetime(row["created_at"]),
        )


def row_to_allocation(row: aiosqlite.Row) -> AllocationRecord:
    """Map a sale_item_allocations row joined with its lot's shipment_id."""
    return AllocationRecord(
        id=row["id"],
        sale_item_id=row["sale_item_id"],
        shipment_item_id=row["shipment_item_id"],
        shipment_id=row["shipment_id"],
        quantity=row["quantity"],
        unit_cost=row["unit_cost"],
        created_at=parse_datetime(row["created_at"]),
    )
