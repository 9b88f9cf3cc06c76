from sqlalchemy import delete, insert
from sqlalchemy.engine import Connection

from booking_engine.domain.records import DateBlockRecord
from booking_engine.models.blocks import DateBlock


def insert_block(conn: Connection, block: DateBlockRecord) -> None:
    conn.execute(
        insert(DateBlock).values(
            id=block.id,
            property_id=block.property_id,
            start_date=block.start_date,
            end_date=block.end_date,
            reason=block.reason,
            notes=block.notes,
            created_by=block.created_by,
            created_at=block.created_at,
        )
    )


def delete_block(conn: Connection, property_id: str, block_id: str) -> bool:
    """Delete a block. Returns False if it was already gone."""
    result = conn.execute(
        delete(DateBlock).where(DateBlock.property_id == property_id, DateBlock.id == block_id)
    )
    return result.rowcount > 0
