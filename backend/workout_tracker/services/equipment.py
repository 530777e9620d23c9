from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.models.equipment import Equipment


async def get_equipment_by_ids(session: AsyncSession, user_id: int, ids: Sequence[int]) -> list[Equipment]:
    """Equipment of user_id among ids; ids of other users are ignored."""
    if not ids:
        return []
    r = await session.execute(
        select(Equipment).where(Equipment.user_id == user_id, Equipment.id.in_(list(ids))).order_by(Equipment.id)
    )
    return list(r.scalars().all())


async def list_equipment(session: AsyncSession, user_id: int) -> list[Equipment]:
    r = await session.execute(select(Equipment).where(Equipment.user_id == user_id).order_by(Equipment.name))
    return list(r.scalars().all())
