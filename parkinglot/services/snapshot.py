from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parkinglot.core.exceptions import NotFoundError
from parkinglot.domain.lot import LotState, ParkingLot
from parkinglot.models.snapshot import LotSnapshot
from parkinglot.schemas.snapshot import SnapshotListResponse, SnapshotResponse
from parkinglot.utils.logger import get_logger

logger = get_logger(__name__)


async def save_snapshot(db: AsyncSession, lot: ParkingLot) -> SnapshotResponse:
    state = lot.to_state()
    snapshot = LotSnapshot(lot_name=state.name, state=state.model_dump_json())
    db.add(snapshot)
    await db.flush()
    await db.refresh(snapshot)
    logger.info(f"Snapshot {snapshot.id} saved for lot: {state.name}")
    return SnapshotResponse.model_validate(snapshot)


async def _get_snapshot(
    db: AsyncSession, lot_name: str, snapshot_id: int | None = None
) -> LotSnapshot:
    query = select(LotSnapshot).where(LotSnapshot.lot_name == lot_name)
    if snapshot_id is not None:
        query = query.where(LotSnapshot.id == snapshot_id)
    result = await db.execute(query.order_by(LotSnapshot.id.desc()).limit(1))
    snapshot = result.scalar_one_or_none()
    if not snapshot:
        raise NotFoundError(f"No snapshot found for lot {lot_name}")
    return snapshot


async def load_snapshot(
    db: AsyncSession, lot_name: str, snapshot_id: int | None = None, **kwargs
) -> tuple[ParkingLot, SnapshotResponse]:
    """Rebuild a lot from its latest snapshot, or from ``snapshot_id``.

    ``kwargs`` go to ``ParkingLot`` for the parts a snapshot does not carry,
    such as the clock or the fee calculator.
    """
    snapshot = await _get_snapshot(db, lot_name, snapshot_id)
    lot = ParkingLot.from_state(LotState.model_validate_json(snapshot.state), **kwargs)
    logger.info(f"Lot {lot_name} restored from snapshot {snapshot.id}")
    return lot, SnapshotResponse.model_validate(snapshot)


async def list_snapshots(
    db: AsyncSession, lot_name: str, page: int = 1, limit: int = 20
) -> SnapshotListResponse:
    result = await db.execute(
        select(func.count(LotSnapshot.id)).where(LotSnapshot.lot_name == lot_name)
    )
    total = result.scalar() or 0

    result = await db.execute(
        select(LotSnapshot)
        .where(LotSnapshot.lot_name == lot_name)
        .order_by(LotSnapshot.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    snapshots = result.scalars().all()
    return SnapshotListResponse(
        snapshots=[SnapshotResponse.model_validate(s) for s in snapshots],
        total=total,
    )
