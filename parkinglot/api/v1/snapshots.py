from fastapi import APIRouter, Query, Request

from parkinglot.core.dependencies import DB, Lot, Pagination
from parkinglot.schemas.snapshot import (
    SnapshotListResponse,
    SnapshotResponse,
    SnapshotRestoreResponse,
)
from parkinglot.services import snapshot as snapshot_service

router = APIRouter(prefix="/snapshots", tags=["Snapshots"])


@router.post("", response_model=SnapshotResponse)
async def save_snapshot(db: DB, lot: Lot):
    return await snapshot_service.save_snapshot(db, lot)


@router.get("", response_model=SnapshotListResponse)
async def list_snapshots(db: DB, lot: Lot, pagination: Pagination):
    return await snapshot_service.list_snapshots(db, lot.name, pagination.page, pagination.limit)


@router.post("/restore", response_model=SnapshotRestoreResponse)
async def restore_snapshot(
    request: Request,
    db: DB,
    lot: Lot,
    snapshot_id: int | None = Query(None),
):
    """Replace the running lot with a stored snapshot, the latest by default."""
    restored, snapshot = await snapshot_service.load_snapshot(
        db,
        lot.name,
        snapshot_id,
        clock=lot.clock,
        grace_period=lot.grace_period,
    )
    request.app.state.lot = restored
    return SnapshotRestoreResponse(
        snapshot=snapshot,
        spots=len(restored.spots),
        parked_vehicles=len(restored.sessions.list_open()),
        reservations=len(restored.reservations),
    )
