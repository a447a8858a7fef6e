from parkinglot.schemas.common import BaseSchema, TimestampSchema


class SnapshotResponse(TimestampSchema):
    id: int
    lot_name: str


class SnapshotListResponse(BaseSchema):
    snapshots: list[SnapshotResponse]
    total: int


class SnapshotRestoreResponse(BaseSchema):
    snapshot: SnapshotResponse
    spots: int
    parked_vehicles: int
    reservations: int
