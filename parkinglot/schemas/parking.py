from parkinglot.schemas.common import BaseSchema
from parkinglot.utils.constants import SpotCategory, SpotState


class SpotResponse(BaseSchema):
    id: str
    category: SpotCategory
    state: SpotState
    vehicle_plate: str | None = None
    reservation_id: int | None = None


class SpotListResponse(BaseSchema):
    spots: list[SpotResponse]
    total: int


class CategoryAvailability(BaseSchema):
    category: SpotCategory
    total: int
    available: int
    occupied: int
    reserved: int


class AvailabilityResponse(BaseSchema):
    lot_name: str
    categories: list[CategoryAvailability]
    total_spots: int
    total_available: int
