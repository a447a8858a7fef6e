from pydantic import Field, field_validator

from parkinglot.domain.entities import Vehicle, normalize_plate
from parkinglot.schemas.common import BaseSchema
from parkinglot.utils.constants import MAX_LICENSE_PLATE_LENGTH, VehicleCategory


class VehicleBase(BaseSchema):
    license_plate: str = Field(min_length=1, max_length=MAX_LICENSE_PLATE_LENGTH)
    vehicle_type: VehicleCategory
    accessibility_permit: bool = False

    @field_validator("license_plate")
    @classmethod
    def validate_license_plate(cls, v: str) -> str:
        return normalize_plate(v)

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def validate_vehicle_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class VehicleIn(VehicleBase):
    def to_vehicle(self) -> Vehicle:
        return Vehicle(
            license_plate=self.license_plate,
            category=self.vehicle_type,
            accessibility_permit=self.accessibility_permit,
        )


class VehicleResponse(BaseSchema):
    license_plate: str
    category: VehicleCategory
    accessibility_permit: bool
