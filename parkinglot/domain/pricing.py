from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from parkinglot.core.exceptions import ValidationError
from parkinglot.domain.entities import parse_spot_category, parse_vehicle_category
from parkinglot.schemas.payment import RateTable
from parkinglot.utils.constants import SpotCategory, VehicleCategory
from parkinglot.utils.timeutils import utc_now

DEFAULT_BASE_RATES: dict[VehicleCategory, float] = {
    VehicleCategory.CAR: 40.0,
    VehicleCategory.BIKE: 20.0,
    VehicleCategory.TRUCK: 80.0,
    VehicleCategory.BUS: 100.0,
}

DEFAULT_SPOT_MULTIPLIERS: dict[SpotCategory, float] = {
    SpotCategory.STANDARD: 1.0,
    SpotCategory.COMPACT: 0.5,
    SpotCategory.OVERSIZED: 1.5,
    SpotCategory.CHARGING: 1.2,
    SpotCategory.ACCESSIBLE: 0.8,
}

# Inclusive hour ranges, weekdays only
PEAK_HOURS = ((8, 10), (17, 19))

SUBSCRIPTION_DAILY_HOURS = 8.0
SUBSCRIPTION_WORKING_DAYS = 22
SUBSCRIPTION_DISCOUNT = 0.7


class FeeCalculator(Protocol):
    def calculate_fee(
        self,
        vehicle_category: VehicleCategory | str,
        hours: float,
        spot_category: SpotCategory | str,
    ) -> float: ...


class PricingManager:
    """Hourly pricing by vehicle category, scaled by spot category.

    Weekday peak hours carry ``peak_surcharge``; weekends carry
    ``weekend_surcharge`` all day. The surcharge is decided by the time the
    fee is calculated, which comes from ``clock``.
    """

    def __init__(
        self,
        base_rates: dict[VehicleCategory, float] | None = None,
        spot_multipliers: dict[SpotCategory, float] | None = None,
        peak_surcharge: float = 1.5,
        weekend_surcharge: float = 1.2,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.base_rates = dict(DEFAULT_BASE_RATES if base_rates is None else base_rates)
        self.spot_multipliers = dict(
            DEFAULT_SPOT_MULTIPLIERS if spot_multipliers is None else spot_multipliers
        )
        self.peak_surcharge = peak_surcharge
        self.weekend_surcharge = weekend_surcharge
        self.clock = clock

    def surcharge_at(self, moment: datetime) -> float:
        if moment.weekday() >= 5:
            return self.weekend_surcharge
        if any(start <= moment.hour <= end for start, end in PEAK_HOURS):
            return self.peak_surcharge
        return 1.0

    def calculate_fee(
        self,
        vehicle_category: VehicleCategory | str,
        hours: float,
        spot_category: SpotCategory | str,
    ) -> float:
        vehicle_category = parse_vehicle_category(vehicle_category)
        spot_category = parse_spot_category(spot_category)
        duration = hours or 0.0
        if duration < 0:
            raise ValidationError("Parking duration cannot be negative")

        base_rate = self.base_rates.get(vehicle_category, 50.0)
        multiplier = self.spot_multipliers.get(spot_category, 1.0)
        fee = base_rate * duration * multiplier * self.surcharge_at(self.clock())
        return round(fee, 2)

    def monthly_subscription_fee(
        self, vehicle_category: VehicleCategory | str, spot_category: SpotCategory | str
    ) -> float:
        daily = self.calculate_fee(vehicle_category, SUBSCRIPTION_DAILY_HOURS, spot_category)
        return round(daily * SUBSCRIPTION_WORKING_DAYS * SUBSCRIPTION_DISCOUNT, 2)

    def set_base_rate(self, vehicle_category: VehicleCategory | str, rate: float) -> None:
        if rate < 0:
            raise ValidationError("Rate cannot be negative")
        self.base_rates[parse_vehicle_category(vehicle_category)] = rate

    def set_spot_multiplier(self, spot_category: SpotCategory | str, multiplier: float) -> None:
        if multiplier < 0:
            raise ValidationError("Multiplier cannot be negative")
        self.spot_multipliers[parse_spot_category(spot_category)] = multiplier

    def rate_table(self) -> RateTable:
        return RateTable(
            base_rates=self.base_rates,
            spot_multipliers=self.spot_multipliers,
            peak_surcharge=self.peak_surcharge,
            weekend_surcharge=self.weekend_surcharge,
        )

    def apply_rates(self, table: RateTable) -> None:
        self.base_rates = dict(table.base_rates)
        self.spot_multipliers = dict(table.spot_multipliers)
        self.peak_surcharge = table.peak_surcharge
        self.weekend_surcharge = table.weekend_surcharge
