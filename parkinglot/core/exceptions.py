from fastapi import HTTPException, status


class ParkingLotError(HTTPException):
    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An error occurred",
    ):
        super().__init__(status_code=status_code, detail=detail)

    def __str__(self) -> str:
        return str(self.detail)


class NotFoundError(ParkingLotError):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(ParkingLotError):
    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ValidationError(ParkingLotError):
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class PaymentError(ParkingLotError):
    def __init__(self, detail: str = "Payment processing failed"):
        super().__init__(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=detail)


class NoAvailableSpotError(ConflictError):
    def __init__(self, detail: str = "No available spot"):
        super().__init__(detail=detail)


class AlreadyParkedError(ConflictError):
    def __init__(self, detail: str = "Vehicle is already parked"):
        super().__init__(detail=detail)


class ReservationConflictError(ConflictError):
    def __init__(self, detail: str = "Reservation conflict"):
        super().__init__(detail=detail)


class InvalidReservationError(ValidationError):
    def __init__(self, detail: str = "Invalid or inactive reservation"):
        super().__init__(detail=detail)


class InvalidWindowError(ValidationError):
    def __init__(self, detail: str = "Reservation start time must be before end time"):
        super().__init__(detail=detail)


class InvalidCategoryError(ValidationError):
    def __init__(self, detail: str = "Invalid category"):
        super().__init__(detail=detail)


class VehicleNotFoundError(NotFoundError):
    def __init__(self, detail: str = "Vehicle not found"):
        super().__init__(detail=detail)
