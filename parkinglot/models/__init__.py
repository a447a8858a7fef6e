from parkinglot.models.snapshot import LotSnapshot

__all__ = [
    "LotSnapshot",
]
