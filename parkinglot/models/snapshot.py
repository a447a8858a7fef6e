from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parkinglot.models.base import BaseModel


class LotSnapshot(BaseModel):
    """A point-in-time copy of a lot's in-memory state, stored as JSON."""

    __tablename__ = "lot_snapshots"

    id: Mapped[int] = mapped_column(primary_key=True)
    lot_name: Mapped[str] = mapped_column(String(100), index=True)
    state: Mapped[str] = mapped_column(Text)
