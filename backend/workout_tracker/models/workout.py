"""Workout entered by hand or ingested from an uploaded activity file."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from workout_tracker.db.base import Base
from workout_tracker.models.equipment import workout_equipment

WEB_INTERFACE_CREATOR = "web-interface"


class WorkoutValidationError(ValueError):
    """Raised when a workout is not fit to be saved."""


class Workout(Base):
    __tablename__ = "workouts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    type: Mapped[str | None] = mapped_column(String(32), nullable=True)  # WorkoutType value
    dirty: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    filename: Mapped[str | None] = mapped_column(String(512), nullable=True)
    checksum: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)  # sha256, upload dedup
    file_content: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user: Mapped["User"] = relationship("User", back_populates="workouts")
    data: Mapped["WorkoutData | None"] = relationship(
        "WorkoutData", back_populates="workout", uselist=False, lazy="selectin", cascade="all, delete-orphan"
    )
    equipment: Mapped[list["Equipment"]] = relationship(
        "Equipment", secondary=workout_equipment, back_populates="workouts", lazy="selectin"
    )

    def validate(self) -> None:
        if not (self.name or "").strip():
            raise WorkoutValidationError("a workout needs a name")
        if self.date is None:
            raise WorkoutValidationError("a workout needs a date")
        if self.data is None:
            raise WorkoutValidationError("a workout needs data")

    @property
    def has_file(self) -> bool:
        return self.file_content is not None


class WorkoutData(Base):
    """Totals of a workout, in canonical units (meters, seconds, kilograms, m/s)."""

    __tablename__ = "workout_data"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    workout_id: Mapped[int] = mapped_column(
        ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    creator: Mapped[str | None] = mapped_column(String(128), nullable=True)
    total_distance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_repetitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_speed: Mapped[float | None] = mapped_column(Float, nullable=True)
    extra: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    workout: Mapped["Workout"] = relationship("Workout", back_populates="data")

    @property
    def average_speed(self) -> float:
        if not self.total_duration:
            return 0.0
        return (self.total_distance or 0.0) / self.total_duration
