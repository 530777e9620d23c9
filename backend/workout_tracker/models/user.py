from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workout_tracker.db.base import Base
from workout_tracker.services.units import UnitSystem
from workout_tracker.services.workout_types import DEFAULT_TOTALS_SHOW

BROWSER_LANGUAGE = "browser"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    api_key: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    profile: Mapped["Profile | None"] = relationship(
        "Profile", back_populates="user", uselist=False, lazy="selectin", cascade="all, delete-orphan"
    )
    workouts: Mapped[list["Workout"]] = relationship(
        "Workout", back_populates="user", cascade="all, delete-orphan"
    )
    equipment: Mapped[list["Equipment"]] = relationship(
        "Equipment", back_populates="user", cascade="all, delete-orphan"
    )

    def units(self) -> UnitSystem:
        """Stored unit preference; may be the browser sentinel."""
        if self.profile is None:
            return UnitSystem.BROWSER
        return UnitSystem.parse(self.profile.preferred_units)

    def timezone(self) -> str:
        if self.profile is None or not self.profile.timezone:
            return "UTC"
        return self.profile.timezone

    def language(self) -> str:
        if self.profile is None or not self.profile.language:
            return BROWSER_LANGUAGE
        return self.profile.language


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    language: Mapped[str] = mapped_column(String(16), nullable=False, default=BROWSER_LANGUAGE)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    preferred_units: Mapped[str] = mapped_column(String(16), nullable=False, default=UnitSystem.BROWSER.value)
    totals_show: Mapped[str] = mapped_column(String(32), nullable=False, default=DEFAULT_TOTALS_SHOW.value)

    user: Mapped["User"] = relationship("User", back_populates="profile")
