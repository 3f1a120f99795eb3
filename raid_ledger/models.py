import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_uuid():
    """Characters and availability windows are addressed by UUID so ids can be shared in links"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    discord_id = Column(String(64), unique=True, index=True, nullable=True)  # "local:<email>" for local accounts
    username = Column(String(100), unique=True, index=True, nullable=False)
    display_name = Column(String(100), nullable=True)
    avatar = Column(String(255), nullable=True)  # Discord avatar hash
    custom_avatar_url = Column(String(500), nullable=True)
    role = Column(String(20), default="member", nullable=False)  # member, operator, admin
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    characters = relationship("Character", back_populates="user", cascade="all, delete-orphan")
    signups = relationship("EventSignup", back_populates="user", cascade="all, delete-orphan")
    preferences = relationship("UserPreference", back_populates="user", cascade="all, delete-orphan")


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    igdb_id = Column(Integer, unique=True, nullable=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    cover_url = Column(String(500), nullable=True)
    genres = Column(JSON, default=list, nullable=True)  # IGDB genre ids
    created_at = Column(DateTime, server_default=func.now())


class Character(Base):
    __tablename__ = "characters"
    __table_args__ = (
        UniqueConstraint("user_id", "game_id", "name", "realm", name="unique_user_game_character"),
        # One main character per user per game
        Index(
            "unique_main_per_game",
            "user_id",
            "game_id",
            unique=True,
            postgresql_where=text("is_main = true"),
            sqlite_where=text("is_main = 1"),
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    realm = Column(String(100), nullable=True)
    class_name = Column("class", String(50), nullable=True)
    spec = Column(String(50), nullable=True)
    role = Column(String(20), nullable=True)  # tank, healer, dps
    role_override = Column(String(20), nullable=True)
    is_main = Column(Boolean, default=False, nullable=False)
    item_level = Column(Integer, nullable=True)
    external_id = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    level = Column(Integer, nullable=True)
    race = Column(String(50), nullable=True)
    faction = Column(String(20), nullable=True)  # alliance, horde
    display_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="characters")
    game = relationship("Game")


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (CheckConstraint("start_time < end_time", name="event_time_order"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="SET NULL"), nullable=True)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)  # UTC
    end_time = Column(DateTime, nullable=False, index=True)  # UTC, exclusive
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    creator = relationship("User")
    game = relationship("Game")
    signups = relationship("EventSignup", back_populates="event", cascade="all, delete-orphan")


class EventSignup(Base):
    __tablename__ = "event_signups"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="unique_event_user"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    character_id = Column(String(36), ForeignKey("characters.id", ondelete="SET NULL"), nullable=True)
    note = Column(String(200), nullable=True)
    confirmation_status = Column(String(20), default="pending", nullable=False)  # pending, confirmed, changed
    status = Column(String(20), default="signed_up", nullable=False)  # signed_up, tentative, declined
    signed_up_at = Column(DateTime, server_default=func.now())

    event = relationship("Event", back_populates="signups")
    user = relationship("User", back_populates="signups")
    character = relationship("Character")
    assignment = relationship(
        "RosterAssignment", back_populates="signup", uselist=False, cascade="all, delete-orphan"
    )


class RosterAssignment(Base):
    __tablename__ = "roster_assignments"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    signup_id = Column(
        Integer, ForeignKey("event_signups.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    role = Column(String(20), nullable=False)  # tank, healer, dps, flex, player, bench
    position = Column(Integer, nullable=False)
    is_override = Column(Boolean, default=False, nullable=False)

    signup = relationship("EventSignup", back_populates="assignment")


class GameTimeTemplate(Base):
    __tablename__ = "game_time_templates"
    __table_args__ = (
        UniqueConstraint("user_id", "day_of_week", "start_hour", name="unique_user_day_hour"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0=Mon ... 6=Sun
    start_hour = Column(Integer, nullable=False)  # 0-23
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class GameTimeOverride(Base):
    __tablename__ = "game_time_overrides"
    __table_args__ = (UniqueConstraint("user_id", "date", "hour", name="unique_user_date_hour"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    hour = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)  # available, blocked
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class GameTimeAbsence(Base):
    __tablename__ = "game_time_absences"
    __table_args__ = (CheckConstraint("start_date <= end_date", name="absence_date_order"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # inclusive
    reason = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Availability(Base):
    """A concrete availability window [start_time, end_time) for one user"""

    __tablename__ = "availability"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="availability_time_order"),
        Index("ix_availability_user_range", "user_id", "start_time", "end_time"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)  # UTC
    end_time = Column(DateTime, nullable=False)  # UTC, exclusive
    status = Column(String(20), default="available", nullable=False)  # available, committed, blocked, freed
    game_id = Column(Integer, ForeignKey("games.id", ondelete="SET NULL"), nullable=True)
    source_event_id = Column(Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class UserPreference(Base):
    __tablename__ = "user_preferences"
    __table_args__ = (UniqueConstraint("user_id", "key", name="unique_user_preference"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    key = Column(String(64), nullable=False)
    value = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="preferences")
