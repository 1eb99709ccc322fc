from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import deferred
from sqlalchemy.sql import func
from cardvault.core import config
from cardvault.core.database import Base


def default_stats() -> dict:
    return {"gamesPlayed": 0, "gamesWon": 0, "totalXP": 0}


def default_settings() -> dict:
    return {"darkMode": False, "notifications": True}


class User(Base):
    """
    Player account for the card game.

    Identity fields are plain columns; the game collections (characters,
    cards, decks, stats, achievements, settings) are stored as JSON
    documents with camelCase keys. The password column only ever holds a
    bcrypt hash, and it is not loaded unless a query asks for it with
    ``undefer(User.password)``.
    """
    __tablename__ = config.settings.USERS_TABLE

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    # Unique index enforces one User per email (case-sensitive)
    email = Column(String, unique=True, index=True, nullable=False)
    # raiseload: touching an unloaded password raises instead of querying
    password = deferred(Column(String, nullable=False), raiseload=True)

    characters = Column(JSON, nullable=False, default=list)
    owned_cards = Column(JSON, nullable=False, default=list)
    decks = Column(JSON, nullable=False, default=list)
    stats = Column(JSON, nullable=False, default=default_stats)
    achievements = Column(JSON, nullable=False, default=list)
    settings = Column(JSON, nullable=False, default=default_settings)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
