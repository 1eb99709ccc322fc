from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Same loose check the registration form has always used: something@something.tld
EMAIL_PATTERN = r".+@.+\..+"


def check_password_characters(value: Optional[str]) -> Optional[str]:
    # bcrypt cannot hash strings containing NUL
    if value is not None and "\x00" in value:
        raise ValueError("Password cannot contain NUL characters")
    return value


class CamelModel(BaseModel):
    """Accepts and emits the camelCase field names used by the game client"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Character(CamelModel):
    character_name: Optional[str] = None
    level: int = Field(default=1, ge=1)
    # "class" is a keyword in Python
    character_class: Optional[str] = Field(default=None, alias="class")
    race: Optional[str] = None


class OwnedCard(CamelModel):
    card_id: Optional[str] = None
    card_type: Optional[str] = None
    card_details: Optional[dict[str, Any]] = None


class DeckCard(CamelModel):
    card_id: Optional[str] = None
    quantity: Optional[int] = None


class Deck(CamelModel):
    deck_name: Optional[str] = None
    cards: list[DeckCard] = Field(default_factory=list)


class Stats(CamelModel):
    games_played: int = Field(default=0, ge=0)
    games_won: int = Field(default=0, ge=0)
    total_xp: int = Field(default=0, ge=0, alias="totalXP")


class UserSettings(CamelModel):
    dark_mode: bool = False
    notifications: bool = True


class UserCreate(CamelModel):
    """Registration payload. Password arrives in plaintext and is hashed before storage."""

    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)
    characters: list[Character] = Field(default_factory=list)
    owned_cards: list[OwnedCard] = Field(default_factory=list)
    decks: list[Deck] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)
    achievements: list[str] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)

    @field_validator("password")
    @classmethod
    def password_has_no_nul(cls, value):
        return check_password_characters(value)


class UserUpdate(CamelModel):
    """
    Partial update. Only the fields present in the payload are written;
    a field that is present must still satisfy its constraint (null included).
    """

    first_name: Optional[str] = Field(default=None, min_length=2)
    last_name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(default=None, min_length=1)
    characters: Optional[list[Character]] = None
    owned_cards: Optional[list[OwnedCard]] = None
    decks: Optional[list[Deck]] = None
    stats: Optional[Stats] = None
    achievements: Optional[list[str]] = None
    settings: Optional[UserSettings] = None

    @field_validator("password")
    @classmethod
    def password_has_no_nul(cls, value):
        return check_password_characters(value)

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulls = [name for name in self.model_fields_set if getattr(self, name) is None]
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(sorted(nulls))}")
        return self


class UserRead(CamelModel):
    """Default read shape - never carries the password"""

    id: int
    first_name: str
    last_name: str
    email: str
    characters: list[Character] = Field(default_factory=list)
    owned_cards: list[OwnedCard] = Field(default_factory=list)
    decks: list[Deck] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)
    achievements: list[str] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserWithPassword(UserRead):
    """Read shape for login flows that explicitly asked for the stored hash"""

    password: str
