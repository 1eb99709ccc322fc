"""
User Record Store.

Validates and persists User records. Every create and update awaits
``hash_password_before_save`` before anything is written, so the
password column only ever receives bcrypt hashes.
"""

import logging
from typing import Any, Mapping, Optional, Type, TypeVar, Union
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, undefer
from cardvault.core.errors import (
    DuplicateEmailError,
    PasswordHashingError,
    UserNotFoundError,
    UserValidationError,
)
from cardvault.core.security import get_password_hash_async
from cardvault.models.user import User
from cardvault.schemas.user import UserCreate, UserRead, UserUpdate, UserWithPassword

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Fields copied from the validated payload onto the ORM entity
USER_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "password",
    "characters",
    "owned_cards",
    "decks",
    "stats",
    "achievements",
    "settings",
)


async def hash_password_before_save(user: User, stored_password: Optional[str]) -> bool:
    """
    Replace a changed plaintext password on ``user`` with its bcrypt hash.

    ``stored_password`` is the value currently persisted for this record
    (None for a record that has never been written). When the in-memory
    value still equals it, nothing happens: the stored value is already a
    hash and hashing it again would lock the user out.

    Returns True when the password was hashed. Raises PasswordHashingError
    if salt generation or hashing fails; ``user.password`` is left as it
    was and the caller must not write the record.
    """
    if user.password == stored_password:
        logger.debug(f"Password unchanged for user {user.id}, skipping hash")
        return False

    try:
        hashed = await get_password_hash_async(user.password)
    except Exception as e:
        logger.error(f"Password hashing failed for user {user.id}: {type(e).__name__}")
        raise PasswordHashingError("Password hashing failed") from e

    user.password = hashed
    return True


def _validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


def _validate(schema: Type[SchemaT], data: Union[SchemaT, Mapping[str, Any]]) -> SchemaT:
    """Coerce a payload into ``schema``, raising UserValidationError on failure"""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise UserValidationError(_validation_errors(e)) from e


def _to_document(value: Any) -> Any:
    """Convert nested pydantic models into the camelCase dicts stored in JSON columns"""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, list):
        return [_to_document(item) for item in value]
    return value


class UserStore:
    """Create, read and update User records"""

    @staticmethod
    async def create_user(
        db: Session,
        data: Union[UserCreate, Mapping[str, Any]],
    ) -> UserRead:
        """Register a new user. The plaintext password is hashed before the insert."""
        user_in = _validate(UserCreate, data)

        # Explicit check gives a clear error; the unique index still guards the race
        if db.query(User.id).filter(User.email == user_in.email).first():
            raise DuplicateEmailError(user_in.email)

        db_user = User(**{name: _to_document(getattr(user_in, name)) for name in USER_FIELDS})

        # Nothing has been added to the session yet, so a failure here leaves no trace
        await hash_password_before_save(db_user, stored_password=None)

        db.add(db_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Duplicate email rejected by unique index")
            raise DuplicateEmailError(user_in.email)
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(db_user)
        logger.info(f"Created user {db_user.id}")
        return UserRead.model_validate(db_user)

    @staticmethod
    def get_user(
        db: Session,
        user_id: int,
        include_password: bool = False,
    ) -> Union[UserRead, UserWithPassword]:
        """
        Load a user by id.

        The password hash is left out unless ``include_password`` is set;
        login flows set it to compare the submitted password.
        """
        query = db.query(User)
        if include_password:
            query = query.options(undefer(User.password))
        db_user = query.filter(User.id == user_id).first()
        if db_user is None:
            raise UserNotFoundError(user_id=user_id)
        return _read(db_user, include_password)

    @staticmethod
    def get_user_by_email(
        db: Session,
        email: str,
        include_password: bool = False,
    ) -> Union[UserRead, UserWithPassword]:
        """Load a user by exact (case-sensitive) email"""
        query = db.query(User)
        if include_password:
            query = query.options(undefer(User.password))
        db_user = query.filter(User.email == email).first()
        if db_user is None:
            raise UserNotFoundError(email=email)
        return _read(db_user, include_password)

    @staticmethod
    async def update_user(
        db: Session,
        user_id: int,
        changes: Union[UserUpdate, Mapping[str, Any]],
    ) -> UserRead:
        """
        Apply a partial update.

        Only fields present in ``changes`` are written. The password is
        re-hashed only when the submitted value differs from the stored hash.
        Concurrent updates to the same user are last-write-wins.
        """
        user_in = _validate(UserUpdate, changes)
        updates = user_in.model_fields_set

        db_user = (
            db.query(User)
            .options(undefer(User.password))
            .filter(User.id == user_id)
            .first()
        )
        if db_user is None:
            raise UserNotFoundError(user_id=user_id)

        # Snapshot taken at load time; compared against after the changes are applied
        stored_password = db_user.password

        if "email" in updates and user_in.email != db_user.email:
            clash = (
                db.query(User.id)
                .filter(User.email == user_in.email, User.id != user_id)
                .first()
            )
            if clash:
                raise DuplicateEmailError(user_in.email)

        for name in updates:
            setattr(db_user, name, _to_document(getattr(user_in, name)))

        try:
            await hash_password_before_save(db_user, stored_password)
            db.commit()
        except PasswordHashingError:
            # Discard the in-memory changes so the session matches stored state
            db.rollback()
            raise
        except IntegrityError:
            db.rollback()
            if "email" not in updates:
                raise
            logger.warning(f"Duplicate email rejected by unique index for user {user_id}")
            raise DuplicateEmailError(user_in.email)
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(db_user)
        logger.info(f"Updated user {user_id}: {', '.join(sorted(updates)) or 'no fields'}")
        return UserRead.model_validate(db_user)


def _read(db_user: User, include_password: bool) -> Union[UserRead, UserWithPassword]:
    if include_password:
        return UserWithPassword.model_validate(db_user)
    return UserRead.model_validate(db_user)


user_store = UserStore()
