from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from cardvault.core.database import get_db
from cardvault.core.errors import (
    DuplicateEmailError,
    PasswordHashingError,
    UserNotFoundError,
)
from cardvault.schemas.user import UserCreate, UserRead, UserUpdate
from cardvault.services.user_store import user_store

router = APIRouter(prefix="/users", tags=["users"])

USER_NOT_FOUND_MESSAGE = "User not found"


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    try:
        return await user_store.create_user(db, user_data)
    except DuplicateEmailError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )
    except PasswordHashingError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not secure password"
        )
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred"
        )


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    """Get a user (password is never included)"""
    try:
        return user_store.get_user(db, user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND_MESSAGE)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(user_id: int, changes: UserUpdate, db: Session = Depends(get_db)):
    """Update some fields of a user"""
    try:
        return await user_store.update_user(db, user_id, changes)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND_MESSAGE)
    except DuplicateEmailError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )
    except PasswordHashingError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not secure password"
        )
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred"
        )
