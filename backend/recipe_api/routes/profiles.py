"""
User profile routes.

Identity itself is handled by the hosted backend; these endpoints only read
and update the profile row and list the user's own recipes.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..services.recipe_store import RecipeStore
from .recipes import Recipe, get_store


router = APIRouter(prefix="/api/profiles", tags=["profiles"])


class Profile(BaseModel):
    user_id: str
    username: str
    email: str


class ProfileUpdate(BaseModel):
    """Request body for editing a profile."""
    username: str
    email: str


def display_username(username: Optional[str], email: Optional[str]) -> str:
    """Profile username, or the local part of the email when none is set."""
    if username:
        return username
    if email:
        return email.split('@')[0]
    return ''


def _to_profile(row) -> Profile:
    return Profile(
        user_id=row['user_id'],
        username=display_username(row.get('username'), row.get('email')),
        email=row.get('email') or '',
    )


@router.get("/{user_id}", response_model=Profile)
def get_profile(user_id: str, store: RecipeStore = Depends(get_store)):
    """
    Get a user's profile.

    Raises:
        HTTPException: 404 if the profile does not exist
    """
    try:
        row = store.get_profile(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load profile: {str(e)}")

    if not row:
        raise HTTPException(status_code=404, detail=f"Profile not found: {user_id}")
    return _to_profile(row)


@router.put("/{user_id}", response_model=Profile)
def update_profile(user_id: str, request: ProfileUpdate, store: RecipeStore = Depends(get_store)):
    """Update username and email."""
    try:
        row = store.update_profile(user_id, request.username.strip(), request.email.strip())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update profile: {str(e)}")

    if not row:
        raise HTTPException(status_code=404, detail=f"Profile not found: {user_id}")
    return _to_profile(row)


@router.get("/{user_id}/recipes", response_model=List[Recipe])
def list_my_recipes(user_id: str, store: RecipeStore = Depends(get_store)):
    """Recipes the user created, newest first."""
    try:
        rows = store.list_user_recipes(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load recipes: {str(e)}")
    return [Recipe(**row) for row in rows]
