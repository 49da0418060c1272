"""
Favorite recipe routes.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..services.recipe_store import RecipeStore
from .recipes import Recipe, get_store


router = APIRouter(prefix="/api", tags=["favorites"])


class ToggleFavoriteRequest(BaseModel):
    """Request body for toggling a favorite."""
    user_id: str
    recipe_id: str


class ToggleFavoriteResponse(BaseModel):
    recipe_id: str
    is_favorited: bool
    message: str


@router.post("/favorites/toggle", response_model=ToggleFavoriteResponse)
def toggle_favorite(request: ToggleFavoriteRequest, store: RecipeStore = Depends(get_store)):
    """
    Add the recipe to the user's favorites, or remove it if already there.

    Raises:
        HTTPException: 404 if the recipe does not exist
    """
    try:
        recipe = store.get_recipe(request.recipe_id)
        if not recipe:
            raise HTTPException(status_code=404, detail=f"Recipe not found: {request.recipe_id}")
        is_favorited = store.toggle_favorite(request.user_id, request.recipe_id)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update favorites: {str(e)}")

    if is_favorited:
        message = f"{recipe['title']} added to your favorites"
    else:
        message = f"{recipe['title']} removed from your favorites"

    return ToggleFavoriteResponse(
        recipe_id=request.recipe_id,
        is_favorited=is_favorited,
        message=message,
    )


@router.delete("/favorites/{recipe_id}")
def remove_favorite(
    recipe_id: str,
    user_id: str = Query(..., description="User whose favorite to remove"),
    store: RecipeStore = Depends(get_store),
):
    """Remove a recipe from the user's favorites."""
    try:
        removed = store.remove_favorite(user_id, recipe_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to remove from favorites: {str(e)}")

    if not removed:
        raise HTTPException(status_code=404, detail=f"Favorite not found: {recipe_id}")
    return {"removed": True, "recipe_id": recipe_id, "message": "Recipe removed from your favorites"}


@router.get("/users/{user_id}/favorites", response_model=List[Recipe])
def list_favorites(user_id: str, store: RecipeStore = Depends(get_store)):
    """List the user's favorite recipes, most recently favorited first."""
    try:
        rows = store.list_favorites(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load favorites: {str(e)}")
    return [Recipe(**row) for row in rows]
