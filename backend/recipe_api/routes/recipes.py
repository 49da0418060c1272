"""
Recipe library routes.

Endpoints for browsing, searching, creating and deleting recipes, plus
pantry-based suggestions.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ..extraction.draft import (
    CATEGORIES,
    COUNTRIES,
    DraftValidationError,
    RecipeDraft,
    to_record,
    validate_submission,
)
from ..services.database import get_db
from ..services.recipe_store import RecipeStore
from ..services.suggestions import normalize_pantry, suggest_recipes


router = APIRouter(prefix="/api/recipes", tags=["recipes"])

ALL = "all"


def get_store(db=Depends(get_db)) -> RecipeStore:
    """Dependency returning a store bound to the shared database pool."""
    return RecipeStore(db)


class Recipe(BaseModel):
    """Stored recipe."""
    id: str
    title: str
    ingredients: List[str] = []
    steps: List[str] = []
    category: Optional[str] = None
    country: Optional[str] = None
    video_url: Optional[str] = None
    image_url: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    is_favorited: Optional[bool] = None


class RecipeListResponse(BaseModel):
    """Response for list of recipes."""
    recipes: List[Recipe]
    total: int
    limit: int
    offset: int


class RecipeCreate(BaseModel):
    """Request body for adding a recipe."""
    title: str = ""
    category: str = ""
    country: str = ""
    ingredients: List[str] = []
    steps: List[str] = []
    video_url: Optional[str] = None
    user_id: str


class RecipeOptions(BaseModel):
    categories: List[str]
    countries: List[str]


class RecipeSuggestion(Recipe):
    matched_ingredients: List[str] = []
    missing_count: int = 0


class SuggestionResponse(BaseModel):
    pantry: List[str]
    suggestions: List[RecipeSuggestion]
    message: str


def _filter_value(value: Optional[str]) -> Optional[str]:
    if not value or value == ALL:
        return None
    return value


@router.get("/", response_model=RecipeListResponse)
def list_recipes(
    search: Optional[str] = Query(None, description="Match on title or any ingredient"),
    category: Optional[str] = Query(None, description="Category filter ('all' for none)"),
    country: Optional[str] = Query(None, description="Country filter ('all' for none)"),
    user_id: Optional[str] = Query(None, description="Mark favorites for this user"),
    limit: int = Query(50, ge=1, le=200, description="Number of results to return"),
    offset: int = Query(0, ge=0, description="Number of results to skip"),
    store: RecipeStore = Depends(get_store),
):
    """
    List recipes newest first with search and filters.

    Returns:
        Recipes with pagination info; ``is_favorited`` is set when user_id is given
    """
    try:
        rows, total = store.list_recipes(
            search=search.strip() if search else None,
            category=_filter_value(category),
            country=_filter_value(country),
            user_id=user_id,
            limit=limit,
            offset=offset,
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load recipes: {str(e)}")

    return RecipeListResponse(
        recipes=[Recipe(**row) for row in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/options", response_model=RecipeOptions)
def get_recipe_options():
    """Fixed category and country choices for the recipe form and filters."""
    return RecipeOptions(categories=list(CATEGORIES), countries=list(COUNTRIES))


@router.get("/suggestions", response_model=SuggestionResponse)
def get_suggestions(
    ingredients: List[str] = Query([], description="Pantry items you have"),
    limit: int = Query(10, ge=1, le=50),
    store: RecipeStore = Depends(get_store),
):
    """
    Suggest library recipes that use the given pantry items.

    Raises:
        HTTPException: 400 if no pantry items were given
    """
    pantry = normalize_pantry(ingredients)
    if not pantry:
        raise HTTPException(status_code=400, detail="Please add some ingredients first")

    try:
        rows, _ = store.list_recipes()
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load recipes: {str(e)}")

    suggestions = suggest_recipes(rows, pantry, limit=limit)
    if suggestions:
        plural = "s" if len(suggestions) > 1 else ""
        message = f"Found {len(suggestions)} recipe{plural} you can make"
    else:
        message = "No recipes found. Try adding more common ingredients."

    return SuggestionResponse(
        pantry=pantry,
        suggestions=[RecipeSuggestion(**row) for row in suggestions],
        message=message,
    )


@router.get("/{recipe_id}", response_model=Recipe)
def get_recipe(
    recipe_id: str,
    user_id: Optional[str] = Query(None, description="Mark favorite state for this user"),
    store: RecipeStore = Depends(get_store),
):
    """
    Get a single recipe.

    Raises:
        HTTPException: 404 if the recipe does not exist
    """
    try:
        row = store.get_recipe(recipe_id, user_id=user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load recipe: {str(e)}")

    if not row:
        raise HTTPException(status_code=404, detail=f"Recipe not found: {recipe_id}")
    return Recipe(**row)


@router.post("/", response_model=Recipe, status_code=201)
def create_recipe(request: RecipeCreate, store: RecipeStore = Depends(get_store)):
    """
    Add a recipe to the library.

    Blank ingredient and step rows are dropped before storing.

    Raises:
        HTTPException: 400 with the validation message if fields are missing
    """
    draft = RecipeDraft(
        title=request.title,
        category=request.category,
        country=request.country,
        ingredients=tuple(request.ingredients) or ('',),
        steps=tuple(request.steps) or ('',),
        video_url=request.video_url or '',
    )
    try:
        validate_submission(draft)
    except DraftValidationError as e:
        raise HTTPException(status_code=400, detail=f"{e.title}: {e.description}")

    record = to_record(draft, request.user_id)
    try:
        row = store.insert_recipe(record)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to add recipe: {str(e)}")
    return Recipe(**row)


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: str,
    user_id: str = Query(..., description="Owner of the recipe"),
    store: RecipeStore = Depends(get_store),
):
    """
    Delete a recipe created by the user.

    Raises:
        HTTPException: 404 if no recipe with that id belongs to the user
    """
    try:
        deleted = store.delete_recipe(recipe_id, user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete recipe: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Recipe not found: {recipe_id}")
    return {"deleted": True, "recipe_id": recipe_id}
