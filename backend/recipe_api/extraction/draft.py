"""
Recipe draft: the in-progress, not yet persisted add-recipe form.

A draft is immutable. Every user action and every extraction result goes
through one of the functions below and produces a new draft value.
Ingredient and step sequences always keep at least one row (possibly blank)
so the form always renders an input; only non-blank rows count on submit.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .parser import ParsedRecipe


CATEGORIES = ('simple', 'baking', 'traditional', 'dessert', 'appetizer', 'main course')
COUNTRIES = (
    'Korean', 'Thai', 'Malaysian', 'Italian', 'Chinese',
    'Indian', 'Mexican', 'Japanese', 'American', 'French',
)

MISSING_INFORMATION = "Missing Information"


class DraftValidationError(ValueError):
    """Raised when a draft cannot be submitted."""

    def __init__(self, description: str, title: str = MISSING_INFORMATION):
        super().__init__(description)
        self.title = title
        self.description = description


@dataclass(frozen=True)
class RecipeDraft:
    title: str = ''
    category: str = ''
    country: str = ''
    ingredients: Tuple[str, ...] = ('',)
    steps: Tuple[str, ...] = ('',)
    video_url: str = ''
    auto_filled: bool = False

    @property
    def valid_ingredients(self) -> Tuple[str, ...]:
        return tuple(ing for ing in self.ingredients if ing.strip())

    @property
    def valid_steps(self) -> Tuple[str, ...]:
        return tuple(step for step in self.steps if step.strip())


def _rows(values) -> Tuple[str, ...]:
    rows = tuple(values)
    return rows or ('',)


# =============================================================================
# Scalar fields
# =============================================================================

def set_title(draft: RecipeDraft, value: str) -> RecipeDraft:
    return replace(draft, title=value)


def set_category(draft: RecipeDraft, value: str) -> RecipeDraft:
    return replace(draft, category=value)


def set_country(draft: RecipeDraft, value: str) -> RecipeDraft:
    return replace(draft, country=value)


def set_video_url(draft: RecipeDraft, value: str) -> RecipeDraft:
    return replace(draft, video_url=value)


def clear_video_url(draft: RecipeDraft) -> RecipeDraft:
    """Hard reset: drop the URL and everything extraction may have filled in."""
    return replace(
        draft,
        video_url='',
        title='',
        ingredients=('',),
        steps=('',),
        auto_filled=False,
    )


# =============================================================================
# Row editing
# =============================================================================

def add_ingredient(draft: RecipeDraft) -> RecipeDraft:
    return replace(draft, ingredients=draft.ingredients + ('',))


def update_ingredient(draft: RecipeDraft, index: int, value: str) -> RecipeDraft:
    rows = list(draft.ingredients)
    rows[index] = value
    return replace(draft, ingredients=tuple(rows))


def remove_ingredient(draft: RecipeDraft, index: int) -> RecipeDraft:
    rows = [ing for i, ing in enumerate(draft.ingredients) if i != index]
    return replace(draft, ingredients=_rows(rows))


def add_step(draft: RecipeDraft) -> RecipeDraft:
    return replace(draft, steps=draft.steps + ('',))


def update_step(draft: RecipeDraft, index: int, value: str) -> RecipeDraft:
    rows = list(draft.steps)
    rows[index] = value
    return replace(draft, steps=tuple(rows))


def remove_step(draft: RecipeDraft, index: int) -> RecipeDraft:
    rows = [step for i, step in enumerate(draft.steps) if i != index]
    return replace(draft, steps=_rows(rows))


# =============================================================================
# Extraction merge
# =============================================================================

def apply_parsed(draft: RecipeDraft, parsed: ParsedRecipe) -> RecipeDraft:
    """
    Merge extracted fields into the draft.

    Title, category and country are replaced whenever the extraction
    provides them. Ingredient and step lists are replaced wholesale only when
    the extracted list is non-empty; otherwise the current rows stay.
    """
    changes: Dict[str, Any] = {'auto_filled': True}
    if parsed.title:
        changes['title'] = parsed.title
    if parsed.category:
        changes['category'] = parsed.category
    if parsed.country:
        changes['country'] = parsed.country
    if parsed.ingredients:
        changes['ingredients'] = tuple(parsed.ingredients)
    if parsed.steps:
        changes['steps'] = tuple(parsed.steps)
    return replace(draft, **changes)


# =============================================================================
# Submission
# =============================================================================

def validate_fields(title: str, category: str, country: str, ingredients, steps) -> None:
    """
    Check the fields a recipe needs before it may be stored.

    Raises:
        DraftValidationError: With the user-facing description
    """
    if not (title or '').strip() or not (category or '').strip() or not (country or '').strip():
        raise DraftValidationError("Please fill in all required fields")

    valid_ingredients = [ing for ing in ingredients if ing and ing.strip()]
    valid_steps = [step for step in steps if step and step.strip()]
    if not valid_ingredients or not valid_steps:
        raise DraftValidationError("Please add at least one ingredient and one step")

    if category not in CATEGORIES:
        raise DraftValidationError("Please choose a category from the list", title="Invalid Selection")
    if country not in COUNTRIES:
        raise DraftValidationError("Please choose a country from the list", title="Invalid Selection")


def validate_submission(draft: RecipeDraft) -> None:
    validate_fields(draft.title, draft.category, draft.country, draft.ingredients, draft.steps)


def to_record(draft: RecipeDraft, user_id: Optional[str]) -> Dict[str, Any]:
    """Build the row stored for a submitted draft, blank rows removed."""
    return {
        'title': draft.title.strip(),
        'ingredients': list(draft.valid_ingredients),
        'steps': list(draft.valid_steps),
        'category': draft.category,
        'country': draft.country,
        'video_url': draft.video_url.strip() or None,
        'created_by': user_id,
    }
