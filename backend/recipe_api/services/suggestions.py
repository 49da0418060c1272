"""
Pantry-based recipe suggestions.

Ranks library recipes by how many of the user's pantry items show up in
their ingredient lines.
"""

from typing import Any, Dict, Iterable, List


def normalize_pantry(items: Iterable[str]) -> List[str]:
    """Trim, lower-case and de-duplicate pantry items, keeping first-seen order."""
    pantry: List[str] = []
    for item in items:
        cleaned = (item or '').strip().lower()
        if cleaned and cleaned not in pantry:
            pantry.append(cleaned)
    return pantry


def matched_pantry_items(recipe: Dict[str, Any], pantry: List[str]) -> List[str]:
    lines = [ing.lower() for ing in recipe.get('ingredients') or []]
    return [item for item in pantry if any(item in line for line in lines)]


def suggest_recipes(
    recipes: Iterable[Dict[str, Any]],
    pantry: List[str],
    limit: int = 10,
) -> List[Dict[str, Any]]:
    """
    Return recipes using at least one pantry item, best match first.

    Ties keep the incoming order (newest first from the store). Each
    suggestion carries ``matched_ingredients`` and ``missing_count``.
    """
    scored = []
    for position, recipe in enumerate(recipes):
        matched = matched_pantry_items(recipe, pantry)
        if not matched:
            continue
        total = len(recipe.get('ingredients') or [])
        suggestion = dict(recipe)
        suggestion['matched_ingredients'] = matched
        suggestion['missing_count'] = max(total - len(matched), 0)
        scored.append((-len(matched), suggestion['missing_count'], position, suggestion))

    scored.sort(key=lambda entry: entry[:3])
    return [entry[3] for entry in scored[:limit]]
