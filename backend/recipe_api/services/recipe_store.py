"""
Recipe, favorite and profile persistence on the hosted Postgres database.

All queries go through a cursor context manager (``db_pool.get_cursor`` by
default), so each public method runs in its own committed transaction.
"""

from typing import Any, Dict, List, Optional, Tuple

from .database import db_pool


RECIPE_COLUMNS = """
    r.id::text AS id,
    r.title,
    r.ingredients,
    r.steps,
    r.category,
    r.country,
    r.video_url,
    r.image_url,
    r.created_by::text AS created_by,
    r.created_at
"""

FAVORITED_COLUMN = """
    EXISTS (
        SELECT 1 FROM favorites f
        WHERE f.recipe_id = r.id AND f.user_id = %s
    ) AS is_favorited
"""


def row_to_dict(row: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a database row to a dictionary, normalizing array columns."""
    result = dict(row)
    for key in ('ingredients', 'steps'):
        if key in result and result[key] is None:
            result[key] = []
    return result


class RecipeStore:
    """
    Data access for the recipe library.

    Args:
        cursor: Callable returning a cursor context manager yielding dict rows
    """

    def __init__(self, cursor=None):
        self._cursor = cursor or db_pool.get_cursor

    # =========================================================================
    # Recipes
    # =========================================================================

    def list_recipes(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        country: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        List recipes newest first with optional filters.

        ``search`` matches the title or any ingredient line, case-insensitive.

        Returns:
            (rows, total matching rows)
        """
        conditions = []
        params: List[Any] = []

        if search:
            pattern = f"%{search}%"
            conditions.append(
                "(r.title ILIKE %s OR EXISTS ("
                "SELECT 1 FROM unnest(r.ingredients) AS ing WHERE ing ILIKE %s))"
            )
            params.extend([pattern, pattern])

        if category:
            conditions.append("r.category = %s")
            params.append(category)

        if country:
            conditions.append("r.country = %s")
            params.append(country)

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        with self._cursor() as cursor:
            cursor.execute(f"SELECT COUNT(*) AS total FROM recipes r {where_clause}", params)
            total = cursor.fetchone()["total"]

            select_params: List[Any] = []
            columns = RECIPE_COLUMNS
            if user_id:
                columns += "," + FAVORITED_COLUMN
                select_params.append(user_id)
            select_params.extend(params)

            query = f"""
                SELECT {columns}
                FROM recipes r
                {where_clause}
                ORDER BY r.created_at DESC
            """
            if limit is not None:
                query += " LIMIT %s OFFSET %s"
                select_params.extend([limit, offset])

            cursor.execute(query, select_params)
            rows = [row_to_dict(row) for row in cursor.fetchall()]

        return rows, total

    def get_recipe(self, recipe_id: str, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        columns = RECIPE_COLUMNS
        params: List[Any] = []
        if user_id:
            columns += "," + FAVORITED_COLUMN
            params.append(user_id)
        params.append(recipe_id)

        with self._cursor() as cursor:
            cursor.execute(f"SELECT {columns} FROM recipes r WHERE r.id = %s", params)
            row = cursor.fetchone()

        return row_to_dict(row) if row else None

    def insert_recipe(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a recipe row built by ``draft.to_record`` and return it."""
        with self._cursor() as cursor:
            cursor.execute(f"""
                INSERT INTO recipes AS r
                    (title, ingredients, steps, category, country, video_url, created_by)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING {RECIPE_COLUMNS}
            """, (
                record['title'],
                list(record['ingredients']),
                list(record['steps']),
                record['category'],
                record['country'],
                record.get('video_url'),
                record.get('created_by'),
            ))
            return row_to_dict(cursor.fetchone())

    def delete_recipe(self, recipe_id: str, user_id: str) -> bool:
        """Delete a recipe owned by ``user_id``. Returns False if nothing matched."""
        with self._cursor() as cursor:
            cursor.execute(
                "DELETE FROM recipes WHERE id = %s AND created_by = %s",
                (recipe_id, user_id),
            )
            return cursor.rowcount > 0

    def list_user_recipes(self, user_id: str) -> List[Dict[str, Any]]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {RECIPE_COLUMNS}
                FROM recipes r
                WHERE r.created_by = %s
                ORDER BY r.created_at DESC
            """, (user_id,))
            return [row_to_dict(row) for row in cursor.fetchall()]

    # =========================================================================
    # Favorites
    # =========================================================================

    def toggle_favorite(self, user_id: str, recipe_id: str) -> bool:
        """
        Flip the favorite state of a recipe for a user.

        Returns:
            True if the recipe is now a favorite, False if it was removed
        """
        with self._cursor() as cursor:
            cursor.execute(
                "DELETE FROM favorites WHERE user_id = %s AND recipe_id = %s",
                (user_id, recipe_id),
            )
            if cursor.rowcount > 0:
                return False

            cursor.execute(
                "INSERT INTO favorites (user_id, recipe_id) VALUES (%s, %s)",
                (user_id, recipe_id),
            )
            return True

    def remove_favorite(self, user_id: str, recipe_id: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute(
                "DELETE FROM favorites WHERE user_id = %s AND recipe_id = %s",
                (user_id, recipe_id),
            )
            return cursor.rowcount > 0

    def list_favorites(self, user_id: str) -> List[Dict[str, Any]]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {RECIPE_COLUMNS}, TRUE AS is_favorited
                FROM favorites f
                JOIN recipes r ON r.id = f.recipe_id
                WHERE f.user_id = %s
                ORDER BY f.created_at DESC
            """, (user_id,))
            return [row_to_dict(row) for row in cursor.fetchall()]

    # =========================================================================
    # Profiles
    # =========================================================================

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT user_id::text AS user_id, username, email FROM profiles WHERE user_id = %s",
                (user_id,),
            )
            row = cursor.fetchone()
        return dict(row) if row else None

    def update_profile(self, user_id: str, username: str, email: str) -> Optional[Dict[str, Any]]:
        with self._cursor() as cursor:
            cursor.execute("""
                UPDATE profiles SET username = %s, email = %s
                WHERE user_id = %s
                RETURNING user_id::text AS user_id, username, email
            """, (username, email, user_id))
            row = cursor.fetchone()
        return dict(row) if row else None
