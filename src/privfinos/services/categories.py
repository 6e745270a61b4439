"""
Categories Service

Business rules for income/expense categories:
- A category's parent must exist
- A category cannot be its own parent (only the direct self-reference is
  rejected; longer loops such as A -> B -> A are not checked)
- delete() is a soft delete (is_active = False); hard_delete() removes the row
  and the schema clears parent_id on its children
"""

from privfinos.errors import InvalidParentError
from privfinos.schemas import Category, DeleteResult
from privfinos.services.base import BaseService


class CategoriesService(BaseService):
    table = "categories"
    model = Category
    not_found_message = "Category not found"
    not_found_code = "CATEGORY_NOT_FOUND"

    def get_all(self, filters=None):
        """
        List categories ordered by sort_order, newest first within a sort_order.

        Args:
            filters (CategoryQuery): Optional type / is_active / parent_id
                filters. An explicit parent_id of None selects root categories.
        """
        conditions, params = [], []
        if filters is not None:
            if filters.type is not None:
                conditions.append("type = ?")
                params.append(filters.type)
            if filters.is_active is not None:
                conditions.append("is_active = ?")
                params.append(int(filters.is_active))
            if filters.filters_parent:
                if filters.parent_id is None:
                    conditions.append("parent_id IS NULL")
                else:
                    conditions.append("parent_id = ?")
                    params.append(filters.parent_id)

        return self._select(conditions, params)

    def create(self, data):
        """Create a category from a validated CategoryCreate."""
        values = data.model_dump()
        with self.db.transaction() as cursor:
            if values["parent_id"]:
                self._get(cursor, values["parent_id"])
            category_id = self._insert(cursor, values)
            return self._get(cursor, category_id)

    def update(self, category_id, data):
        """
        Apply a validated CategoryUpdate. Only fields present in the request
        are changed; an explicit null clears a nullable field.
        """
        changes = data.model_dump(exclude_unset=True)
        with self.db.transaction() as cursor:
            self._get(cursor, category_id)

            parent_id = changes.get("parent_id")
            if parent_id:
                if parent_id == category_id:
                    raise InvalidParentError()
                self._get(cursor, parent_id)

            self._update(cursor, category_id, changes)
            return self._get(cursor, category_id)

    def delete(self, category_id):
        """Soft delete: the row stays retrievable with is_active = False."""
        return self._soft_delete(category_id)

    def hard_delete(self, category_id):
        self._hard_delete(category_id)
        return DeleteResult(message="Category permanently deleted")
