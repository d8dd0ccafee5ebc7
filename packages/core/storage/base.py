from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from packages.core.schedule.models import BaseItem, ExternalTask


@runtime_checkable
class BaseItemStore(Protocol):
    def list_by_owner(self, owner_id: str) -> List[BaseItem]:
        """Return the owner's base items ordered by start ascending."""

    def get(self, owner_id: str, item_id: str) -> Optional[BaseItem]:
        """Return a base item or None if missing."""

    def insert(self, owner_id: str, payload: Dict[str, Any]) -> str:
        """Persist a new base item and return its store-assigned id."""

    def patch(self, owner_id: str, item_id: str, fields: Dict[str, Any]) -> None:
        """Write only the given fields. Raises EventNotFoundError if missing."""

    def delete_by_id(self, owner_id: str, item_id: str) -> None:
        """Delete a base item. Raises EventNotFoundError if missing."""


@runtime_checkable
class TaskStore(Protocol):
    def list_by_assignee(self, owner_id: str) -> List[ExternalTask]:
        """Return tasks whose assignees include the owner."""
