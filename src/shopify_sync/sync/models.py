"""Pydantic models for sync planning and reporting.

- ``SyncAction``: What happened (or would happen) to one item.
- ``SyncPlan``: Create/update/delete sets produced by the reconciler.
- ``SyncResult``: Outcome for one item.
- ``SyncReport``: Aggregate results for one pull or push.

All models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from .resources import ResourceKind


class SyncAction(str, Enum):
    """Possible outcomes for one item."""

    SKIP = "skip"
    CREATE_LOCAL = "create_local"
    UPDATE_LOCAL = "update_local"
    DELETE_LOCAL = "delete_local"
    CREATE_REMOTE = "create_remote"
    UPDATE_REMOTE = "update_remote"
    DELETE_REMOTE = "delete_remote"


class SyncPlan(BaseModel):
    """Actions decided for one resource kind in one pass.

    A key appears in at most one of ``create``, ``update``, ``delete``,
    ``skip`` and ``errors``.

    Attributes:
        create: Key -> payload for items missing on the target side.
        update: Key -> payload for items that differ.
        delete: Key -> payload for items only on the target side.
        skip: Keys already in sync.
        errors: Key -> message for items that could not be planned.
    """

    create: dict[str, dict[str, Any]] = {}
    update: dict[str, dict[str, Any]] = {}
    delete: dict[str, dict[str, Any]] = {}
    skip: list[str] = []
    errors: dict[str, str] = {}

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not (self.create or self.update or self.delete or self.errors)


class SyncResult(BaseModel):
    """Result of one planned action.

    Attributes:
        kind: Resource kind of the item.
        key: Identity key (or local relative path).
        action: Action that was performed or previewed.
        success: Whether the action succeeded.
        error: Error message if it failed.
    """

    kind: ResourceKind
    key: str
    action: SyncAction
    success: bool = True
    error: str | None = None

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for one pull or push.

    Attributes:
        operation: ``"pull"`` or ``"push"``.
        theme: Name of the theme the pass ran against, if any.
        dry_run: Whether changes were only previewed.
        results: Individual results, in execution order.
        started_at: ISO 8601 start timestamp.
        completed_at: ISO 8601 completion timestamp.
    """

    operation: str
    theme: str | None = None
    dry_run: bool = False
    results: list[SyncResult] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    def _with_action(self, action: SyncAction) -> list[SyncResult]:
        return [r for r in self.results if r.action == action]

    @property
    def created_local(self) -> list[SyncResult]:
        return self._with_action(SyncAction.CREATE_LOCAL)

    @property
    def updated_local(self) -> list[SyncResult]:
        return self._with_action(SyncAction.UPDATE_LOCAL)

    @property
    def deleted_local(self) -> list[SyncResult]:
        return self._with_action(SyncAction.DELETE_LOCAL)

    @property
    def created_remote(self) -> list[SyncResult]:
        return self._with_action(SyncAction.CREATE_REMOTE)

    @property
    def updated_remote(self) -> list[SyncResult]:
        return self._with_action(SyncAction.UPDATE_REMOTE)

    @property
    def deleted_remote(self) -> list[SyncResult]:
        return self._with_action(SyncAction.DELETE_REMOTE)

    @property
    def skipped(self) -> list[SyncResult]:
        return self._with_action(SyncAction.SKIP)

    @property
    def errors(self) -> list[SyncResult]:
        """Results where success is False."""
        return [r for r in self.results if not r.success]

    @property
    def changes(self) -> list[SyncResult]:
        """Results other than SKIP."""
        return [r for r in self.results if r.action != SyncAction.SKIP]

    def summary(self) -> str:
        """Format a short multi-line summary with counts by action."""
        title = f"{self.operation.capitalize()} report"
        if self.theme:
            title += f" for theme '{self.theme}'"
        if self.dry_run:
            title += " (dry run)"
        lines = [
            title,
            f"  Created local:  {len(self.created_local)}",
            f"  Updated local:  {len(self.updated_local)}",
            f"  Deleted local:  {len(self.deleted_local)}",
            f"  Created remote: {len(self.created_remote)}",
            f"  Updated remote: {len(self.updated_remote)}",
            f"  Deleted remote: {len(self.deleted_remote)}",
            f"  Skipped:        {len(self.skipped)}",
            f"  Errors:         {len(self.errors)}",
            f"  Total:          {len(self.results)}",
        ]
        return "\n".join(lines)
