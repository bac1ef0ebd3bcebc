"""Plan execution shared by every resource driver.

A driver fetches one resource kind, asks the reconciler for a
``SyncPlan`` and hands it to ``apply_pull`` or ``apply_push`` here.

Execution order:

- **Pull** -- every create/update is materialized concurrently, then
  local-only files are deleted one by one.
- **Push** -- creates, then updates, then deletes, each as one concurrent
  batch of remote calls.

Every action is logged as a single line before it runs.  In dry-run mode
the line is logged and a result recorded, but nothing is executed.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..core.async_utils import gather_limited, run_sync, run_sync_limited
from ..core.client import ShopifyClient
from ..file_handler import remove_file, resolve_within, write_if_changed
from .fingerprint import DEFAULT_CLOCK_SKEW_SECONDS
from .ignore import IgnoreCache
from .models import SyncAction, SyncPlan, SyncResult
from .resources import ResourceKind

logger = logging.getLogger(__name__)

Operation = Callable[[str, dict[str, Any]], Awaitable[None]]

_VERBS = {
    SyncAction.CREATE_LOCAL: "SAVING",
    SyncAction.UPDATE_LOCAL: "SAVING",
    SyncAction.DELETE_LOCAL: "DELETE",
    SyncAction.CREATE_REMOTE: "CREATE",
    SyncAction.UPDATE_REMOTE: "UPDATE",
    SyncAction.DELETE_REMOTE: "DELETE",
}


@dataclass
class SyncContext:
    """Everything one sync invocation shares across drivers.

    Attributes:
        client: Shopify transport.
        output_dir: Root of the local tree.
        dry_run: Log and report actions without executing them.
        force: Materialize/upload even when the cheap check says same.
        clock_skew_seconds: Tolerance for asset mtime comparison.
        page_size: Page size for paged listings.
        ignore: Ignore rules, memoized for this invocation only.
    """

    client: ShopifyClient
    output_dir: Path
    dry_run: bool = False
    force: bool = False
    clock_skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS
    page_size: int = 250
    ignore: IgnoreCache = field(default_factory=IgnoreCache)


class ResourceDriver:
    """Base class for per-kind drivers."""

    kind: ResourceKind

    def __init__(self, context: SyncContext) -> None:
        self.context = context
        self.client = context.client
        self.output_dir = Path(context.output_dir)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking client call under the request semaphore."""
        return await run_sync_limited(func, *args, **kwargs)

    def local_path(self, relative_path: str) -> Path:
        return resolve_within(self.output_dir, relative_path)

    async def save(self, relative_path: str, content: str | bytes) -> bool:
        """Write a local file unless it already holds *content*."""
        written = await run_sync(
            write_if_changed, self.local_path(relative_path), content
        )
        if not written:
            logger.debug("Unchanged: %s", relative_path)
        return written

    def describe(self, action: SyncAction, key: str, payload: dict[str, Any]) -> str:
        """One log line for an action; drivers override for richer text."""
        return f"{_VERBS[action]}: {key}"

    def _result(
        self,
        key: str,
        action: SyncAction,
        error: str | None = None,
    ) -> SyncResult:
        return SyncResult(
            kind=self.kind,
            key=key,
            action=action,
            success=error is None,
            error=error,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _run(
        self,
        action: SyncAction,
        key: str,
        payload: dict[str, Any],
        operation: Operation,
    ) -> SyncResult:
        logger.info(self.describe(action, key, payload))
        if not self.context.dry_run:
            await operation(key, payload)
        return self._result(key, action)

    def _planned(self, plan: SyncPlan) -> list[SyncResult]:
        results = []
        for key in plan.skip:
            logger.debug("SKIP: %s", key)
            results.append(self._result(key, SyncAction.SKIP))
        for key, message in plan.errors.items():
            logger.error("ERROR: %s: %s", key, message)
            results.append(
                self._result(key, SyncAction.SKIP, error=message)
            )
        return results

    async def apply_pull(
        self, plan: SyncPlan, materialize: Operation
    ) -> list[SyncResult]:
        """Execute a pull plan against the local tree.

        Args:
            plan: Plan from ``plan_pull``; ``delete`` keys are relative paths.
            materialize: Writes one remote item locally.

        Returns:
            Results for skipped, materialized and deleted items.
        """
        results = self._planned(plan)
        results.extend(
            await gather_limited(
                [
                    self._run(SyncAction.CREATE_LOCAL, key, payload, materialize)
                    for key, payload in plan.create.items()
                ]
                + [
                    self._run(SyncAction.UPDATE_LOCAL, key, payload, materialize)
                    for key, payload in plan.update.items()
                ]
            )
        )
        for key, payload in plan.delete.items():
            results.append(
                await self._run(
                    SyncAction.DELETE_LOCAL, key, payload, self._delete_local
                )
            )
        return results

    async def _delete_local(self, key: str, payload: dict[str, Any]) -> None:
        await run_sync(remove_file, self.local_path(key))

    async def apply_push(
        self,
        plan: SyncPlan,
        create: Operation,
        update: Operation,
        delete: Operation,
    ) -> list[SyncResult]:
        """Execute a push plan against the remote.

        Batches run in order (creates, updates, deletes); calls within a
        batch run concurrently.  A transport error aborts the remaining
        batches and propagates.
        """
        results = self._planned(plan)
        for action, batch, operation in (
            (SyncAction.CREATE_REMOTE, plan.create, create),
            (SyncAction.UPDATE_REMOTE, plan.update, update),
            (SyncAction.DELETE_REMOTE, plan.delete, delete),
        ):
            results.extend(
                await gather_limited(
                    [
                        self._run(action, key, payload, operation)
                        for key, payload in batch.items()
                    ]
                )
            )
        return results
