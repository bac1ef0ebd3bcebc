"""Sync report formatting functions.

- ``format_sync_report`` -- post-sync summary for the terminal.
- ``format_dry_run_preview`` -- planned actions grouped by action.
- ``report_to_json`` -- structured dict for MCP tool output.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SyncReport

from .models import SyncAction

# Display order and section titles; SKIP is summarised by count only.
_SECTIONS = [
    (SyncAction.CREATE_LOCAL, "Saved (new)"),
    (SyncAction.UPDATE_LOCAL, "Saved (changed)"),
    (SyncAction.DELETE_LOCAL, "Deleted locally"),
    (SyncAction.CREATE_REMOTE, "Created remotely"),
    (SyncAction.UPDATE_REMOTE, "Updated remotely"),
    (SyncAction.DELETE_REMOTE, "Deleted remotely"),
]

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one result.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = f"{report.operation.capitalize()} report"
    if report.theme:
        header += f" for theme '{report.theme}'"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    local = (
        len(report.created_local)
        + len(report.updated_local)
        + len(report.deleted_local)
    )
    remote = (
        len(report.created_remote)
        + len(report.updated_remote)
        + len(report.deleted_remote)
    )
    lines.append(
        f"Checked {len(report.results)} items: "
        f"{local} local changes, {remote} remote changes, "
        f"{len(report.errors)} errors"
    )
    lines.append("")

    for action, title in _SECTIONS:
        matching = [r for r in report.results if r.action == action]
        if not matching:
            continue
        lines.append(f"{title}:")
        for r in matching:
            lines.append(f"  [{r.kind.value}] {r.key}")
        lines.append("")

    if report.errors:
        lines.append("Errors:")
        for r in report.errors:
            lines.append(f"  [{r.kind.value}] {r.key}: {r.error}")
        lines.append("")

    skipped = len(report.skipped) - sum(
        1 for r in report.errors if r.action == SyncAction.SKIP
    )
    if skipped > 0:
        lines.append(f"Unchanged: {skipped} items")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# Dry-run preview
# ------------------------------------------------------------------


def format_dry_run_preview(report: SyncReport) -> str:
    """Format a dry-run preview grouped by action type.

    Each proposed action is shown as ``[kind] key`` under its action.
    """
    lines: list[str] = []
    lines.append("DRY RUN -- No changes will be made")
    lines.append(f"Operation: {report.operation}")
    if report.theme:
        lines.append(f"Theme: {report.theme}")
    lines.append("")

    groups: dict[SyncAction, list[str]] = defaultdict(list)
    for r in report.results:
        if r.success:
            groups[r.action].append(f"[{r.kind.value}] {r.key}")

    for action, _title in _SECTIONS:
        if action not in groups:
            continue
        label = action.value.upper().replace("_", " ")
        lines.append(f"[{label}]")
        for entry in groups[action]:
            lines.append(f"  {entry}")
        lines.append("")

    skip_count = len(groups.get(SyncAction.SKIP, []))
    if skip_count > 0:
        lines.append(f"Skipped: {skip_count} items (unchanged)")
        lines.append("")

    if not any(a != SyncAction.SKIP for a in groups):
        lines.append("No changes needed.")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a structured dict for JSON serialisation.

    Suitable for MCP ``structuredContent`` output.
    """
    results_list = []
    for r in report.results:
        entry: dict = {
            "kind": r.kind.value,
            "key": r.key,
            "action": r.action.value,
            "success": r.success,
        }
        if r.error:
            entry["error"] = r.error
        results_list.append(entry)

    return {
        "operation": report.operation,
        "theme": report.theme,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": {
            "total": len(report.results),
            "created_local": len(report.created_local),
            "updated_local": len(report.updated_local),
            "deleted_local": len(report.deleted_local),
            "created_remote": len(report.created_remote),
            "updated_remote": len(report.updated_remote),
            "deleted_remote": len(report.deleted_remote),
            "skipped": len(report.skipped),
            "errors": len(report.errors),
        },
        "results": results_list,
    }
