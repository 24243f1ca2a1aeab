"""Placement of detached assistant panels.

A new panel goes to the right of the rightmost visible editor group so it
never covers an open editor. When no editor is visible, the host is asked to
open a new group to the right and the panel targets the second column.

Placement is best-effort: the layout is read once, and if the user moves
editors before the panel is created the column may be stale.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sessionhost.host.protocol import ViewColumn
from sessionhost.logging import get_logger

if TYPE_CHECKING:
    from sessionhost.config.schema import PlacementConfig
    from sessionhost.host.protocol import Host

log = get_logger("placement")

NEW_GROUP_RIGHT_COMMAND = "workbench.action.newGroupRight"
LOCK_GROUP_COMMAND = "workbench.action.lockEditorGroup"


def target_column(columns: Iterable[int | None]) -> int | None:
    """Column for a new panel given the visible editors' columns.

    Editors whose column is unknown count as column 0.

    Returns:
        The column right of the rightmost editor, or None when no editor
        is visible and a new group must be opened.

    Example:
        >>> target_column([1, 2, 2, 3])
        4
        >>> target_column([]) is None
        True
    """
    occupied = [column or 0 for column in columns]
    if not occupied:
        return None
    return int(max(max(occupied) + 1, ViewColumn.ONE))


class PanelPlacement:
    """Computes panel columns and locks the group a panel lands in."""

    def __init__(self, host: Host, config: PlacementConfig) -> None:
        self._host = host
        self._config = config

    async def compute_target_column(self) -> int:
        """Choose the column for a new panel, opening a group if needed."""
        column = target_column(self._host.visible_editor_columns())
        if column is None:
            log.debug("No visible editors, opening a new group to the right")
            await self._host.execute_command(NEW_GROUP_RIGHT_COMMAND)
            return int(ViewColumn.TWO)
        return column

    async def lock_group(self) -> None:
        """Lock the active editor group once the host layout has settled.

        Keeps files the user clicks from opening on top of the panel.
        """
        if not self._config.lock_group:
            return
        await asyncio.sleep(self._config.lock_delay)
        await self._host.execute_command(LOCK_GROUP_COMMAND)
