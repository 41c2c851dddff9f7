"""
Filesystem adapter — existence checks and atomic renames.

Guest configuration files and storage directories are moved with a
single ``os.rename`` in the same parent directory, so there is never a
moment with zero or two copies on disk. Copy-then-delete is never
attempted: a rename that crosses filesystems fails instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from vmidctl.adapters.base import Adapter, ExecutionContext
from vmidctl.core.models.action import Receipt

logger = logging.getLogger(__name__)


class FilesystemAdapter(Adapter):
    """File and directory operations with receipts.

    Action params:
        operation (str): One of 'exists', 'move'.
        path (str): Target of 'exists'.
        source (str): Path to move (for 'move').
        target (str): Destination (for 'move'); must not exist yet.
        required (bool): For 'move', whether a missing source is a
            failure (True) or a skip (False). Default True.
    """

    VALID_OPERATIONS = {"exists", "move"}

    @property
    def name(self) -> str:
        return "filesystem"

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.operation
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in self.VALID_OPERATIONS:
            valid = ", ".join(sorted(self.VALID_OPERATIONS))
            return False, f"Unknown operation '{operation}'. Valid: {valid}"

        if operation == "exists" and not context.params.get("path"):
            return False, "Missing required param: 'path'"

        if operation == "move":
            for key in ("source", "target"):
                if not context.params.get(key):
                    return False, f"Missing required param: '{key}' for move operation"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.operation
        try:
            if operation == "exists":
                return self._exists(context, Path(context.params["path"]))
            elif operation == "move":
                return self._move(context)
            else:
                return Receipt.failure(
                    adapter=self.name,
                    action_id=context.action.id,
                    error=f"Unknown operation: {operation}",
                )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation},
            )

    def _exists(self, ctx: ExecutionContext, target: Path) -> Receipt:
        # lexists: a dangling symlink still occupies the name
        exists = os.path.lexists(target)
        is_dir = target.is_dir() if exists else False
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=str(exists),
            metadata={
                "exists": exists,
                "is_dir": is_dir,
                "is_symlink": target.is_symlink(),
                "path": str(target),
            },
        )

    def _move(self, ctx: ExecutionContext) -> Receipt:
        source = Path(ctx.params["source"])
        target = Path(ctx.params["target"])
        required = ctx.params.get("required", True)
        meta = {"source": str(source), "target": str(target)}

        # lexists: a dangling symlink still counts as present
        if not os.path.lexists(source):
            if required:
                return Receipt.failure(
                    adapter=self.name,
                    action_id=ctx.action.id,
                    error=f"Source not found: {source}",
                    metadata={**meta, "missing": True},
                )
            return Receipt.skip(
                adapter=self.name,
                action_id=ctx.action.id,
                reason=f"Nothing to move at {source}",
                metadata={**meta, "missing": True},
            )

        if os.path.lexists(target):
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Target already exists: {target}",
                metadata={**meta, "target_exists": True},
            )

        is_dir = source.is_dir()
        logger.debug("rename %s -> %s", source, target)
        os.rename(source, target)

        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"{source} -> {target}",
            metadata={**meta, "is_dir": is_dir},
        )
