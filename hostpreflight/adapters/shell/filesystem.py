"""
Filesystem adapter — privileged file operations.

Provides a receipt-returning interface for the file primitives the
checks rely on: existence, content comparison, and writing or removing
files owned by root. Writes and removals escalate through sudo when the
process is not already root.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path

from hostpreflight.adapters.base import Adapter, ExecutionContext
from hostpreflight.adapters.shell.command import is_root, run_command, sudo_prefix
from hostpreflight.core.models.action import Receipt

logger = logging.getLogger(__name__)

VALID_OPERATIONS = {"exists", "matches", "write", "remove"}

DEFAULT_MODE = 0o644


class FilesystemAdapter(Adapter):
    """File operations with receipts.

    Action params:
        operation (str): One of 'exists', 'matches', 'write', 'remove'.
        path (str): Absolute host path.
        content (str): Expected content ('matches') or content to write ('write').
        mode (int): Permission bits for 'write' (default 0o644).
        privileged (bool): Escalate 'write'/'remove' when not root (default True).
    """

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True  # filesystem is always available

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in VALID_OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(VALID_OPERATIONS))}"

        path = context.action.params.get("path", "")
        if not path:
            return False, "Missing required param: 'path'"
        if not Path(path).is_absolute():
            return False, f"Path must be absolute: {path}"

        if operation in ("write", "matches") and "content" not in context.action.params:
            return False, f"Missing required param: 'content' for {operation} operation"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        target = context.host_path(context.action.params["path"])

        try:
            if operation == "exists":
                return self._exists(context, target)
            elif operation == "matches":
                return self._matches(context, target)
            elif operation == "write":
                return self._write(context, target)
            else:
                return self._remove(context, target)
        except (OSError, subprocess.SubprocessError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{target}: {e}",
                metadata={"operation": operation, "path": str(target)},
            )

    @staticmethod
    def _elevate(ctx: ExecutionContext) -> bool:
        # Relocated trees belong to the caller, never escalate for them
        return ctx.params.get("privileged", True) and ctx.root is None and not is_root()

    def _exists(self, ctx: ExecutionContext, target: Path) -> Receipt:
        exists = target.exists()
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=str(exists),
            metadata={"exists": exists, "path": str(target)},
        )

    def _matches(self, ctx: ExecutionContext, target: Path) -> Receipt:
        expected = ctx.params["content"].encode("utf-8")
        if not target.is_file():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"{target}: file does not exist",
                metadata={"reason": "absent", "path": str(target)},
            )

        actual = target.read_bytes()
        if actual != expected:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"{target}: unexpected content ({len(actual)} bytes, expected {len(expected)})",
                metadata={"reason": "mismatch", "path": str(target)},
            )

        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output="content matches",
            metadata={"path": str(target), "size": len(actual)},
        )

    def _write(self, ctx: ExecutionContext, target: Path) -> Receipt:
        content: str = ctx.params["content"]
        mode: int = ctx.params.get("mode", DEFAULT_MODE)

        if self._elevate(ctx):
            prefix = sudo_prefix()
            steps = [
                (prefix + ["mkdir", "-p", str(target.parent)], None),
                (prefix + ["install", "-m", f"{mode:o}", "/dev/stdin", str(target)], content),
            ]
            for argv, stdin in steps:
                result = run_command(argv, input=stdin)
                if result.returncode != 0:
                    return Receipt.failure(
                        adapter=self.name,
                        action_id=ctx.action.id,
                        error=f"{target}: {result.stderr.strip() or f'{argv[len(prefix)]} exited with code {result.returncode}'}",
                        metadata={"path": str(target), "privileged": True},
                    )
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.chmod(tmp_name, mode)
                os.replace(tmp_name, target)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        logger.debug("Wrote %d bytes to %s (mode %o)", len(content), target, mode)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Written {len(content)} bytes to {target}",
            metadata={"path": str(target), "size": len(content), "mode": mode},
        )

    def _remove(self, ctx: ExecutionContext, target: Path) -> Receipt:
        if not target.exists():
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=f"Already absent: {target}",
                metadata={"path": str(target), "removed": False},
            )

        if self._elevate(ctx):
            prefix = sudo_prefix()
            result = run_command(prefix + ["rm", "-f", str(target)])
            if result.returncode != 0:
                return Receipt.failure(
                    adapter=self.name,
                    action_id=ctx.action.id,
                    error=f"{target}: {result.stderr.strip() or f'rm exited with code {result.returncode}'}",
                    metadata={"path": str(target), "privileged": True},
                )
        else:
            target.unlink(missing_ok=True)

        logger.debug("Removed %s", target)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Removed {target}",
            metadata={"path": str(target), "removed": True},
        )
