"""
Host facade — typed privileged primitives over the adapter registry.

Checks never call subprocess or touch files themselves; they go through
a Host. Each method builds an Action, dispatches it through the
AdapterRegistry and turns a failed Receipt into a HostOperationError
naming the resource and the cause.

Swapping the registry (mock mode, a MockAdapter, or a relocation root)
is how tests exercise checks without root or a real service manager.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hostpreflight.adapters.registry import AdapterRegistry
from hostpreflight.core.models.action import Action, Receipt
from hostpreflight.core.models.service import ServiceState

logger = logging.getLogger(__name__)


class HostOperationError(Exception):
    """A host primitive failed."""

    def __init__(self, resource: str, cause: str):
        super().__init__(f"{resource}: {cause}" if not cause.startswith(resource) else cause)
        self.resource = resource
        self.cause = cause


class FileCheckError(HostOperationError):
    """A file does not hold the expected content."""


class FileAbsent(FileCheckError):
    pass


class FileContentMismatch(FileCheckError):
    pass


class ExecutableNotFound(HostOperationError):
    pass


def default_registry() -> AdapterRegistry:
    """Registry wired to the real host adapters."""
    from hostpreflight.adapters.services.systemd import SystemdAdapter
    from hostpreflight.adapters.shell.command import ShellCommandAdapter
    from hostpreflight.adapters.shell.filesystem import FilesystemAdapter
    from hostpreflight.adapters.shell.lookup import ExecutableLookupAdapter

    registry = AdapterRegistry()
    for adapter in (
        ShellCommandAdapter(),
        FilesystemAdapter(),
        ExecutableLookupAdapter(),
        SystemdAdapter(),
    ):
        registry.register(adapter)
    return registry


class Host:
    """The set of host primitives checks are written against.

    Args:
        registry: Adapter registry used for dispatch.
        root: Optional directory that absolute host paths are relocated under.
        dry_run: Plan mutating primitives without executing them.
    """

    def __init__(
        self,
        registry: AdapterRegistry | None = None,
        root: Path | str | None = None,
        dry_run: bool = False,
    ):
        self.registry = registry or default_registry()
        self.root = str(root) if root is not None else None
        self.dry_run = dry_run

    @classmethod
    def default(cls, root: Path | str | None = None, dry_run: bool = False) -> Host:
        return cls(default_registry(), root=root, dry_run=dry_run)

    def _dispatch(self, action: Action) -> Receipt:
        return self.registry.execute_action(action, root=self.root, dry_run=self.dry_run)

    # ── Commands ────────────────────────────────────────────────

    def run_command(self, argv: list[str], description: str = "") -> str:
        """Run a command and return its stdout."""
        receipt = self._dispatch(Action(
            id=f"shell.run:{argv[0]}",
            name=description,
            adapter="shell",
            params={"command": argv},
            mutating=True,
        ))
        if receipt.failed:
            raise HostOperationError(argv[0], receipt.error or "command failed")
        return receipt.output

    # ── Files ───────────────────────────────────────────────────

    def write_file_as_root(self, description: str, content: str, path: str, mode: int) -> None:
        """Create or replace a root-owned file with the given content and mode."""
        receipt = self._dispatch(Action(
            id=f"filesystem.write:{path}",
            name=description,
            adapter="filesystem",
            params={"operation": "write", "path": path, "content": content, "mode": mode},
            mutating=True,
        ))
        if receipt.failed:
            raise HostOperationError(path, receipt.error or "write failed")

    def remove_file_as_root(self, description: str, path: str) -> None:
        """Delete a root-owned file; absent files are not an error."""
        receipt = self._dispatch(Action(
            id=f"filesystem.remove:{path}",
            name=description,
            adapter="filesystem",
            params={"operation": "remove", "path": path},
            mutating=True,
        ))
        if receipt.failed:
            raise HostOperationError(path, receipt.error or "remove failed")

    def file_exists(self, path: str) -> bool:
        receipt = self._dispatch(Action(
            id=f"filesystem.exists:{path}",
            adapter="filesystem",
            params={"operation": "exists", "path": path},
        ))
        if receipt.failed:
            raise HostOperationError(path, receipt.error or "stat failed")
        return bool(receipt.metadata.get("exists", receipt.output == "True"))

    def file_content_matches(self, path: str, expected: str) -> None:
        """Raise FileAbsent / FileContentMismatch unless ``path`` holds exactly ``expected``."""
        receipt = self._dispatch(Action(
            id=f"filesystem.matches:{path}",
            adapter="filesystem",
            params={"operation": "matches", "path": path, "content": expected},
        ))
        if receipt.ok:
            return
        reason = receipt.metadata.get("reason")
        if reason == "absent":
            raise FileAbsent(path, receipt.error or "file does not exist")
        if reason == "mismatch":
            raise FileContentMismatch(path, receipt.error or "unexpected content")
        raise HostOperationError(path, receipt.error or "cannot read file")

    # ── Services ────────────────────────────────────────────────

    def service_status(self, name: str) -> ServiceState:
        receipt = self._dispatch(Action(
            id=f"systemd.status:{name}",
            adapter="systemd",
            params={"operation": "status", "service": name},
        ))
        if receipt.failed:
            raise HostOperationError(name, receipt.error or "cannot query service status")
        try:
            return ServiceState(receipt.output)
        except ValueError:
            return ServiceState.UNKNOWN

    def reload_service(self, name: str) -> None:
        receipt = self._dispatch(Action(
            id=f"systemd.reload:{name}",
            name=f"reload {name}",
            adapter="systemd",
            params={"operation": "reload", "service": name},
            mutating=True,
        ))
        if receipt.failed:
            raise HostOperationError(name, receipt.error or "reload failed")

    # ── Executables ─────────────────────────────────────────────

    def look_path(self, executable: str) -> str:
        receipt = self._dispatch(Action(
            id=f"path.lookup:{executable}",
            adapter="path",
            params={"executable": executable},
        ))
        if receipt.failed:
            raise ExecutableNotFound(executable, receipt.error or "not found in $PATH")
        return receipt.output
