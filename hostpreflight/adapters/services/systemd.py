"""
Systemd adapter — query and reload host services via systemctl.

Status queries are read-only probes (``systemctl show``); reloads are
privileged and escalate through sudo when the process is not root.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from hostpreflight.adapters.base import Adapter, ExecutionContext
from hostpreflight.adapters.shell.command import run_command, sudo_prefix
from hostpreflight.core.models.action import Receipt
from hostpreflight.core.models.service import ServiceState

logger = logging.getLogger(__name__)

_PROPERTIES = ("LoadState", "ActiveState", "SubState")


def parse_show_output(stdout: str) -> dict[str, str]:
    """Parse ``systemctl show`` KEY=value lines into a dict."""
    props: dict[str, str] = {}
    for line in stdout.splitlines():
        key, sep, val = line.strip().partition("=")
        if sep:
            props[key] = val
    return props


class SystemdAdapter(Adapter):
    """Host service manager operations.

    Action params:
        operation (str): 'status' or 'reload'.
        service (str): Unit name (e.g. 'NetworkManager.service').
    """

    @property
    def name(self) -> str:
        return "systemd"

    def is_available(self) -> bool:
        return shutil.which("systemctl") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if operation not in ("status", "reload"):
            return False, f"Unknown operation '{operation}'. Valid: reload, status"
        if not context.action.params.get("service"):
            return False, "Missing required param: 'service'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        service = context.action.params["service"]

        try:
            if operation == "status":
                return self._status(context, service)
            return self._reload(context, service)
        except (OSError, subprocess.SubprocessError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{service}: {e}",
                metadata={"operation": operation, "service": service},
            )

    def _status(self, ctx: ExecutionContext, service: str) -> Receipt:
        result = run_command(
            ["systemctl", "show", service, f"--property={','.join(_PROPERTIES)}"],
            timeout=10,
        )
        if result.returncode != 0:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"{service}: {result.stderr.strip() or 'systemctl show failed'}",
                metadata={"service": service, "return_code": result.returncode},
            )

        props = parse_show_output(result.stdout)
        state = ServiceState.from_systemd(
            props.get("LoadState", ""),
            props.get("ActiveState", ""),
        )
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=state.value,
            metadata={"service": service, **{k.lower(): v for k, v in props.items()}},
        )

    def _reload(self, ctx: ExecutionContext, service: str) -> Receipt:
        logger.debug("Reloading %s", service)
        result = run_command(sudo_prefix() + ["systemctl", "reload", service], timeout=30)
        if result.returncode != 0:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"{service}: {result.stderr.strip() or f'reload exited with code {result.returncode}'}",
                metadata={"service": service, "return_code": result.returncode},
            )
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Reloaded {service}",
            metadata={"service": service},
        )
