"""
Preflight use case — load settings, pick checks, run a policy, audit.

The full vertical slice behind ``hostpreflight check|fix|cleanup``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from hostpreflight.core.config.loader import ConfigError, load_settings
from hostpreflight.core.engine.runner import Mode, Runner, RunReport, write_audit_entry
from hostpreflight.core.host import Host
from hostpreflight.core.models.check import CheckRegistry
from hostpreflight.core.models.settings import PreflightSettings
from hostpreflight.core.persistence.audit import AuditWriter
from hostpreflight.core.preflight.network import all_network_checks, network_checks

logger = logging.getLogger(__name__)


@dataclass
class PreflightResult:
    """Result of a preflight run."""

    report: RunReport | None = None
    settings: PreflightSettings | None = None
    audit_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None and self.report.all_ok

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        result: dict = {}
        if self.report:
            result["report"] = self.report.to_dict()
        if self.audit_path:
            result["audit_file"] = str(self.audit_path)
        return result


def select_checks(mode: Mode, host: Host) -> CheckRegistry:
    """Checks relevant to a policy.

    Verify and fix use the checks matching the host's DNS setup;
    cleanup covers every registry.
    """
    if mode == "cleanup":
        return all_network_checks()
    return network_checks(host)


def run_preflight(
    mode: Mode,
    config_path: Path | None = None,
    host: Host | None = None,
    checks: CheckRegistry | None = None,
    check_only: bool = False,
    fail_fast: bool = False,
    audit_writer: AuditWriter | None = None,
) -> PreflightResult:
    """Run one policy over the preflight checks.

    Args:
        mode: 'check', 'fix' or 'cleanup'.
        config_path: Optional explicit settings file.
        host: Host to act on (default: the real host).
        checks: Explicit checks; default depends on ``mode``.
        check_only: In fix mode, report failures without fixing.
        fail_fast: In check mode, stop at the first failure.
        audit_writer: Ledger for fix/cleanup runs; default from settings.

    Returns:
        PreflightResult with the run report.
    """
    result = PreflightResult()

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.settings = settings

    host = host or Host.default()
    if checks is None:
        checks = select_checks(mode, host)

    runner = Runner(host, settings)
    if mode == "check":
        report = runner.verify(checks, fail_fast=fail_fast)
    elif mode == "fix":
        report = runner.fix(checks, check_only=check_only)
    else:
        report = runner.cleanup(checks)
    result.report = report

    logger.info(
        "%s run %s: %s (%d/%d failed)",
        mode, report.operation_id, report.status, report.failed, report.total,
    )

    if mode != "check" and settings.audit and not (mode == "fix" and check_only):
        if audit_writer is None:
            audit_writer = AuditWriter(Path(settings.audit_file).expanduser() if settings.audit_file else None)
        write_audit_entry(report, audit_writer)
        result.audit_path = audit_writer.path

    return result
