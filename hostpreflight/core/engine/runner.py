"""
Check runner — applies a policy to a sequence of checks.

Checks hold mechanism (detect, fix, cleanup); the runner holds policy:

    verify   detect only; report every failure (or stop at the first)
    fix      detect, and on failure fix then detect again to confirm
    cleanup  undo every check that can be undone, in reverse order

Checks run strictly one after another in definition order, since
several of them write the same files and reload the same service.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from hostpreflight.core.host import Host
from hostpreflight.core.models.check import Check, CheckFlags
from hostpreflight.core.models.settings import PreflightSettings
from hostpreflight.core.persistence.audit import AuditEntry, AuditWriter
from hostpreflight.core.preflight.errors import FixNotAvailable, PreflightError

logger = logging.getLogger(__name__)

Mode = Literal["check", "fix", "cleanup"]
ResultStatus = Literal["ok", "fixed", "warned", "skipped", "failed"]


@dataclass
class CheckResult:
    """Outcome of one check under one policy."""

    check_id: str
    description: str
    phase: Literal["check", "fix", "cleanup"]
    status: ResultStatus
    error: str | None = None
    detail: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    def to_dict(self) -> dict:
        return {
            "check": self.check_id,
            "description": self.description,
            "phase": self.phase,
            "status": self.status,
            "error": self.error,
            "detail": self.detail,
            "duration_ms": self.duration_ms,
        }


@dataclass
class RunReport:
    """Result of running a policy over a set of checks."""

    operation_id: str = ""
    mode: Mode = "check"
    dry_run: bool = False
    results: list[CheckResult] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    def _count(self, status: ResultStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def passed(self) -> int:
        return self._count("ok")

    @property
    def fixed(self) -> int:
        return self._count("fixed")

    @property
    def warned(self) -> int:
        return self._count("warned")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.passed + self.fixed > 0:
            return "partial"
        return "failed"

    @property
    def errors(self) -> list[str]:
        return [f"{r.check_id}: {r.error}" for r in self.results if r.status == "failed"]

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "mode": self.mode,
            "dry_run": self.dry_run,
            "status": self.status,
            "total": self.total,
            "passed": self.passed,
            "fixed": self.fixed,
            "warned": self.warned,
            "skipped": self.skipped,
            "failed": self.failed,
            "duration_ms": self.duration_ms,
            "results": [r.to_dict() for r in self.results],
        }


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class Runner:
    """Runs checks against a host under the verify / fix / cleanup policies.

    Args:
        host: Host facade handed to every check operation.
        settings: skip/warn settings; defaults to none.
    """

    def __init__(self, host: Host, settings: PreflightSettings | None = None):
        self.host = host
        self.settings = settings or PreflightSettings()

    def _skipped(self, check: Check, phase) -> CheckResult | None:
        if self.settings.should_skip(check.config_key_suffix):
            logger.warning("Skipping check '%s' (%s is set)", check.check_description, check.skip_setting)
            return CheckResult(
                check.config_key_suffix, check.check_description, phase, "skipped",
                detail=f"{check.skip_setting} is set",
            )
        return None

    def _new_report(self, mode: Mode) -> RunReport:
        return RunReport(
            operation_id=generate_operation_id(),
            mode=mode,
            dry_run=self.host.dry_run,
        )

    # ── Policies ────────────────────────────────────────────────

    def verify(self, checks: Iterable[Check], fail_fast: bool = False) -> RunReport:
        """Detect only. Setup-only and cleanup-only checks are not evaluated."""
        report = self._new_report("check")
        start = time.monotonic()

        for check in checks:
            if check.has_flag(CheckFlags.SETUP_ONLY) or check.has_flag(CheckFlags.CLEANUP_ONLY):
                continue
            skipped = self._skipped(check, "check")
            if skipped:
                report.results.append(skipped)
                continue

            result = self._detect(check)
            report.results.append(result)
            if result.status == "failed" and fail_fast:
                break

        report.duration_ms = _elapsed_ms(start)
        return report

    def fix(self, checks: Iterable[Check], check_only: bool = False) -> RunReport:
        """Detect, and fix what fails. Stops at the first check left failing."""
        report = self._new_report("fix")
        start = time.monotonic()

        for check in checks:
            if check.has_flag(CheckFlags.CLEANUP_ONLY):
                continue
            skipped = self._skipped(check, "check")
            if skipped:
                report.results.append(skipped)
                continue

            # warn-listed checks are still fixed when they can be
            detected = self._detect(check, honor_warn=check_only)
            if detected.status == "failed" and not check_only:
                result = self._remediate(check, detected.error or "")
            else:
                result = detected
            report.results.append(result)
            if result.status == "failed":
                break

        report.duration_ms = _elapsed_ms(start)
        return report

    def cleanup(self, checks: Iterable[Check]) -> RunReport:
        """Undo every undoable check, last first. Failures don't stop the run."""
        report = self._new_report("cleanup")
        start = time.monotonic()

        for check in reversed(list(checks)):
            if not check.undoable:
                continue
            op_start = time.monotonic()
            try:
                check.do_cleanup(self.host)
            except PreflightError as e:
                logger.error("%s", e)
                report.results.append(CheckResult(
                    check.config_key_suffix, check.cleanup_description, "cleanup", "failed",
                    error=str(e), duration_ms=_elapsed_ms(op_start),
                ))
                continue
            report.results.append(CheckResult(
                check.config_key_suffix, check.cleanup_description, "cleanup", "ok",
                duration_ms=_elapsed_ms(op_start),
            ))

        report.duration_ms = _elapsed_ms(start)
        return report

    # ── Steps ───────────────────────────────────────────────────

    def _detect(self, check: Check, honor_warn: bool = True) -> CheckResult:
        op_start = time.monotonic()
        try:
            check.do_check(self.host)
        except PreflightError as e:
            if honor_warn and self.settings.should_warn(check.config_key_suffix):
                logger.warning("%s", e)
                return CheckResult(
                    check.config_key_suffix, check.check_description, "check", "warned",
                    error=str(e), detail=f"{check.warn_setting} is set",
                    duration_ms=_elapsed_ms(op_start),
                )
            return CheckResult(
                check.config_key_suffix, check.check_description, "check", "failed",
                error=str(e), duration_ms=_elapsed_ms(op_start),
            )
        return CheckResult(
            check.config_key_suffix, check.check_description, "check", "ok",
            duration_ms=_elapsed_ms(op_start),
        )

    def _remediate(self, check: Check, detection_error: str) -> CheckResult:
        op_start = time.monotonic()

        # NO_FIX checks are rejected here; their fix is never invoked
        if not check.fixable:
            error = FixNotAvailable(check.fix_description)
            status: ResultStatus = "failed"
            if self.settings.should_warn(check.config_key_suffix):
                logger.warning("%s: %s", detection_error, error)
                status = "warned"
            return CheckResult(
                check.config_key_suffix, check.fix_description, "fix", status,
                error=f"{detection_error}: {error}" if detection_error else str(error),
                detail="manual action required",
                duration_ms=_elapsed_ms(op_start),
            )

        try:
            check.do_fix(self.host)
        except PreflightError as e:
            logger.error("%s", e)
            return CheckResult(
                check.config_key_suffix, check.fix_description, "fix", "failed",
                error=str(e), duration_ms=_elapsed_ms(op_start),
            )

        if self.host.dry_run:
            return CheckResult(
                check.config_key_suffix, check.fix_description, "fix", "fixed",
                detail="[dry-run] not applied", duration_ms=_elapsed_ms(op_start),
            )

        # Confirm the fix took effect
        try:
            check.do_check(self.host)
        except PreflightError as e:
            return CheckResult(
                check.config_key_suffix, check.fix_description, "fix", "failed",
                error=f"still failing after fix: {e}", duration_ms=_elapsed_ms(op_start),
            )

        return CheckResult(
            check.config_key_suffix, check.fix_description, "fix", "fixed",
            detail=detection_error, duration_ms=_elapsed_ms(op_start),
        )


def write_audit_entry(report: RunReport, audit_writer: AuditWriter) -> None:
    """Record a run in the audit ledger."""
    changed = [
        r.check_id for r in report.results
        if r.status == "fixed" or (r.phase == "cleanup" and r.status == "ok")
    ]
    entry = AuditEntry(
        operation_id=report.operation_id,
        mode=report.mode,
        dry_run=report.dry_run,
        status=report.status,
        checks_total=report.total,
        checks_changed=changed,
        checks_failed=[r.check_id for r in report.results if r.status == "failed"],
        duration_ms=report.duration_ms,
        errors=report.errors,
    )
    audit_writer.write(entry)
