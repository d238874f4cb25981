"""
Check patterns — builders for the recurring kinds of host checks.

- file_content_check: a file must hold an exact content blob; fixing
  writes it as root and reloads the owning service, cleanup removes it.
- service_state_check: a service must (or must not) be running. NO_FIX.
- executable_check: a tool must be on PATH. NO_FIX.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from hostpreflight.core.host import FileAbsent, FileCheckError, Host, HostOperationError
from hostpreflight.core.models.check import Check, CheckFlags
from hostpreflight.core.models.service import ServiceState
from hostpreflight.core.preflight.errors import (
    DetectionFailed,
    PreconditionUnavailable,
    RemediationFailed,
    UndoFailed,
)

logger = logging.getLogger(__name__)

Precondition = Callable[[Host], None]


# ── Operations ──────────────────────────────────────────────────


def require_executable(name: str, label: str | None = None) -> Precondition:
    """Precondition raising PreconditionUnavailable unless ``name`` is on PATH."""

    def precondition(host: Host) -> None:
        try:
            host.look_path(name)
        except HostOperationError as e:
            raise PreconditionUnavailable(f"{label or name} is not installed: {e}") from e

    return precondition


def check_file_content(host: Host, path: str, content: str) -> None:
    try:
        host.file_content_matches(path, content)
    except FileCheckError as e:
        reason = "absent" if isinstance(e, FileAbsent) else "content differs"
        logger.debug("%s: %s (%s)", path, reason, e.cause)
        raise DetectionFailed(f"{path}: {reason}", reason=reason) from e
    except HostOperationError as e:
        raise DetectionFailed(str(e), reason="unreadable") from e
    logger.debug("%s has the expected content", path)


def write_config_file(host: Host, path: str, content: str, mode: int, service: str) -> None:
    """Write ``content`` to ``path`` and reload ``service``; both must succeed."""
    try:
        host.write_file_as_root(f"write {service} configuration to {path}", content, path, mode)
    except HostOperationError as e:
        raise RemediationFailed(f"Failed to write config file {path}: {e.cause}") from e

    logger.debug("Reloading %s", service)
    try:
        host.reload_service(service)
    except HostOperationError as e:
        raise RemediationFailed(
            f"Wrote {path} but failed to reload {service}: {e.cause}"
        ) from e


def remove_config_file(
    host: Host,
    path: str,
    service: str,
    precondition: Precondition | None = None,
) -> None:
    """Remove ``path`` and reload ``service``; a no-op when there is nothing to remove."""
    if precondition is not None:
        try:
            precondition(host)
        except PreconditionUnavailable as e:
            logger.debug("Nothing to remove for %s: %s", path, e)
            return

    try:
        exists = host.file_exists(path)
    except HostOperationError as e:
        raise UndoFailed(f"Cannot stat {path}: {e.cause}") from e
    if not exists:
        logger.debug("%s is already absent", path)
        return

    logger.debug("Removing %s configuration file: %s", service, path)
    try:
        host.remove_file_as_root(f"removing {service} configuration file in {path}", path)
    except HostOperationError as e:
        raise UndoFailed(f"Failed to remove {service} configuration file {path}: {e.cause}") from e

    logger.debug("Reloading %s", service)
    try:
        host.reload_service(service)
    except HostOperationError as e:
        raise UndoFailed(f"Removed {path} but failed to reload {service}: {e.cause}") from e


def check_service_state(host: Host, service: str, want_running: bool = True) -> None:
    logger.debug("Checking if %s is running", service)
    try:
        state = host.service_status(service)
    except HostOperationError as e:
        raise DetectionFailed(f"Cannot get status of {service}: {e.cause}", reason="unknown") from e

    running = state is ServiceState.RUNNING
    if want_running and not running:
        raise DetectionFailed(f"{service} is not running (state: {state.value})", reason=state.value)
    if not want_running and running:
        raise DetectionFailed(f"{service} is running", reason=state.value)
    logger.debug("%s state is %s", service, state.value)


def check_executable(host: Host, executable: str, label: str | None = None) -> None:
    logger.debug("Checking if '%s' is available", executable)
    try:
        path = host.look_path(executable)
    except HostOperationError as e:
        raise DetectionFailed(
            f"{label or executable} was not found in PATH: {e.cause}", reason="absent"
        ) from e
    logger.debug("'%s' was found in %s", executable, path)


# ── Builders ────────────────────────────────────────────────────


def file_content_check(
    config_key_suffix: str,
    path: str,
    content: str,
    mode: int,
    service: str,
    fix_description: str,
    precondition: Precondition | None = None,
    check_description: str | None = None,
    cleanup_description: str | None = None,
) -> Check:
    """A check that ``path`` holds ``content`` exactly."""
    return Check(
        config_key_suffix=config_key_suffix,
        check_description=check_description or f"Checking if {path} exists",
        check=lambda host: check_file_content(host, path, content),
        fix_description=fix_description,
        fix=lambda host: write_config_file(host, path, content, mode, service),
        cleanup_description=cleanup_description or f"Removing {path} file",
        cleanup=lambda host: remove_config_file(host, path, service, precondition),
    )


def service_state_check(
    config_key_suffix: str,
    service: str,
    fix_description: str,
    want_running: bool = True,
    check_description: str | None = None,
) -> Check:
    """A NO_FIX check that ``service`` is running, or with ``want_running=False``, is not."""
    if check_description is None:
        check_description = f"Checking if {service.removesuffix('.service')} is running"
    return Check(
        config_key_suffix=config_key_suffix,
        check_description=check_description,
        check=lambda host: check_service_state(host, service, want_running),
        fix_description=fix_description,
        flags=CheckFlags.NO_FIX,
    )


def executable_check(
    config_key_suffix: str,
    executable: str,
    fix_description: str,
    label: str | None = None,
    check_description: str | None = None,
) -> Check:
    """A NO_FIX check that ``executable`` can be found on PATH."""
    return Check(
        config_key_suffix=config_key_suffix,
        check_description=check_description or f"Checking if {label or executable} is installed",
        check=lambda host: check_executable(host, executable, label),
        fix_description=fix_description,
        flags=CheckFlags.NO_FIX,
    )
