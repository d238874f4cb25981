"""
Check model — one verifiable host property.

A Check bundles a detect operation with an optional fix and an optional
cleanup, plus the text shown to the operator for each. Checks are
immutable data built once at import time; every operation receives the
Host facade and keeps no state between calls.

    Check(
        config_key_suffix="check-crc-dnsmasq-file",
        check_description="Checking if /etc/NetworkManager/dnsmasq.d/crc.conf exists",
        check=..., fix_description="Writing dnsmasq config for crc", fix=...,
        cleanup_description="Removing ...", cleanup=...,
    )
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Flag, auto
from typing import TYPE_CHECKING

from hostpreflight.core.preflight.errors import FixNotAvailable

if TYPE_CHECKING:
    from hostpreflight.core.host import Host

logger = logging.getLogger(__name__)

CheckFn = Callable[["Host"], None]


class CheckFlags(Flag):
    """Capability bits of a Check."""

    NONE = 0
    NO_FIX = auto()         # failure must be fixed by hand; never call fix
    SETUP_ONLY = auto()     # only evaluated while fixing, not when verifying
    CLEANUP_ONLY = auto()   # only relevant to cleanup


@dataclass(frozen=True)
class Check:
    """A self-contained detect / fix / cleanup unit."""

    config_key_suffix: str
    check_description: str
    check: CheckFn
    fix_description: str
    fix: CheckFn | None = None
    cleanup_description: str = ""
    cleanup: CheckFn | None = None
    flags: CheckFlags = CheckFlags.NONE

    def __post_init__(self) -> None:
        if not self.config_key_suffix:
            raise ValueError("Check needs a config_key_suffix")
        if not self.check_description:
            raise ValueError(f"{self.config_key_suffix}: missing check description")
        if not self.fix_description:
            raise ValueError(f"{self.config_key_suffix}: missing fix description")
        if CheckFlags.NO_FIX in self.flags and self.fix is not None:
            raise ValueError(f"{self.config_key_suffix}: NO_FIX check must not define a fix")
        if CheckFlags.NO_FIX not in self.flags and self.fix is None:
            raise ValueError(f"{self.config_key_suffix}: fixable check must define a fix")
        if self.cleanup is not None and not self.cleanup_description:
            raise ValueError(f"{self.config_key_suffix}: missing cleanup description")

    @property
    def id(self) -> str:
        return self.config_key_suffix

    @property
    def fixable(self) -> bool:
        return CheckFlags.NO_FIX not in self.flags

    @property
    def undoable(self) -> bool:
        return self.cleanup is not None

    @property
    def skip_setting(self) -> str:
        """Settings key that disables this check."""
        return f"skip-{self.config_key_suffix}"

    @property
    def warn_setting(self) -> str:
        """Settings key that downgrades a failure of this check to a warning."""
        return f"warn-{self.config_key_suffix}"

    def has_flag(self, flag: CheckFlags) -> bool:
        return flag in self.flags

    def do_check(self, host: Host) -> None:
        """Run detection. Raises DetectionFailed."""
        logger.info("%s", self.check_description)
        try:
            self.check(host)
        except Exception as e:
            logger.debug("%s: %s", self.config_key_suffix, e)
            raise

    def do_fix(self, host: Host) -> None:
        """Run remediation. Raises FixNotAvailable for NO_FIX checks."""
        if not self.fixable or self.fix is None:
            raise FixNotAvailable(self.fix_description)
        logger.info("%s", self.fix_description)
        self.fix(host)

    def do_cleanup(self, host: Host) -> None:
        """Run the undo operation, if the check has one."""
        if self.cleanup is None:
            return
        logger.info("%s", self.cleanup_description)
        self.cleanup(host)

    def describe(self) -> dict:
        return {
            "id": self.config_key_suffix,
            "description": self.check_description,
            "fix": self.fix_description,
            "cleanup": self.cleanup_description or None,
            "fixable": self.fixable,
            "undoable": self.undoable,
            "flags": [f.name.lower() for f in CheckFlags if f.value and f in self.flags],
        }


CheckRegistry = tuple[Check, ...]


def validate_registry(*registries: Iterable[Check]) -> None:
    """Raise ValueError when a check id is used more than once."""
    seen: set[str] = set()
    dupes: list[str] = []
    for registry in registries:
        for check in registry:
            if check.config_key_suffix in seen:
                dupes.append(check.config_key_suffix)
            seen.add(check.config_key_suffix)
    if dupes:
        raise ValueError(f"Duplicate check ids: {', '.join(sorted(set(dupes)))}")
