"""
Tests for domain models — Check, CheckFlags, registries, settings.
"""

import pytest
from pydantic import ValidationError

from hostpreflight.core.models.check import Check, CheckFlags, validate_registry
from hostpreflight.core.models.settings import PreflightSettings
from hostpreflight.core.preflight.errors import DetectionFailed, FixNotAvailable


def _noop(host):
    return None


def _fixable(check_id: str = "check-thing", **kwargs) -> Check:
    defaults = dict(
        config_key_suffix=check_id,
        check_description="Checking thing",
        check=_noop,
        fix_description="Fixing thing",
        fix=_noop,
    )
    defaults.update(kwargs)
    return Check(**defaults)


class TestCheckValidation:
    def test_valid_fixable(self):
        check = _fixable()
        assert check.fixable
        assert not check.undoable
        assert check.id == "check-thing"

    def test_no_fix_with_fix_rejected(self):
        with pytest.raises(ValueError, match="NO_FIX"):
            _fixable(flags=CheckFlags.NO_FIX)

    def test_fixable_without_fix_rejected(self):
        with pytest.raises(ValueError, match="must define a fix"):
            _fixable(fix=None)

    def test_cleanup_needs_description(self):
        with pytest.raises(ValueError, match="cleanup description"):
            _fixable(cleanup=_noop)

    def test_missing_id(self):
        with pytest.raises(ValueError):
            _fixable(check_id="")

    def test_frozen(self):
        check = _fixable()
        with pytest.raises(AttributeError):
            check.fix_description = "other"

    def test_settings_keys(self):
        check = _fixable("check-crc-dnsmasq-file")
        assert check.skip_setting == "skip-check-crc-dnsmasq-file"
        assert check.warn_setting == "warn-check-crc-dnsmasq-file"


class TestCheckOperations:
    def test_do_check_reraises(self):
        def failing(host):
            raise DetectionFailed("nope", reason="absent")

        check = _fixable(check=failing)
        with pytest.raises(DetectionFailed, match="nope"):
            check.do_check(None)

    def test_do_fix_no_fix_never_calls_into_check(self):
        calls = []
        check = Check(
            config_key_suffix="check-service",
            check_description="Checking service",
            check=lambda host: calls.append("check"),
            fix_description="Start the service by hand",
            flags=CheckFlags.NO_FIX,
        )
        assert check.fix is None
        with pytest.raises(FixNotAvailable, match="Start the service by hand"):
            check.do_fix(None)
        assert calls == []

    def test_do_fix_runs_fix(self):
        calls = []
        check = _fixable(fix=lambda host: calls.append(host))
        check.do_fix("host")
        assert calls == ["host"]

    def test_do_cleanup_without_cleanup_is_noop(self):
        _fixable().do_cleanup(None)

    def test_do_cleanup_runs_cleanup(self):
        calls = []
        check = _fixable(cleanup=lambda host: calls.append("cleanup"), cleanup_description="Removing thing")
        assert check.undoable
        check.do_cleanup(None)
        assert calls == ["cleanup"]

    def test_describe(self):
        check = Check(
            config_key_suffix="check-x",
            check_description="Checking x",
            check=_noop,
            fix_description="manual",
            flags=CheckFlags.NO_FIX | CheckFlags.SETUP_ONLY,
        )
        d = check.describe()
        assert d["id"] == "check-x"
        assert d["fixable"] is False
        assert d["undoable"] is False
        assert set(d["flags"]) == {"no_fix", "setup_only"}


class TestValidateRegistry:
    def test_unique(self):
        validate_registry((_fixable("a"), _fixable("b")), (_fixable("c"),))

    def test_duplicates_across_registries(self):
        with pytest.raises(ValueError, match="Duplicate check ids: a"):
            validate_registry((_fixable("a"),), (_fixable("a"),))


class TestPreflightSettings:
    def test_defaults(self):
        s = PreflightSettings()
        assert s.skip == []
        assert s.warn == []
        assert s.audit is True

    def test_lists(self):
        s = PreflightSettings.model_validate({"skip": ["a"], "warn": ["b"]})
        assert s.should_skip("a")
        assert s.should_warn("b")
        assert not s.should_skip("b")

    def test_flat_keys(self):
        s = PreflightSettings.model_validate({
            "skip-check-network-manager-running": True,
            "warn-check-systemd-networkd-running": True,
            "skip-check-crc-dnsmasq-file": False,
        })
        assert s.skip == ["check-network-manager-running"]
        assert s.warn == ["check-systemd-networkd-running"]

    def test_flat_and_list_merge(self):
        s = PreflightSettings.model_validate({"skip": ["a"], "skip-b": True})
        assert s.skip == ["a", "b"]

    def test_flat_key_string_false(self):
        s = PreflightSettings.model_validate({"skip-check-network-manager-running": "false"})
        assert s.skip == []

    def test_flat_key_not_a_bool(self):
        with pytest.raises(ValidationError):
            PreflightSettings.model_validate({"warn-check-crc-dnsmasq-file": "maybe"})

    def test_scalar_list_rejected(self):
        with pytest.raises(ValidationError):
            PreflightSettings.model_validate({"skip": "check-network-manager-running"})
