"""
Tests for adapter protocol, registry, mock, shell, filesystem, lookup and systemd adapters.
"""

from pathlib import Path

from hostpreflight.adapters.base import ExecutionContext
from hostpreflight.adapters.mock import MockAdapter
from hostpreflight.adapters.registry import AdapterRegistry
from hostpreflight.adapters.services.systemd import SystemdAdapter, parse_show_output
from hostpreflight.adapters.shell.command import ShellCommandAdapter
from hostpreflight.adapters.shell.filesystem import FilesystemAdapter
from hostpreflight.adapters.shell.lookup import ExecutableLookupAdapter
from hostpreflight.core.models.action import Action, Receipt
from hostpreflight.core.models.service import ServiceState


def _fs_ctx(root: Path, **params) -> ExecutionContext:
    return ExecutionContext(
        action=Action(id="fs", adapter="filesystem", params=params),
        root=str(root),
        params=params,
    )


# ── Protocol Tests ───────────────────────────────────────────────────


class TestExecutionContext:
    def test_host_path_without_root(self):
        ctx = ExecutionContext(action=Action(id="t", adapter="filesystem"))
        assert ctx.host_path("/etc/hosts") == Path("/etc/hosts")

    def test_host_path_relocated(self, tmp_path: Path):
        ctx = ExecutionContext(action=Action(id="t", adapter="filesystem"), root=str(tmp_path))
        assert ctx.host_path("/etc/NetworkManager/conf.d/x.conf") == (
            tmp_path / "etc" / "NetworkManager" / "conf.d" / "x.conf"
        )


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="test-mock")
        ctx = ExecutionContext(action=Action(id="op-1", adapter="test-mock"))
        receipt = mock.execute(ctx)
        assert receipt.ok
        assert mock.call_count == 1

    def test_set_output(self):
        mock = MockAdapter(adapter_name="systemd")
        mock.set_output("systemd.status:foo", "running")
        ctx = ExecutionContext(action=Action(id="systemd.status:foo", adapter="systemd"))
        assert mock.execute(ctx).output == "running"

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("op-fail", error="Intentional failure")
        ctx = ExecutionContext(action=Action(id="op-fail", adapter="mock"))
        receipt = mock.execute(ctx)
        assert receipt.failed
        assert "Intentional failure" in receipt.error

    def test_called_ids(self):
        mock = MockAdapter()
        for i in range(3):
            mock.execute(ExecutionContext(action=Action(id=f"op-{i}", adapter="mock")))
        assert mock.called_ids == ["op-0", "op-1", "op-2"]

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("op-1")
        mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock")))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock"))).ok


# ── Registry Tests ──────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_register_and_get(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="test")
        registry.register(mock)
        assert registry.get("test") is mock
        assert "test" in registry.list_adapters()

    def test_mock_mode_default(self):
        registry = AdapterRegistry(mock_mode=True)
        receipt = registry.execute_action(Action(id="test", adapter="anything"))
        assert receipt.ok
        assert "[mock]" in receipt.output

    def test_mock_mode_with_custom_mock(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="custom-mock", default_output="custom mock result")
        registry.set_mock_mode(True, mock_adapter=mock)
        receipt = registry.execute_action(Action(id="test", adapter="doesnt-matter"))
        assert receipt.output == "custom mock result"

    def test_missing_adapter_fails(self):
        registry = AdapterRegistry()
        receipt = registry.execute_action(Action(id="test", adapter="nonexistent"))
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_dry_run_skips_mutating_actions(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="test")
        registry.register(mock)
        receipt = registry.execute_action(Action(id="write", adapter="test", mutating=True), dry_run=True)
        assert receipt.status == "skipped"
        assert "[dry-run]" in receipt.output
        assert mock.call_count == 0

    def test_dry_run_still_reads(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="test")
        registry.register(mock)
        receipt = registry.execute_action(Action(id="read", adapter="test"), dry_run=True)
        assert receipt.ok
        assert mock.call_count == 1

    def test_validation_failure(self):
        registry = AdapterRegistry()
        registry.register(FilesystemAdapter())
        receipt = registry.execute_action(Action(id="bad", adapter="filesystem", params={}))
        assert receipt.failed
        assert "Validation failed" in receipt.error

    def test_adapter_exception_becomes_failure(self):
        class Exploding(MockAdapter):
            def execute(self, context):
                raise RuntimeError("boom")

        registry = AdapterRegistry()
        registry.register(Exploding(adapter_name="boom"))
        receipt = registry.execute_action(Action(id="x", adapter="boom"))
        assert receipt.failed
        assert "boom" in receipt.error


# ── Shell Command Adapter Tests ─────────────────────────────────────


class TestShellCommandAdapter:
    def test_is_available(self):
        adapter = ShellCommandAdapter()
        assert adapter.is_available()
        assert adapter.name == "shell"

    def test_validate_missing_command(self):
        ctx = ExecutionContext(action=Action(id="test", adapter="shell", params={}))
        valid, msg = ShellCommandAdapter().validate(ctx)
        assert not valid
        assert "command" in msg

    def test_execute_argv(self):
        ctx = ExecutionContext(
            action=Action(id="echo", adapter="shell", params={"command": ["echo", "hello world"]}),
        )
        receipt = ShellCommandAdapter().execute(ctx)
        assert receipt.ok
        assert receipt.output == "hello world"
        assert receipt.metadata["return_code"] == 0

    def test_execute_with_stdin(self):
        ctx = ExecutionContext(
            action=Action(id="cat", adapter="shell", params={"command": ["cat"], "input": "from stdin"}),
        )
        receipt = ShellCommandAdapter().execute(ctx)
        assert receipt.output == "from stdin"

    def test_execute_failure_carries_stderr(self):
        ctx = ExecutionContext(
            action=Action(id="fail", adapter="shell", params={"command": "echo oops >&2; exit 3"}),
        )
        receipt = ShellCommandAdapter().execute(ctx)
        assert receipt.failed
        assert "oops" in receipt.error
        assert receipt.metadata["return_code"] == 3

    def test_missing_binary(self):
        ctx = ExecutionContext(
            action=Action(id="nope", adapter="shell", params={"command": ["definitely-not-a-real-binary-xyz"]}),
        )
        receipt = ShellCommandAdapter().execute(ctx)
        assert receipt.failed
        assert "definitely-not-a-real-binary-xyz" in receipt.error


# ── Filesystem Adapter Tests ────────────────────────────────────────


class TestFilesystemAdapter:
    def test_validate_relative_path(self, tmp_path: Path):
        valid, msg = FilesystemAdapter().validate(_fs_ctx(tmp_path, operation="exists", path="etc/x"))
        assert not valid
        assert "absolute" in msg

    def test_validate_unknown_operation(self, tmp_path: Path):
        valid, msg = FilesystemAdapter().validate(_fs_ctx(tmp_path, operation="chmod", path="/etc/x"))
        assert not valid
        assert "Unknown operation" in msg

    def test_read_is_not_an_operation(self, tmp_path: Path):
        valid, msg = FilesystemAdapter().validate(_fs_ctx(tmp_path, operation="read", path="/etc/x"))
        assert not valid
        assert "exists, matches, remove, write" in msg

    def test_validate_write_needs_content(self, tmp_path: Path):
        valid, msg = FilesystemAdapter().validate(_fs_ctx(tmp_path, operation="write", path="/etc/x"))
        assert not valid
        assert "content" in msg

    def test_write_creates_parents_and_sets_mode(self, tmp_path: Path):
        receipt = FilesystemAdapter().execute(
            _fs_ctx(tmp_path, operation="write", path="/etc/a/b/script.sh", content="#!/bin/sh\n", mode=0o755)
        )
        assert receipt.ok
        target = tmp_path / "etc" / "a" / "b" / "script.sh"
        assert target.read_text() == "#!/bin/sh\n"
        assert target.stat().st_mode & 0o777 == 0o755

    def test_write_replaces_existing(self, tmp_path: Path):
        target = tmp_path / "etc" / "x.conf"
        target.parent.mkdir(parents=True)
        target.write_text("old")
        FilesystemAdapter().execute(_fs_ctx(tmp_path, operation="write", path="/etc/x.conf", content="new"))
        assert target.read_text() == "new"
        assert [p.name for p in target.parent.iterdir()] == ["x.conf"]

    def test_matches(self, tmp_path: Path):
        (tmp_path / "etc").mkdir()
        (tmp_path / "etc" / "x.conf").write_text("a=1\n")
        receipt = FilesystemAdapter().execute(_fs_ctx(tmp_path, operation="matches", path="/etc/x.conf", content="a=1\n"))
        assert receipt.ok

    def test_matches_absent(self, tmp_path: Path):
        receipt = FilesystemAdapter().execute(_fs_ctx(tmp_path, operation="matches", path="/etc/x.conf", content="a"))
        assert receipt.failed
        assert receipt.metadata["reason"] == "absent"

    def test_matches_mismatch(self, tmp_path: Path):
        (tmp_path / "etc").mkdir()
        (tmp_path / "etc" / "x.conf").write_text("a=2\n")
        receipt = FilesystemAdapter().execute(_fs_ctx(tmp_path, operation="matches", path="/etc/x.conf", content="a=1\n"))
        assert receipt.failed
        assert receipt.metadata["reason"] == "mismatch"
        assert "x.conf" in receipt.error

    def test_remove(self, tmp_path: Path):
        (tmp_path / "etc").mkdir()
        (tmp_path / "etc" / "x.conf").write_text("a")
        receipt = FilesystemAdapter().execute(_fs_ctx(tmp_path, operation="remove", path="/etc/x.conf"))
        assert receipt.ok
        assert receipt.metadata["removed"] is True
        assert not (tmp_path / "etc" / "x.conf").exists()

    def test_remove_absent_is_ok(self, tmp_path: Path):
        receipt = FilesystemAdapter().execute(_fs_ctx(tmp_path, operation="remove", path="/etc/x.conf"))
        assert receipt.ok
        assert receipt.metadata["removed"] is False

    def test_exists(self, tmp_path: Path):
        receipt = FilesystemAdapter().execute(_fs_ctx(tmp_path, operation="exists", path="/etc/x.conf"))
        assert receipt.ok
        assert receipt.metadata["exists"] is False


# ── Lookup Adapter Tests ────────────────────────────────────────────


class TestExecutableLookupAdapter:
    def test_finds_sh(self):
        ctx = ExecutionContext(action=Action(id="l", adapter="path", params={"executable": "sh"}))
        receipt = ExecutableLookupAdapter().execute(ctx)
        assert receipt.ok
        assert receipt.output.endswith("/sh")

    def test_missing(self, tmp_path: Path):
        ctx = ExecutionContext(
            action=Action(id="l", adapter="path", params={"executable": "nmcli", "search_path": str(tmp_path)}),
        )
        receipt = ExecutableLookupAdapter().execute(ctx)
        assert receipt.failed
        assert "nmcli" in receipt.error


# ── Systemd Adapter Tests ───────────────────────────────────────────


class TestSystemdAdapter:
    def test_parse_show_output(self):
        props = parse_show_output("LoadState=loaded\nActiveState=active\nSubState=running\n")
        assert props == {"LoadState": "loaded", "ActiveState": "active", "SubState": "running"}

    def test_validate(self):
        adapter = SystemdAdapter()
        ctx = ExecutionContext(action=Action(id="s", adapter="systemd", params={"operation": "restart", "service": "x"}))
        valid, msg = adapter.validate(ctx)
        assert not valid
        ctx = ExecutionContext(action=Action(id="s", adapter="systemd", params={"operation": "status"}))
        valid, msg = adapter.validate(ctx)
        assert not valid
        assert "service" in msg


class TestServiceState:
    def test_running(self):
        assert ServiceState.from_systemd("loaded", "active") is ServiceState.RUNNING

    def test_stopped(self):
        assert ServiceState.from_systemd("loaded", "inactive") is ServiceState.STOPPED

    def test_failed(self):
        assert ServiceState.from_systemd("loaded", "failed") is ServiceState.FAILED

    def test_not_found(self):
        assert ServiceState.from_systemd("not-found", "inactive") is ServiceState.NOT_FOUND

    def test_unknown(self):
        assert ServiceState.from_systemd("loaded", "weird") is ServiceState.UNKNOWN


class TestReceipt:
    def test_factories(self):
        assert Receipt.success(adapter="a", action_id="x").ok
        assert Receipt.failure(adapter="a", action_id="x", error="e").failed
        assert Receipt.skip(adapter="a", action_id="x").status == "skipped"
