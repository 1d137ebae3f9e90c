from __future__ import annotations

from pathlib import Path

import pytest
import typer

from bts.cli.context import CLIContext, build_context
from bts.core.config import Config
from bts.core.errors import ErrorCode
from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import CleanupWarning, CloneError, InvalidSyncType, SyncError
from bts.core.sync_type import SyncType
from bts.output.console import MockConsole
from bts.services.sync import SyncOptions, SyncReport


def _install(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    outcome: Result[SyncReport, SyncError],
) -> tuple[MockConsole, dict[str, object]]:
    import bts.cli.commands.sync as sync_cmd

    console = MockConsole()
    seen: dict[str, object] = {}

    def fake_build_context(config_path: Path | None = None) -> CLIContext:
        seen["config_path"] = config_path
        return CLIContext(root=tmp_path, config=Config(), console=console)

    class FakeService:
        def __init__(self, **kwargs: object) -> None:
            seen["ask"] = kwargs["ask"]
            seen["root"] = kwargs["root"]

        def run(self, options: SyncOptions) -> Result[SyncReport, SyncError]:
            seen["options"] = options
            return outcome

    monkeypatch.setattr(sync_cmd, "build_context", fake_build_context)
    monkeypatch.setattr(sync_cmd, "SyncService", FakeService)
    return console, seen


def _call(**overrides: object) -> None:
    import bts.cli.commands.sync as sync_cmd

    args: dict[str, object] = {
        "sync_type": None,
        "schema_repo": None,
        "guidewire_repo": None,
        "schema_hash": None,
        "guidewire_hash": None,
        "config": None,
        "no_input": True,
        "version": False,
    }
    args.update(overrides)
    sync_cmd.sync(**args)  # type: ignore[arg-type]


def test_sync_passes_flags_to_service(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    report = SyncReport(sync_type=SyncType.backend, artifacts=(tmp_path / "a", tmp_path / "b"))
    console, seen = _install(monkeypatch, tmp_path, Ok(report))

    _call(sync_type=SyncType.backend, schema_hash="v2", guidewire_repo="file:///gw.git")

    assert seen["options"] == SyncOptions(
        sync_type="backend",
        schema_hash="v2",
        guidewire_repo="file:///gw.git",
    )
    assert seen["root"] == tmp_path
    assert console.find("backend sync complete (2 artifacts)")


def test_no_input_never_prompts(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from bts.cli.questions import no_answer

    _, seen = _install(monkeypatch, tmp_path, Ok(SyncReport(sync_type=SyncType.frontend)))

    _call(no_input=True)

    assert seen["ask"] is no_answer


def test_cleanup_leftovers_are_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    leftover = tmp_path / "schema-repo"
    report = SyncReport(
        sync_type=SyncType.frontend,
        warnings=(CleanupWarning(path=leftover, reason="busy"),),
    )
    console, _ = _install(monkeypatch, tmp_path, Ok(report))

    _call()

    assert console.find(f"left behind: {leftover}")


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (InvalidSyncType(value="mobile", allowed=("frontend", "backend")), ErrorCode.USER_ERROR),
        (CloneError(nickname="schema", url="file:///x.git", reason="denied"), ErrorCode.NETWORK_ERROR),
    ],
)
def test_failure_exit_codes(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    error: SyncError,
    code: ErrorCode,
) -> None:
    console, _ = _install(monkeypatch, tmp_path, Err(error))

    with pytest.raises(typer.Exit) as exc:
        _call()

    assert exc.value.exit_code == int(code)
    assert console.has_error()
    assert console.find(error.message)


def test_version_callback(capsys: pytest.CaptureFixture[str]) -> None:
    import bts.cli.commands.sync as sync_cmd
    from bts import __version__

    with pytest.raises(typer.Exit) as exc:
        sync_cmd._version_callback(True)

    assert exc.value.exit_code == 0
    assert capsys.readouterr().out.strip() == __version__


def test_version_callback_noop_when_unset() -> None:
    import bts.cli.commands.sync as sync_cmd

    sync_cmd._version_callback(False)


class TestBuildContext:
    def test_missing_default_config_uses_defaults(self, tmp_path: Path) -> None:
        ctx = build_context(root=tmp_path)

        assert ctx.root == tmp_path.resolve()
        assert ctx.config == Config()

    def test_reads_project_config(self, tmp_path: Path) -> None:
        (tmp_path / "bts.toml").write_text('default_sync_type = "backend"\n', encoding="utf-8")

        ctx = build_context(root=tmp_path)

        assert ctx.config.default_sync_type == SyncType.backend

    def test_explicit_config_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(typer.Exit) as exc:
            build_context(tmp_path / "missing.toml", root=tmp_path)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)

    def test_invalid_config_is_a_user_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "bts.toml").write_text('colour = "blue"\n', encoding="utf-8")

        with pytest.raises(typer.Exit) as exc:
            build_context(root=tmp_path)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert "error:" in capsys.readouterr().err
