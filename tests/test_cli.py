# tests/test_cli.py

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from pathlib import Path

import pytest

from cadence.cli.bootstrap import build_engine
from cadence.cli.main import main
from cadence.config import Settings, get_settings
from cadence.fs.local import LocalFileSystem
from cadence.tasks.task_models import NewTask

from .fakes import FixedClock, RecordingFileSystem


@pytest.fixture()
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """
    Point the CLI at a throwaway vault and log dir.

    main() installs its own root handlers; they are removed again afterwards.
    """
    vault = tmp_path / "vault"
    vault.mkdir()
    monkeypatch.setenv("CADENCE_DATA_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("CADENCE_VAULT_PATH", str(vault))
    monkeypatch.setenv("CADENCE_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()

    root = logging.getLogger()
    saved = list(root.handlers)
    saved_level = root.level
    yield vault
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in saved:
            h.close()
    for h in saved:
        root.addHandler(h)
    root.setLevel(saved_level)
    logging.captureWarnings(False)
    get_settings.cache_clear()


def _daily(vault: Path, d: date) -> Path:
    return vault / "Journal" / f"{d.year:04d}" / "Daily" / f"{d.month:02d}" / f"{d.day:02d}.md"


def test_init_add_toggle_list(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    vault = cli_env
    today = date.today().isoformat()

    assert main(["init"]) == 0
    assert (vault / ".cadence" / "config.json").exists()
    assert main(["init"]) == 1
    assert "config_validation" in capsys.readouterr().err

    rc = main(["add", "Write tests", "--note", "inbox.md", "--due", "2099-02-01", "--priority", "high", "--tag", "dev"])
    assert rc == 0
    line = f"- [ ] Write tests due:2099-02-01 priority:high created:{today} #dev"
    assert (vault / "inbox.md").read_text("utf-8") == f"## Tasks\n{line}\n"

    assert main(["toggle", "inbox.md", "2"]) == 0
    assert capsys.readouterr().out.strip().endswith(line.replace("[ ]", "[x]"))

    assert main(["toggle", "inbox.md", "2"]) == 0
    capsys.readouterr()

    assert main(["add", "Daily thing"]) == 0
    capsys.readouterr()
    assert main(["list", "--view", "open"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "open (1)"
    assert "Daily thing" in out
    # inbox.md is not a daily note, so it is not scanned.
    assert "Write tests" not in out


def test_rollover_command(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    vault = cli_env
    yesterday = date.today() - timedelta(days=1)
    assert main(["init"]) == 0

    note = _daily(vault, yesterday)
    note.parent.mkdir(parents=True, exist_ok=True)
    note.write_text("## Tasks\n- [ ] carry me\n", "utf-8")
    capsys.readouterr()

    assert main(["rollover"]) == 0
    assert "Rolled over 1 task(s)" in capsys.readouterr().out
    assert "carry me age:1" in _daily(vault, date.today()).read_text("utf-8")

    assert main(["rollover"]) == 0
    assert "skipped: carry me" in capsys.readouterr().out


def test_errors_map_to_exit_codes(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["list"]) == 1
    assert "config_not_found" in capsys.readouterr().err

    assert main(["init"]) == 0
    assert main(["toggle", "missing.md", "1"]) == 1
    assert "not_found" in capsys.readouterr().err

    assert main(["add", "x", "--due", "someday"]) == 2
    assert "Unable to parse date" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_build_engine_wires_injected_fs(tmp_path: Path) -> None:
    settings = Settings(
        app_name="cadence",
        log_level="INFO",
        data_dir=tmp_path,
        vault_path=Path("/vault"),
        days_back=7,
    )
    fs = RecordingFileSystem()
    state = build_engine(settings=settings, fs=fs, today_provider=FixedClock(date(2024, 1, 15)))

    assert state.vault_path == "/vault"
    await state.config_loader.generate_default_config_file(state.vault_path)
    await state.modifier.add_task("/vault/n.md", "## Tasks", NewTask(text="x"))
    assert await fs.read_file("/vault/n.md") == "## Tasks\n- [ ] x created:2024-01-15\n"
    assert (await state.aggregator.aggregate(state.vault_path)).open == []


def test_build_engine_defaults_to_local_fs(tmp_path: Path) -> None:
    settings = Settings("cadence", "INFO", tmp_path, tmp_path, 7)
    state = build_engine(settings=settings)
    assert isinstance(state.fs, LocalFileSystem)
    assert asyncio.run(state.fs.exists(str(tmp_path)))
