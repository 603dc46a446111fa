from pathlib import Path

import pytest

from beancount_staging import ConfigError
from beancount_staging.config import find_and_load, find_config, load_config


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_files_config_resolves_relative_paths(tmp_path: Path):
    cfg_path = _write(
        tmp_path / "beancount-staging.toml",
        '[journal]\nfiles = ["main.beancount", "/abs/other.beancount"]\n\n'
        '[staging]\nfiles = ["import.beancount"]\n',
    )

    base, cfg = load_config(cfg_path)
    reconcile = cfg.to_reconcile_config(base)

    assert base == tmp_path
    assert reconcile.journal_paths == (tmp_path / "main.beancount", Path("/abs/other.beancount"))
    assert reconcile.commit_target == tmp_path / "main.beancount"
    assert reconcile.staging.files == (tmp_path / "import.beancount",)


def test_load_command_config_runs_in_config_dir(tmp_path: Path):
    cfg_path = _write(
        tmp_path / "beancount-staging.toml",
        '[journal]\nfiles = ["main.beancount"]\n\n'
        '[staging]\ncommand = ["bean-extract", "importers.py", "downloads/"]\n',
    )

    base, cfg = load_config(cfg_path)
    source = cfg.to_reconcile_config(base).staging

    assert source.command == ("bean-extract", "importers.py", "downloads/")
    assert source.cwd == tmp_path
    assert source.files == ()


@pytest.mark.parametrize(
    "text",
    [
        '[journal]\nfiles = ["a"]\n[staging]\nfiles = ["b"]\ncommand = ["c"]\n',
        '[journal]\nfiles = ["a"]\n[staging]\n',
        '[journal]\nfiles = []\n[staging]\nfiles = ["b"]\n',
        '[journal]\nfiles = ["a"]\n[staging]\nfiles = ["b"]\nfoo = 1\n',
        '[staging]\nfiles = ["b"]\n',
        "[journal\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str):
    cfg_path = _write(tmp_path / "beancount-staging.toml", text)
    with pytest.raises(ConfigError):
        load_config(cfg_path)


def test_unreadable_config_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.toml")


def test_find_config_prefers_visible_name(tmp_path: Path):
    assert find_config(tmp_path) is None
    assert find_and_load(tmp_path) is None

    hidden = _write(
        tmp_path / ".beancount-staging.toml",
        '[journal]\nfiles = ["a"]\n[staging]\nfiles = ["b"]\n',
    )
    assert find_config(tmp_path) == hidden

    visible = _write(
        tmp_path / "beancount-staging.toml",
        '[journal]\nfiles = ["x"]\n[staging]\nfiles = ["y"]\n',
    )
    assert find_config(tmp_path) == visible

    loaded = find_and_load(tmp_path)
    assert loaded is not None
    assert loaded[1].journal.files == [Path("x")]
