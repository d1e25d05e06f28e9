from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dmm.cli.registry import BareRun, ConfiguredEntry, Entry, ShellRun
from dmm.config import Config, ExecutionPolicy, PathSettings
from dmm.discovery import discover_executables, expand_home, search_dirs
from dmm.resolver import build_entries


def _make_executable(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def _names(root: Path, *, recursive: bool) -> list[str]:
    return sorted(item.name for item in discover_executables([root], recursive=recursive))


def test_discovers_only_executable_files(tmp_path: Path) -> None:
    _make_executable(tmp_path / "tool")
    plain = tmp_path / "notes.txt"
    plain.write_text("hello", encoding="utf-8")
    plain.chmod(0o644)

    found = list(discover_executables([tmp_path], recursive=False))

    assert [(item.name, item.path) for item in found] == [
        ("tool", str(tmp_path / "tool"))
    ]


def test_subdirectories_are_walked_only_when_recursive(tmp_path: Path) -> None:
    _make_executable(tmp_path / "top")
    _make_executable(tmp_path / "a" / "b" / "deep")

    assert _names(tmp_path, recursive=False) == ["top"]
    assert _names(tmp_path, recursive=True) == ["deep", "top"]


def test_symlinked_directories_are_followed(tmp_path: Path) -> None:
    target = tmp_path / "real"
    _make_executable(target / "linked-tool")
    root = tmp_path / "root"
    root.mkdir()
    (root / "link").symlink_to(target, target_is_directory=True)

    assert _names(root, recursive=True) == ["linked-tool"]


def test_directory_cycles_terminate(tmp_path: Path) -> None:
    _make_executable(tmp_path / "tool")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "loop").symlink_to(tmp_path, target_is_directory=True)

    assert _names(tmp_path, recursive=True) == ["tool"]


def test_symlinked_executables_are_listed(tmp_path: Path) -> None:
    target = _make_executable(tmp_path / "store" / "real-tool")
    root = tmp_path / "bin"
    root.mkdir()
    (root / "alias").symlink_to(target)

    found = list(discover_executables([root], recursive=False))

    assert [(item.name, item.path) for item in found] == [
        ("alias", str(root / "alias"))
    ]


def test_broken_symlink_is_a_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _make_executable(tmp_path / "tool")
    (tmp_path / "dangling").symlink_to(tmp_path / "missing")

    with caplog.at_level(logging.WARNING, logger="dmm"):
        names = _names(tmp_path, recursive=True)

    assert names == ["tool"]
    assert any("is broken" in record.getMessage() for record in caplog.records)


@pytest.mark.skipif(sys.platform != "linux", reason="needs byte file names")
def test_non_unicode_file_name_is_skipped_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _make_executable(tmp_path / "good")
    bad = Path(os.fsdecode(os.fsencode(tmp_path) + b"/bad\xff"))
    _make_executable(bad)

    with caplog.at_level(logging.WARNING, logger="dmm"):
        names = _names(tmp_path, recursive=False)

    assert names == ["good"]
    assert any("invalid unicode" in record.getMessage() for record in caplog.records)


def test_missing_search_directory_is_skipped_silently(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _make_executable(tmp_path / "present" / "tool")

    with caplog.at_level(logging.WARNING, logger="dmm"):
        found = list(
            discover_executables(
                [tmp_path / "absent", tmp_path / "present"], recursive=True
            )
        )

    assert [item.name for item in found] == ["tool"]
    assert caplog.records == []


def test_expand_home_only_rewrites_leading_tilde_slash(tmp_path: Path) -> None:
    assert expand_home("~/bin", home=tmp_path) == tmp_path / "bin"
    assert expand_home("/usr/bin", home=tmp_path) == Path("/usr/bin")
    assert expand_home("~other/bin", home=tmp_path) == Path("~other/bin")


def test_search_dirs_appends_env_path(tmp_path: Path) -> None:
    environ = {"PATH": os.pathsep.join(["/usr/bin", "", "/bin"])}

    dirs = search_dirs(["~/bin"], use_env=True, home=tmp_path, environ=environ)
    without_env = search_dirs(["~/bin"], use_env=False, home=tmp_path, environ=environ)

    assert dirs == [tmp_path / "bin", Path("/usr/bin"), Path("/bin")]
    assert without_env == [tmp_path / "bin"]


def test_build_entries_merges_discovery_with_config(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    foo = _make_executable(bin_dir / "foo")
    _make_executable(bin_dir / "Bar")
    _make_executable(bin_dir / "hidden")
    config = Config(
        entries=(
            ConfiguredEntry(name="foo", run=ShellRun("echo foo"), group=5),
            ConfiguredEntry(name="hidden", is_filter=True),
            ConfiguredEntry(name="zed", run=BareRun(("zed", "--new"))),
        ),
        policy=ExecutionPolicy(),
        path=PathSettings(enabled=True, paths=("~/bin",), replace=True, group=-1),
    )

    entries = build_entries(config, home=tmp_path, environ={})

    assert entries == (
        Entry(name="foo", run=BareRun((str(foo),)), group=5),
        Entry(name="zed", run=BareRun(("zed", "--new")), group=0),
        Entry(name="Bar", run=BareRun((str(bin_dir / "Bar"),)), group=-1),
    )


def test_build_entries_without_discovery_uses_config_only(tmp_path: Path) -> None:
    config = Config(
        entries=(
            ConfiguredEntry(name="b"),
            ConfiguredEntry(name="a", group=1),
            ConfiguredEntry(name="gone", is_filter=True),
        ),
        policy=ExecutionPolicy(shell=None),
    )

    entries = build_entries(config, home=tmp_path, environ={})

    assert entries == (
        Entry(name="a", run=BareRun(("a",)), group=1),
        Entry(name="b", run=BareRun(("b",)), group=0),
    )


def test_directory_listed_twice_yields_one_entry_per_executable(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    tool = _make_executable(bin_dir / "tool")
    config = Config(
        policy=ExecutionPolicy(),
        path=PathSettings(enabled=True, paths=("~/bin",), env=True),
    )
    environ = {"PATH": os.pathsep.join([str(bin_dir), str(bin_dir)])}

    entries = build_entries(config, home=tmp_path, environ=environ)

    assert entries == (Entry(name="tool", run=BareRun((str(tool),)), group=0),)
