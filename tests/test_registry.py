from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dmm.cli.registry import (
    BareRun,
    ConfiguredEntry,
    Entry,
    Executable,
    ShellRun,
    iter_entries,
    merge_entries,
    sort_entries,
)


def _merge(
    configured: list[ConfiguredEntry],
    executables: list[Executable],
    *,
    replace: bool,
    default_group: int = 0,
) -> list[Entry]:
    return merge_entries(
        configured,
        executables,
        shell_enabled=True,
        replace=replace,
        default_group=default_group,
    )


def test_replace_takes_discovered_path_and_keeps_configured_group() -> None:
    configured = [ConfiguredEntry(name="foo", run=ShellRun("echo foo"), group=5)]
    executables = [Executable(path="/opt/bin/foo", name="foo")]

    merged = _merge(configured, executables, replace=True)

    assert merged == [Entry(name="foo", run=BareRun(("/opt/bin/foo",)), group=5)]


def test_without_replace_configured_entry_wins_and_duplicate_is_dropped() -> None:
    configured = [ConfiguredEntry(name="foo", run=ShellRun("echo foo"), group=5)]
    executables = [Executable(path="/opt/bin/foo", name="foo")]

    merged = _merge(configured, executables, replace=False)

    assert merged == [Entry(name="foo", run=ShellRun("echo foo"), group=5)]


def test_replace_uses_first_discovered_executable_only() -> None:
    configured = [ConfiguredEntry(name="foo", group=2)]
    executables = [
        Executable(path="/first/foo", name="foo"),
        Executable(path="/second/foo", name="foo"),
    ]

    merged = _merge(configured, executables, replace=True)

    assert merged == [Entry(name="foo", run=BareRun(("/first/foo",)), group=2)]


def test_unconfigured_executables_get_default_group() -> None:
    executables = [
        Executable(path="/usr/bin/vim", name="vim"),
        Executable(path="/usr/local/bin/vim", name="vim"),
    ]

    merged = _merge([], executables, replace=True, default_group=-10)

    assert merged == [
        Entry(name="vim", run=BareRun(("/usr/bin/vim",)), group=-10),
        Entry(name="vim", run=BareRun(("/usr/local/bin/vim",)), group=-10),
    ]


def test_filter_entries_hide_discovered_executables() -> None:
    configured = [ConfiguredEntry(name="[", is_filter=True)]
    executables = [
        Executable(path="/usr/bin/[", name="["),
        Executable(path="/usr/bin/ls", name="ls"),
    ]

    for replace in (True, False):
        merged = _merge(configured, executables, replace=replace)
        assert [entry.name for entry in merged] == ["ls"]


def test_configured_entry_without_run_uses_its_name() -> None:
    configured = [ConfiguredEntry(name="firefox")]

    with_shell = list(iter_entries(configured, shell_enabled=True))
    without_shell = list(iter_entries(configured, shell_enabled=False))

    assert with_shell == [Entry(name="firefox", run=ShellRun("firefox"))]
    assert without_shell == [Entry(name="firefox", run=BareRun(("firefox",)))]


def test_iter_entries_skips_filters() -> None:
    configured = [
        ConfiguredEntry(name="hidden", is_filter=True),
        ConfiguredEntry(name="shown", run=BareRun(("echo",)), group=3),
    ]

    assert list(iter_entries(configured, shell_enabled=True)) == [
        Entry(name="shown", run=BareRun(("echo",)), group=3)
    ]


def test_sort_orders_by_group_then_folded_name_then_exact_name() -> None:
    entries = [
        Entry(name="b", run=ShellRun("b"), group=0),
        Entry(name="A", run=ShellRun("A"), group=0),
        Entry(name="a", run=ShellRun("a"), group=1),
    ]

    ordered = sort_entries(entries)

    assert [(entry.name, entry.group) for entry in ordered] == [
        ("a", 1),
        ("A", 0),
        ("b", 0),
    ]


def test_sort_breaks_case_insensitive_ties_deterministically() -> None:
    entries = [
        Entry(name="foo", run=ShellRun("x")),
        Entry(name="Foo", run=ShellRun("y")),
        Entry(name="FOO", run=ShellRun("z")),
    ]

    assert [entry.name for entry in sort_entries(entries)] == ["FOO", "Foo", "foo"]
    assert sort_entries(entries) == sort_entries(reversed(entries))


def test_run_string_forms() -> None:
    assert str(BareRun(("echo", "Hello, world!"))) == "echo Hello, world!"
    assert str(ShellRun("ls -la | wc -l")) == "ls -la | wc -l"
