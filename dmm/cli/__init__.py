from .io import run_selector
from .menu import (
    Selection,
    build_menu_lines,
    render_menu,
    resolve_selection,
    select_entry,
)
from .registry import (
    BareRun,
    ConfiguredEntry,
    Entry,
    Executable,
    Run,
    ShellRun,
    iter_entries,
    merge_entries,
    sort_entries,
)

__all__ = [
    "BareRun",
    "ShellRun",
    "Run",
    "Entry",
    "ConfiguredEntry",
    "Executable",
    "iter_entries",
    "merge_entries",
    "sort_entries",
    "Selection",
    "build_menu_lines",
    "render_menu",
    "select_entry",
    "resolve_selection",
    "run_selector",
]
