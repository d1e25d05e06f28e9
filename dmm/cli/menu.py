from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging

from dmm.cli.registry import Entry, Run, ShellRun
from dmm.errors import LauncherError
from dmm.tags import TagCodec

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Selection:
    runs: tuple[Run, ...]
    rejected: tuple[str, ...] = ()


def build_menu_lines(entries: Sequence[Entry], codec: TagCodec) -> tuple[str, ...]:
    return tuple(codec.render(index, entry.name) for index, entry in enumerate(entries))


def render_menu(entries: Sequence[Entry], codec: TagCodec) -> str:
    return "".join(f"{line}\n" for line in build_menu_lines(entries, codec))


def select_entry(
    raw_choice: str,
    entries: Sequence[Entry],
    codec: TagCodec,
) -> Entry | None:
    index = codec.decode(raw_choice)
    if index is None:
        return None
    if index >= len(entries):
        raise LauncherError(
            "mismatch between entry tag and entry index",
            code="tag_index_mismatch",
            context={"index": index, "entries": len(entries)},
        )
    return entries[index]


def resolve_selection(
    raw_output: str,
    entries: Sequence[Entry],
    codec: TagCodec,
    *,
    adhoc: bool,
) -> Selection:
    runs: list[Run] = []
    rejected: list[str] = []

    for choice in raw_output.split("\n"):
        if not choice.strip():
            continue

        entry = select_entry(choice, entries, codec)
        if entry is not None:
            runs.append(entry.run)
        elif adhoc:
            runs.append(ShellRun(choice))
        else:
            rejected.append(choice)
            LOG.warning(
                "can't run `%s`",
                choice,
                exc_info=LauncherError(
                    "ad-hoc commands are disabled; "
                    "consider setting `config.custom = true`",
                    code="adhoc_disabled",
                ),
            )

    return Selection(runs=tuple(runs), rejected=tuple(rejected))
