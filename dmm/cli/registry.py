from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import logging

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BareRun:
    argv: tuple[str, ...]

    def __str__(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True, slots=True)
class ShellRun:
    command: str

    def __str__(self) -> str:
        return self.command


Run = BareRun | ShellRun


@dataclass(frozen=True, slots=True)
class Entry:
    name: str
    run: Run
    group: int = 0


@dataclass(frozen=True, slots=True)
class ConfiguredEntry:
    """A `[menu]` item as written in the config file.

    ``run`` and ``group`` are ``None`` when left out. A filter entry never
    shows up itself; it only hides discovered executables with its name.
    """

    name: str
    run: Run | None = None
    group: int | None = None
    is_filter: bool = False

    def to_entry(self, *, shell_enabled: bool) -> Entry | None:
        if self.is_filter:
            return None
        run = self.run
        if run is None:
            run = ShellRun(self.name) if shell_enabled else BareRun((self.name,))
        return Entry(name=self.name, run=run, group=self.group or 0)


@dataclass(frozen=True, slots=True)
class Executable:
    path: str
    name: str


def iter_entries(
    configured: Iterable[ConfiguredEntry],
    *,
    shell_enabled: bool,
) -> Iterator[Entry]:
    for item in configured:
        entry = item.to_entry(shell_enabled=shell_enabled)
        if entry is not None:
            yield entry


def merge_entries(
    configured: Sequence[ConfiguredEntry],
    executables: Iterable[Executable],
    *,
    shell_enabled: bool,
    replace: bool,
    default_group: int,
) -> list[Entry]:
    by_name: dict[str, ConfiguredEntry] = {item.name: item for item in configured}
    claimed: set[str] = set()
    merged: list[Entry] = []

    for executable in executables:
        item = by_name.get(executable.name)
        if item is None:
            merged.append(
                Entry(
                    name=executable.name,
                    run=BareRun((executable.path,)),
                    group=default_group,
                )
            )
            continue

        if not replace or item.is_filter or item.name in claimed:
            LOG.debug("dropping discovered %s in favour of config", executable.path)
            continue

        claimed.add(item.name)
        merged.append(
            Entry(
                name=item.name,
                run=BareRun((executable.path,)),
                group=item.group or 0,
            )
        )

    remaining = (item for item in configured if item.name not in claimed)
    merged.extend(iter_entries(remaining, shell_enabled=shell_enabled))
    return merged


def _sort_key(entry: Entry) -> tuple[int, str, str]:
    return (-entry.group, entry.name.lower(), entry.name)


def sort_entries(entries: Iterable[Entry]) -> tuple[Entry, ...]:
    return tuple(sorted(entries, key=_sort_key))
