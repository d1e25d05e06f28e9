from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
import logging
import os
from pathlib import Path
import stat

from dmm.cli.registry import Executable
from dmm.errors import DiscoveryError

LOG = logging.getLogger(__name__)

HOME_PREFIX = "~/"


def expand_home(raw_path: str, home: Path | None = None) -> Path:
    if raw_path.startswith(HOME_PREFIX):
        base = Path.home() if home is None else home
        return base / raw_path[len(HOME_PREFIX) :]
    return Path(raw_path)


def search_dirs(
    paths: Sequence[str],
    *,
    use_env: bool,
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    dirs = [expand_home(raw_path, home) for raw_path in paths]
    if use_env:
        env = os.environ if environ is None else environ
        raw_env_path = env.get("PATH", "")
        dirs.extend(Path(item) for item in raw_env_path.split(os.pathsep) if item)
    return dirs


def discover_executables(
    roots: Iterable[Path],
    *,
    recursive: bool,
) -> Iterator[Executable]:
    # Shared across roots so a directory listed twice is walked once.
    seen: set[tuple[int, int]] = set()
    for root in roots:
        yield from _walk_root(root, seen, recursive=recursive)


def _walk_root(
    root: Path,
    seen: set[tuple[int, int]],
    *,
    recursive: bool,
) -> Iterator[Executable]:
    pending: list[Path] = [root]

    while pending:
        directory = pending.pop()
        try:
            info = os.stat(directory)
            scanner = os.scandir(directory)
        except OSError as exc:
            LOG.debug("skipping unreadable directory %s: %s", directory, exc)
            continue

        with scanner:
            # Symlinked directories can loop back on themselves.
            key = (info.st_dev, info.st_ino)
            if key in seen:
                continue
            seen.add(key)
            try:
                items = list(scanner)
            except OSError as exc:
                raise DiscoveryError(
                    f"error trying to walk search directory `{directory}`",
                    code="walk_failed",
                    context={"path": str(directory)},
                ) from exc

        subdirs, executables = _scan_items(items)
        if recursive:
            pending.extend(subdirs)
        yield from executables


def _scan_items(
    items: Sequence[os.DirEntry[str]],
) -> tuple[list[Path], list[Executable]]:
    subdirs: list[Path] = []
    executables: list[Executable] = []

    for item in items:
        try:
            if item.is_dir():
                subdirs.append(Path(item.path))
                continue
            if item.is_symlink():
                try:
                    os.stat(item.path)
                except FileNotFoundError as exc:
                    LOG.warning("symlink `%s` is broken", item.path, exc_info=exc)
                    continue
            if not _is_executable(item):
                continue
        except OSError as exc:
            LOG.warning("error reading file metadata for `%s`", item.path, exc_info=exc)
            continue

        try:
            item.path.encode("utf-8")
        except UnicodeEncodeError as exc:
            LOG.warning(
                "the path `%s` contained invalid unicode",
                item.path.encode("utf-8", "replace").decode("utf-8"),
                exc_info=exc,
            )
            continue

        executables.append(Executable(path=os.path.abspath(item.path), name=item.name))

    return subdirs, executables


def _is_executable(item: os.DirEntry[str]) -> bool:
    if not item.is_file():
        return False
    mode = item.stat().st_mode
    return stat.S_ISREG(mode) and bool(mode & 0o111)
