from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path

from dmm.cli.registry import Entry, iter_entries, merge_entries, sort_entries
from dmm.config import Config
from dmm.discovery import discover_executables, search_dirs

LOG = logging.getLogger(__name__)


def build_entries(
    config: Config,
    *,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> tuple[Entry, ...]:
    """Return the menu entries in display order.

    The position of an entry in the returned tuple is the index its tag
    encodes, so the tuple must not change until the selection is resolved.
    """
    shell_enabled = config.policy.shell_enabled
    settings = config.path

    if not settings.enabled:
        entries = list(iter_entries(config.entries, shell_enabled=shell_enabled))
    else:
        roots = search_dirs(
            settings.paths, use_env=settings.env, home=home, environ=environ
        )
        LOG.debug("searching %d directories for executables", len(roots))
        entries = merge_entries(
            config.entries,
            discover_executables(roots, recursive=settings.recursive),
            shell_enabled=shell_enabled,
            replace=settings.replace,
            default_group=settings.group,
        )

    return sort_entries(entries)
