from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import tomllib
from typing import cast

import platformdirs

from dmm.cli.io import DEFAULT_SELECTOR
from dmm.cli.registry import BareRun, ConfiguredEntry, Run, ShellRun
from dmm.errors import ConfigError
from dmm.tags import DEFAULT_SEPARATOR, SYMBOL_SCHEMES

LOG = logging.getLogger(__name__)

APP_NAME = "dmm"
CONFIG_FILENAME = "config.toml"
DEFAULT_SHELL: tuple[str, ...] = ("sh", "-c")
DEFAULT_PIPED_SHELL: tuple[str, ...] = ("sh",)
DEFAULT_TAG_SCHEME = "binary"

_SELECTOR_VALUE_FLAGS: dict[str, str] = {
    "prompt": "-p",
    "font": "-fn",
    "background": "-nb",
    "foreground": "-nf",
    "selected-background": "-sb",
    "selected-foreground": "-sf",
    "lines": "-l",
    "monitor": "-m",
    "window-id": "-w",
}
_SELECTOR_SWITCH_FLAGS: dict[str, str] = {
    "bottom": "-b",
    "fast": "-f",
}
_CONFIG_KEYS = frozenset(
    {"shell", "custom", "numbered", "tags", "path", "dmenu"}
)


@dataclass(frozen=True, slots=True)
class ExecutionPolicy:
    shell: tuple[str, ...] | None = DEFAULT_SHELL
    piped: bool = False
    adhoc: bool = False

    @property
    def shell_enabled(self) -> bool:
        return self.shell is not None


@dataclass(frozen=True, slots=True)
class TagSettings:
    numbered: bool = False
    separator: str = DEFAULT_SEPARATOR
    scheme: str = DEFAULT_TAG_SCHEME


@dataclass(frozen=True, slots=True)
class PathSettings:
    enabled: bool = False
    paths: tuple[str, ...] = ()
    env: bool = False
    replace: bool = False
    recursive: bool = False
    group: int = 0


@dataclass(frozen=True, slots=True)
class SelectorSettings:
    program: str = DEFAULT_SELECTOR
    args: tuple[str, ...] = ("-i",)


@dataclass(frozen=True, slots=True)
class Config:
    entries: tuple[ConfiguredEntry, ...] = ()
    policy: ExecutionPolicy = field(default_factory=ExecutionPolicy)
    tags: TagSettings = field(default_factory=TagSettings)
    path: PathSettings = field(default_factory=PathSettings)
    selector: SelectorSettings = field(default_factory=SelectorSettings)


def default_config_path() -> Path:
    override = env_str("DMM_CONFIG")
    if override is not None:
        return Path(override).expanduser()
    return Path(platformdirs.user_config_dir(APP_NAME)) / CONFIG_FILENAME


def load_config(config_path: str | Path | None = None) -> Config:
    path = default_config_path() if config_path is None else Path(config_path)
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            f"couldn't read config file `{path}`",
            code="config_unreadable",
            context={"path": str(path)},
        ) from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(
            f"config file `{path}` is not valid UTF-8",
            code="config_encoding",
            context={"path": str(path)},
        ) from exc

    try:
        data = tomllib.loads(raw_text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"couldn't parse config file `{path}`",
            code="config_syntax",
            context={"path": str(path)},
        ) from exc

    return parse_config(data)


def parse_config(data: Mapping[str, object]) -> Config:
    for key in data:
        if key not in {"menu", "config"}:
            LOG.warning("ignoring unknown config table `%s`", key)

    menu = _expect_table(data.get("menu", {}), "menu")
    settings = _expect_table(data.get("config", {}), "config")
    for key in settings:
        if key not in _CONFIG_KEYS:
            LOG.warning("ignoring unknown setting `config.%s`", key)

    shell, piped = _parse_shell(settings.get("shell", True))
    policy = ExecutionPolicy(
        shell=shell,
        piped=piped,
        adhoc=_expect_bool(settings.get("custom", False), "config.custom"),
    )

    return Config(
        entries=tuple(_parse_entry(name, value) for name, value in menu.items()),
        policy=policy,
        tags=_parse_tags(settings.get("numbered", False), settings.get("tags")),
        path=_parse_path(settings.get("path", False)),
        selector=_parse_selector(settings.get("dmenu", {})),
    )


def _parse_entry(name: str, value: object) -> ConfiguredEntry:
    key = f"menu.{name}"
    if value is True:
        return ConfiguredEntry(name=name)
    if value is False:
        return ConfiguredEntry(name=name, is_filter=True)
    if isinstance(value, (str, list)):
        return ConfiguredEntry(name=name, run=_parse_run(value, key))
    if isinstance(value, dict):
        table = cast(dict[str, object], value)
        unknown = sorted(set(table) - {"run", "group"})
        if unknown:
            raise ConfigError(
                f"unknown keys in `{key}`: {', '.join(unknown)}",
                code="config_unknown_key",
                context={"key": key, "unknown": unknown},
            )
        run = table.get("run")
        group = table.get("group")
        return ConfiguredEntry(
            name=name,
            run=None if run is None else _parse_run(run, f"{key}.run"),
            group=None if group is None else _expect_int(group, f"{key}.group"),
        )
    raise _type_error(key, "a string, an array of strings, a boolean or a table", value)


def _parse_run(value: object, key: str) -> Run:
    if isinstance(value, str):
        return ShellRun(value)
    return BareRun(_expect_str_list(value, key))


def _parse_shell(value: object) -> tuple[tuple[str, ...] | None, bool]:
    if isinstance(value, dict):
        table = cast(dict[str, object], value)
        piped = _expect_bool(table.get("piped", False), "config.shell.piped")
        shell = table.get("shell", True)
        default = DEFAULT_PIPED_SHELL if piped else DEFAULT_SHELL
        return _parse_shell_command(shell, "config.shell.shell", default), piped
    return _parse_shell_command(value, "config.shell", DEFAULT_SHELL), False


def _parse_shell_command(
    value: object, key: str, default: tuple[str, ...]
) -> tuple[str, ...] | None:
    if value is True:
        return default
    if value is False:
        return None
    command = _expect_str_list(value, key)
    if not command:
        raise ConfigError(
            f"`{key}` must name a shell program",
            code="config_empty_shell",
            context={"key": key},
        )
    return command


def _parse_tags(numbered: object, scheme: object) -> TagSettings:
    resolved_scheme = DEFAULT_TAG_SCHEME
    if scheme is not None:
        resolved_scheme = _expect_str(scheme, "config.tags")
        if resolved_scheme not in SYMBOL_SCHEMES:
            choices = ", ".join(sorted(SYMBOL_SCHEMES))
            raise ConfigError(
                f"`config.tags` must be one of: {choices}",
                code="config_bad_value",
                context={"key": "config.tags", "value": resolved_scheme},
            )

    if isinstance(numbered, dict):
        table = cast(dict[str, object], numbered)
        enabled = _expect_bool(table.get("numbered", True), "config.numbered.numbered")
        separator = table.get("separator", True)
        if separator is True:
            resolved_separator = DEFAULT_SEPARATOR
        elif separator is False:
            resolved_separator = ""
        else:
            resolved_separator = _expect_str(separator, "config.numbered.separator")
        return TagSettings(
            numbered=enabled, separator=resolved_separator, scheme=resolved_scheme
        )

    return TagSettings(
        numbered=_expect_bool(numbered, "config.numbered"), scheme=resolved_scheme
    )


def _parse_path(value: object) -> PathSettings:
    if value is False:
        return PathSettings()
    if value is True:
        return PathSettings(enabled=True, env=True)
    if isinstance(value, list):
        return PathSettings(enabled=True, paths=_expect_str_list(value, "config.path"))
    if isinstance(value, dict):
        table = cast(dict[str, object], value)
        return PathSettings(
            enabled=True,
            paths=_expect_str_list(table.get("path", []), "config.path.path"),
            env=_expect_bool(table.get("env", False), "config.path.env"),
            replace=_expect_bool(table.get("replace", False), "config.path.replace"),
            recursive=_expect_bool(
                table.get("recursive", False), "config.path.recursive"
            ),
            group=_expect_int(table.get("group", 0), "config.path.group"),
        )
    raise _type_error("config.path", "a boolean, an array of strings or a table", value)


def _parse_selector(value: object) -> SelectorSettings:
    table = _expect_table(value, "config.dmenu")
    program = _expect_str(table.get("program", DEFAULT_SELECTOR), "config.dmenu.program")
    args: list[str] = []

    for name, flag in _SELECTOR_VALUE_FLAGS.items():
        if name not in table:
            continue
        raw = table[name]
        key = f"config.dmenu.{name}"
        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            raise _type_error(key, "a string or an integer", raw)
        args.extend([flag, str(raw)])

    for name, flag in _SELECTOR_SWITCH_FLAGS.items():
        if _expect_bool(table.get(name, False), f"config.dmenu.{name}"):
            args.append(flag)

    if not _expect_bool(table.get("case-sensitive", False), "config.dmenu.case-sensitive"):
        args.append("-i")

    args.extend(_expect_str_list(table.get("args", []), "config.dmenu.args"))
    return SelectorSettings(program=program, args=tuple(args))


def _expect_table(value: object, key: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise _type_error(key, "a table", value)
    return cast(dict[str, object], value)


def _expect_bool(value: object, key: str) -> bool:
    if not isinstance(value, bool):
        raise _type_error(key, "a boolean", value)
    return value


def _expect_int(value: object, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _type_error(key, "an integer", value)
    return value


def _expect_str(value: object, key: str) -> str:
    if not isinstance(value, str):
        raise _type_error(key, "a string", value)
    return value


def _expect_str_list(value: object, key: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise _type_error(key, "an array of strings", value)
    items = cast(list[object], value)
    if not all(isinstance(item, str) for item in items):
        raise _type_error(key, "an array of strings", value)
    return tuple(cast(list[str], items))


def _type_error(key: str, expected: str, value: object) -> ConfigError:
    return ConfigError(
        f"`{key}` must be {expected}, got {type(value).__name__}",
        code="config_bad_type",
        context={"key": key},
    )


def env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def env_bool(name: str, default: bool) -> bool:
    raw = env_str(name)
    if raw is None:
        return default

    normalized = raw.lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise ConfigError(
        f"environment variable {name} is not a valid boolean: {raw} "
        "(use 1/0 true/false yes/no on/off)",
        code="config_bad_env",
        context={"name": name},
    )
