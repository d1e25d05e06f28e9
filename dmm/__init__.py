from .cli import (
    BareRun,
    ConfiguredEntry,
    Entry,
    Run,
    Selection,
    ShellRun,
    render_menu,
    resolve_selection,
    run_selector,
)
from .config import Config, ExecutionPolicy, load_config, parse_config
from .dispatch import DispatchReport, dispatch
from .errors import (
    ConfigError,
    DiscoveryError,
    LauncherError,
    SelectorError,
    SelectorNotFoundError,
)
from .resolver import build_entries
from .tags import DecimalTag, SymbolTag, TagCodec, build_codec

__version__ = "0.1.0"

__all__ = [
    "BareRun",
    "ShellRun",
    "Run",
    "Entry",
    "ConfiguredEntry",
    "Selection",
    "render_menu",
    "resolve_selection",
    "run_selector",
    "Config",
    "ExecutionPolicy",
    "load_config",
    "parse_config",
    "DispatchReport",
    "dispatch",
    "LauncherError",
    "ConfigError",
    "DiscoveryError",
    "SelectorError",
    "SelectorNotFoundError",
    "build_entries",
    "TagCodec",
    "DecimalTag",
    "SymbolTag",
    "build_codec",
]
