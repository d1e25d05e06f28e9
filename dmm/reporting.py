from __future__ import annotations

from collections.abc import Iterator
import logging

from rich.console import Console
from rich.text import Text

from dmm.errors import LauncherError

LOG = logging.getLogger("dmm")

_LEVEL_STYLES: dict[int, tuple[str, str]] = {
    logging.DEBUG: ("debug:", "dim"),
    logging.INFO: ("info:", "bold blue"),
    logging.WARNING: ("warning:", "bold yellow"),
    logging.ERROR: ("error:", "bold red"),
    logging.CRITICAL: ("error:", "bold red"),
}


def iter_error_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


def _printable(message: str) -> str:
    # Undecodable file names arrive as lone surrogates.
    return message.encode("utf-8", "backslashreplace").decode("utf-8")


class ReportHandler(logging.Handler):
    """Writes records as ``warning: message`` followed by ``  - cause`` lines."""

    def __init__(self, console: Console | None = None, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.console = console if console is not None else Console(stderr=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.console.print(self.render(record), soft_wrap=True)
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def render(self, record: logging.LogRecord) -> Text:
        prefix, style = _LEVEL_STYLES.get(record.levelno, ("error:", "bold red"))
        text = Text()
        text.append(prefix, style=style)
        text.append(" ")
        text.append(_printable(record.getMessage()))

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            for cause in iter_error_chain(exc):
                text.append("\n")
                text.append("  - ", style=style)
                text.append(_printable(_describe(cause)))
        if record.levelno >= logging.WARNING:
            text.append("\n")
        return text


def _describe(exc: BaseException) -> str:
    message = str(exc)
    return message if message else type(exc).__name__


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    LOG.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if any(isinstance(handler, ReportHandler) for handler in LOG.handlers):
        return
    LOG.addHandler(ReportHandler(console))


def report_fatal(exc: BaseException) -> None:
    chain = list(iter_error_chain(exc))
    head, causes = chain[0], chain[1:]
    LOG.error(
        "%s",
        _describe(head),
        exc_info=causes[0] if causes else None,
    )
    if isinstance(head, LauncherError):
        LOG.debug("error details: %s", head.as_metadata())
