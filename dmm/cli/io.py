from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
import logging
import subprocess
from typing import IO, Any

from dmm.errors import SelectorError, SelectorNotFoundError

LOG = logging.getLogger(__name__)

PopenFunc = Callable[..., "subprocess.Popen[bytes]"]

DEFAULT_SELECTOR = "dmenu"


def run_selector(
    menu_text: str,
    *,
    program: str = DEFAULT_SELECTOR,
    args: Sequence[str] = (),
    popen: PopenFunc = subprocess.Popen,
) -> str:
    """Feed ``menu_text`` to the selector and return what it printed.

    The menu is written from a worker thread while this thread drains the
    selector's stdout, so neither pipe can fill up and stall the other.
    Blocks until the selector exits.
    """
    command = [program, *args]
    try:
        process = popen(command, stdin=subprocess.PIPE, stdout=subprocess.PIPE)
    except OSError as exc:
        raise SelectorNotFoundError(
            f"failed to run command `{program}` (is it installed?)",
            code="selector_spawn_failed",
            context={"command": command},
        ) from exc

    stdin = process.stdin
    stdout = process.stdout
    if stdin is None or stdout is None:
        raise SelectorError(
            f"failed to establish pipes to `{program}`",
            code="selector_no_pipe",
            context={"command": command},
        )

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="selector-stdin") as pool:
        writer = pool.submit(_write_menu, stdin, menu_text.encode("utf-8"))
        try:
            output = stdout.read()
        except OSError as exc:
            raise SelectorError(
                f"failed to read `{program}` output",
                code="selector_read_failed",
                context={"command": command},
            ) from exc
        finally:
            stdout.close()
            returncode = process.wait()
        # Re-raises anything the writer hit that was not a closed pipe.
        writer.result()

    LOG.debug("%s exited with status %s", program, returncode)

    try:
        return output.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SelectorError(
            f"`{program}` printed output that is not valid UTF-8",
            code="selector_bad_output",
            context={"command": command},
        ) from exc


def _write_menu(stdin: IO[Any], payload: bytes) -> None:
    try:
        try:
            stdin.write(payload)
        finally:
            stdin.close()
    except BrokenPipeError:
        LOG.debug("selector closed its input before reading the whole menu")
    except OSError as exc:
        raise SelectorError(
            "failed to write the menu to the selector",
            code="selector_write_failed",
        ) from exc
