from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import logging
import subprocess

from dmm.cli.io import PopenFunc
from dmm.cli.registry import BareRun, Run, ShellRun
from dmm.config import ExecutionPolicy
from dmm.errors import LauncherError

LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchReport:
    launched: list[Run] = field(default_factory=list)
    failed: list[Run] = field(default_factory=list)
    blocked: list[Run] = field(default_factory=list)


def dispatch(
    runs: Iterable[Run],
    policy: ExecutionPolicy,
    *,
    popen: PopenFunc = subprocess.Popen,
) -> DispatchReport:
    """Start every run without waiting on any of them.

    A run that cannot be started is reported and skipped.
    """
    report = DispatchReport()
    for run in runs:
        if isinstance(run, BareRun):
            _dispatch_bare(run, report, popen)
        else:
            _dispatch_shell(run, policy, report, popen)
    return report


def _dispatch_bare(run: BareRun, report: DispatchReport, popen: PopenFunc) -> None:
    if not run.argv:
        return
    try:
        popen(list(run.argv))
    except (OSError, ValueError) as exc:
        report.failed.append(run)
        LOG.warning("couldn't run bare command `%s`", run, exc_info=exc)
        return
    report.launched.append(run)


def _dispatch_shell(
    run: ShellRun,
    policy: ExecutionPolicy,
    report: DispatchReport,
    popen: PopenFunc,
) -> None:
    if not run.command:
        return

    if policy.shell is None:
        report.blocked.append(run)
        LOG.warning(
            "can't execute shell command `%s`",
            run,
            exc_info=LauncherError(
                "shell execution is disabled; to enable, set `config.shell = true`",
                code="shell_disabled",
            ),
        )
        return

    shell = list(policy.shell)
    try:
        if policy.piped:
            _spawn_piped(shell, run.command, popen)
        else:
            popen([*shell, run.command])
    except (OSError, ValueError) as exc:
        report.failed.append(run)
        LOG.warning("problem running shell command `%s`", run, exc_info=exc)
        return
    report.launched.append(run)


def _spawn_piped(shell: list[str], command: str, popen: PopenFunc) -> None:
    process = popen(shell, stdin=subprocess.PIPE)
    stdin = process.stdin
    if stdin is None:
        raise OSError(f"failed to establish pipe to shell `{shell[0]}`")
    try:
        stdin.write(command.encode("utf-8"))
    finally:
        stdin.close()
