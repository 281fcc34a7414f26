"""Keep a service running: restart it whenever it exits."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import subprocess
import sys
import time
from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ["/sda2/DCCU/dru", "-qws", "-display", "VNC:LinuxFb"]
DEFAULT_ENV = {
    "QTDIR": "/usr/local/QTE4.8.5",
    "LD_LIBRARY_PATH": "/usr/local/QTE4.8.5/lib",
    "QWS_DISPLAY": "LinuxFb:/dev/fb0",
}
DEFAULT_DELAY = 5
EXEC_FAILED = 21

_PS_COMMAND_FIELD = 7


def is_running(service: str) -> bool:
    """Return True if a process whose program name is ``service`` is running."""
    result = subprocess.run(["ps", "-ef"], capture_output=True, text=True)
    if result.returncode != 0:
        raise OSError(f"ps failed with code {result.returncode}")
    for line in result.stdout.splitlines():
        if service not in line:
            continue
        fields = line.split()
        if len(fields) <= _PS_COMMAND_FIELD:
            continue
        program = os.path.basename(fields[_PS_COMMAND_FIELD])
        if program == "grep":
            continue
        if program == service:
            return True
    return False


class ServiceMonitor:
    """Start a command, wait for it to exit, pause, and start it again."""

    def __init__(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        delay: int = DEFAULT_DELAY,
    ) -> None:
        if not command:
            raise ValueError("a command to run is required")
        self.command = list(command)
        self.env = dict(env or {})
        self.delay = delay

    def run_once(self) -> int:
        """Run the command to completion, then count down; return its exit code."""
        environment = {**os.environ, **self.env}
        try:
            process = subprocess.Popen(self.command, env=environment)
        except OSError as exc:
            logger.error("cannot start %s: %s", self.command[0], exc)
            code = EXEC_FAILED
        else:
            logger.info("Child Process (PID=%d) start ...", process.pid)
            code = process.wait()
            logger.info(
                "Child process (PID=%d) exit with code=%d", process.pid, code
            )
        for remaining in range(self.delay, 0, -1):
            print(f"i = {remaining}")
            time.sleep(1)
        return code

    def run(self, max_restarts: int | None = None) -> list[int]:
        """Keep running the command; return the exit codes seen."""
        codes: list[int] = []
        while max_restarts is None or len(codes) < max_restarts:
            codes.append(self.run_once())
        return codes


def _ignore_signal(signum: int, frame: object) -> None:
    logger.info("Received %s signal, ignored...", signal.Signals(signum).name)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Restart a service whenever it exits.")
    parser.add_argument("command", nargs="*", default=DEFAULT_COMMAND)
    parser.add_argument("--delay", type=int, default=DEFAULT_DELAY)
    parser.add_argument("--max-restarts", type=int, default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(name)s[%(process)d]: %(message)s"
    )
    for name in ("SIGINT", "SIGTERM", "SIGQUIT"):
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _ignore_signal)

    logger.info("%s started ...", sys.argv[0])
    ServiceMonitor(args.command, DEFAULT_ENV, args.delay).run(args.max_restarts)
    return 0