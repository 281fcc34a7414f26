import subprocess
import sys
from unittest import mock

import pytest

from netlab.service_monitor import EXEC_FAILED, ServiceMonitor, is_running

PS_OUTPUT = (
    "UID        PID  PPID  C STIME TTY          TIME CMD\n"
    "root         1     0  0 10:00 ?        00:00:01 /sbin/init\n"
    "root       123     1  0 10:00 ?        00:00:01 /sda2/DCCU/dru -qws\n"
    "root       200   150  0 10:01 pts/0    00:00:00 grep sshd\n"
)


def _ps(stdout, code=0):
    return subprocess.CompletedProcess(["ps", "-ef"], code, stdout=stdout, stderr="")


@mock.patch("subprocess.run", return_value=_ps(PS_OUTPUT))
def test_is_running_matches_program_name(run):
    assert is_running("dru") is True


@mock.patch("subprocess.run", return_value=_ps(PS_OUTPUT))
def test_is_running_ignores_grep(run):
    assert is_running("sshd") is False


@mock.patch("subprocess.run", return_value=_ps(PS_OUTPUT))
def test_is_running_absent(run):
    assert is_running("nginx") is False


@mock.patch("subprocess.run", return_value=_ps("", code=1))
def test_is_running_ps_failure(run):
    with pytest.raises(OSError):
        is_running("dru")


def test_run_once_returns_exit_code():
    monitor = ServiceMonitor([sys.executable, "-c", "import sys; sys.exit(3)"], delay=0)
    assert monitor.run_once() == 3


def test_run_once_passes_environment():
    script = "import os, sys; sys.exit(0 if os.environ.get('MONITOR_FLAG') == 'on' else 1)"
    monitor = ServiceMonitor([sys.executable, "-c", script], {"MONITOR_FLAG": "on"}, 0)
    assert monitor.run_once() == 0


def test_run_once_missing_program():
    monitor = ServiceMonitor(["/nonexistent/program/xyz"], delay=0)
    assert monitor.run_once() == EXEC_FAILED


def test_run_restarts():
    monitor = ServiceMonitor([sys.executable, "-c", "import sys; sys.exit(2)"], delay=0)
    assert monitor.run(max_restarts=2) == [2, 2]


@mock.patch("time.sleep")
def test_countdown(sleep, capsys):
    monitor = ServiceMonitor([sys.executable, "-c", "pass"], delay=2)
    assert monitor.run_once() == 0
    assert capsys.readouterr().out.splitlines()[-2:] == ["i = 2", "i = 1"]
    assert sleep.call_count == 2


def test_empty_command_rejected():
    with pytest.raises(ValueError):
        ServiceMonitor([])