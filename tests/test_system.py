import logging
import sys

import pytest

from winharden.registry import MemoryRegistry
from winharden.system import CommandError, Host, run_command


def test_run_command_returns_output():
    out = run_command(sys.executable, "-c", "print('ok')")
    assert out.strip() == "ok"


def test_run_command_combines_stderr():
    out = run_command(sys.executable, "-c", "import sys; sys.stderr.write('err-text')")
    assert "err-text" in out


def test_run_command_nonzero_exit():
    with pytest.raises(CommandError) as info:
        run_command(sys.executable, "-c", "print('partial'); raise SystemExit(3)")
    assert info.value.returncode == 3
    assert "partial" in info.value.output


def test_run_command_missing_program():
    with pytest.raises(CommandError) as info:
        run_command("this-program-does-not-exist-anywhere")
    assert info.value.returncode is None
    assert info.value.program == "this-program-does-not-exist-anywhere"


def test_host_run_uses_runner():
    host = Host(registry=MemoryRegistry(), runner=lambda *a: "|".join(a))
    assert host.run("PowerShell.exe", "-noprofile", "-Command", "x") == (
        "PowerShell.exe|-noprofile|-Command|x"
    )


def test_host_run_propagates_errors():
    def failing(program, *args):
        raise CommandError(program, args, "boom", 1)

    host = Host(registry=MemoryRegistry(), runner=failing)
    with pytest.raises(CommandError) as info:
        host.run("cmd.exe", "/C")
    assert info.value.output == "boom"


def test_host_notify_with_notifier():
    seen = []
    host = Host(registry=MemoryRegistry(), notifier=seen.append)
    host.notify("Recall has not been disabled!")
    assert seen == ["Recall has not been disabled!"]


def test_host_notify_logs_by_default(caplog):
    host = Host(registry=MemoryRegistry())
    with caplog.at_level(logging.INFO):
        host.notify("hello")
    assert "Information: hello" in caplog.text