import pytest

from netlab.rpc_cmd import UnknownCommandError, run_command
from netlab.rpc_msg import Command, RpcMessage, RqRs


@pytest.mark.parametrize("command", list(Command))
def test_known_commands_copy_request(command):
    request = RpcMessage(command, RqRs.REQUEST, b"data")
    assert run_command(request) == request


def test_handler_announces_command(capsys):
    run_command(RpcMessage(Command.ATTACH_SERVER, RqRs.REQUEST))
    assert capsys.readouterr().out.strip() == "attach_server"


@pytest.mark.parametrize("cmd", [0x07, 0x0E, 0x7F])
def test_unknown_command_raises(cmd):
    with pytest.raises(UnknownCommandError) as info:
        run_command(RpcMessage(cmd, RqRs.REQUEST))
    assert info.value.cmd == cmd