import asyncio
import importlib.util
import socket
from pathlib import Path

import pytest

EXAMPLE = Path(__file__).resolve().parent.parent / "examples" / "port_check_multi.py"


@pytest.fixture
def port_check():
    spec = importlib.util.spec_from_file_location("port_check_multi", EXAMPLE)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def listening_port():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(8)
    yield server.getsockname()[1]
    server.close()


@pytest.fixture
def closed_port() -> int:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_bad_target_exits_with_status_one(port_check, capsys) -> None:
    assert port_check.main(["nohostport"]) == 1
    assert "Expecting host:port" in capsys.readouterr().err


def test_reports_connected_and_failed(
    port_check, listening_port, closed_port, capsys
) -> None:
    alive = f"127.0.0.1:{listening_port}"
    refused = f"127.0.0.1:{closed_port}"

    assert port_check.main(["--timeout", "2", alive, refused]) == 0

    out = capsys.readouterr().out
    assert f"Connected: {alive}" in out
    assert f"Failed: {refused}" in out
    assert "Timed out" not in out


def test_reports_timed_out_targets(
    port_check, listening_port, monkeypatch, capsys
) -> None:
    real_open_connection = asyncio.open_connection

    async def open_connection(host, port):
        if host == "192.0.2.1":
            await asyncio.Event().wait()
        return await real_open_connection(host, port)

    monkeypatch.setattr(asyncio, "open_connection", open_connection)
    alive = f"127.0.0.1:{listening_port}"

    assert port_check.main(["--timeout", "0.2", alive, "192.0.2.1:9"]) == 0

    out = capsys.readouterr().out
    assert f"Connected: {alive}" in out
    assert "Timed out: 192.0.2.1:9" in out
