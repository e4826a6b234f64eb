# tests/test_network.py
import socket
from unittest.mock import patch

import pytest

from polaris_core.exceptions import SocketSetupError, TransportError
from polaris_core.network import TcpTransport

ADDR_INFO = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.0.0.1", 8088))]


@pytest.fixture
def mock_socket():
    with (
        patch("socket.getaddrinfo", return_value=ADDR_INFO) as gai,
        patch("socket.socket") as sock_cls,
    ):
        yield gai, sock_cls.return_value


def test_connect_uses_timeouts(valid_config, mock_socket):
    gai, sock = mock_socket
    transport = TcpTransport(valid_config)
    transport.connect()

    gai.assert_called_with("127.0.0.1", 8088, socket.AF_INET, socket.SOCK_STREAM)
    sock.settimeout.assert_called_with(valid_config.connect_timeout)
    sock.connect.assert_called_with(("10.0.0.1", 8088))
    assert transport.connected


def test_connect_dns_failure(valid_config):
    with patch("socket.getaddrinfo", side_effect=socket.gaierror("no host")):
        with pytest.raises(SocketSetupError, match="DNS"):
            TcpTransport(valid_config).connect()


def test_connect_refused_closes_socket(valid_config, mock_socket):
    _, sock = mock_socket
    sock.connect.side_effect = ConnectionRefusedError("refused")

    transport = TcpTransport(valid_config)
    with pytest.raises(SocketSetupError, match="连接失败"):
        transport.connect()
    sock.close.assert_called_once()
    assert not transport.connected


def test_connect_timeout(valid_config, mock_socket):
    _, sock = mock_socket
    sock.connect.side_effect = socket.timeout

    with pytest.raises(SocketSetupError, match="超时"):
        TcpTransport(valid_config).connect()


def test_send_uses_send_timeout(valid_config, mock_socket):
    _, sock = mock_socket
    transport = TcpTransport(valid_config)
    transport.connect()
    transport.send(b"data")

    sock.settimeout.assert_called_with(valid_config.send_timeout)
    sock.sendall.assert_called_with(b"data")


def test_send_error(valid_config, mock_socket):
    _, sock = mock_socket
    sock.sendall.side_effect = socket.error("Mock Error")
    transport = TcpTransport(valid_config)
    transport.connect()

    with pytest.raises(TransportError):
        transport.send(b"data")


def test_send_timeout(valid_config, mock_socket):
    _, sock = mock_socket
    sock.sendall.side_effect = socket.timeout
    transport = TcpTransport(valid_config)
    transport.connect()

    with pytest.raises(TransportError, match="超时"):
        transport.send(b"data")


def test_receive_timeout(valid_config, mock_socket):
    _, sock = mock_socket
    sock.recv.side_effect = socket.timeout
    transport = TcpTransport(valid_config)
    transport.connect()

    with pytest.raises(TransportError, match="超时"):
        transport.recv(1)
    sock.settimeout.assert_called_with(valid_config.read_timeout)


def test_receive_returns_partial_data(valid_config, mock_socket):
    _, sock = mock_socket
    sock.recv.return_value = b"\xd3"
    transport = TcpTransport(valid_config)
    transport.connect()

    assert transport.recv(3) == b"\xd3"


def test_operations_require_connection(valid_config):
    transport = TcpTransport(valid_config)
    with pytest.raises(TransportError, match="未建立"):
        transport.send(b"x")
    with pytest.raises(TransportError, match="未建立"):
        transport.recv(1)


def test_close_is_idempotent(valid_config, mock_socket):
    _, sock = mock_socket
    transport = TcpTransport(valid_config)
    transport.connect()
    transport.close()
    transport.close()

    sock.close.assert_called_once()
    assert not transport.connected


def test_context_manager_closes(valid_config, mock_socket):
    _, sock = mock_socket
    with TcpTransport(valid_config) as transport:
        assert transport.connected
    sock.close.assert_called_once()
