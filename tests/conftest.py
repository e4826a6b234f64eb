# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from polaris_core.config import PolarisConfig
from polaris_core.exceptions import TransportError
from polaris_core.network import BaseTransport


class FakeTransport(BaseTransport):
    """内存传输层：预置入站字节，记录出站数据。

    chunk_size 用于模拟单次 recv 只返回部分数据的情况。
    fail_on_send 为第 N 次 send (从 0 开始) 抛出 TransportError。
    """

    def __init__(
        self,
        incoming: bytes = b"",
        chunk_size: int | None = None,
        fail_on_send: int | None = None,
    ) -> None:
        self.incoming = bytearray(incoming)
        self.chunk_size = chunk_size
        self.fail_on_send = fail_on_send
        self.sent: list[bytes] = []
        self.connect_calls = 0
        self.close_calls = 0
        self.bytes_consumed = 0

    def connect(self) -> None:
        self.connect_calls += 1

    def send(self, data: bytes) -> None:
        if self.fail_on_send is not None and len(self.sent) == self.fail_on_send:
            raise TransportError("mock send failure")
        self.sent.append(bytes(data))

    def recv(self, size: int) -> bytes:
        n = min(size, self.chunk_size or size)
        chunk = bytes(self.incoming[:n])
        del self.incoming[:n]
        self.bytes_consumed += len(chunk)
        return chunk

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def valid_config():
    """
    [Fixture] 返回一个最小可用的 PolarisConfig 对象。
    """
    return PolarisConfig(
        station_id="TEST01",
        station_token="secret",
        latitude_deg=37.39,
        longitude_deg=-122.15,
        host="127.0.0.1",
        port=8088,
        read_timeout=5.0,
    )


@pytest.fixture
def fake_transport():
    """[Fixture] 返回 FakeTransport 类本身，便于按用例构造。"""
    return FakeTransport


def make_message(payload: bytes, trailer: bytes = b"\x00\x00\x00") -> bytes:
    """构造一条入站消息: D3 + 16 位长度 + payload + trailer。"""
    return b"\xd3" + len(payload).to_bytes(2, "big") + payload + trailer


@pytest.fixture
def message_factory():
    return make_message
