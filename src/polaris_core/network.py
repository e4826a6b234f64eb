# src/polaris_core/network.py
"""
Polaris 核心库 - 网络模块 (Network)

封装 TCP Socket 的解析、连接、发送和接收逻辑。
该模块屏蔽了底层 Socket 的复杂性，向协议层提供纯粹的 bytes 收发接口。
协议层只依赖 BaseTransport，测试时可注入内存实现。
"""

import abc
import logging
import socket

from .config import PolarisConfig
from .exceptions import SocketSetupError, TransportError

logger = logging.getLogger(__name__)


class BaseTransport(abc.ABC):
    """字节流传输层抽象基类。"""

    @abc.abstractmethod
    def connect(self) -> None:
        """建立连接。

        Raises:
            SocketSetupError: 连接建立失败。
        """
        raise NotImplementedError

    @abc.abstractmethod
    def send(self, data: bytes) -> None:
        """完整写出 data，否则抛出 TransportError。"""
        raise NotImplementedError

    @abc.abstractmethod
    def recv(self, size: int) -> bytes:
        """读取最多 size 字节。

        Returns:
            bytes: 可能少于 size；返回 b"" 表示对端已关闭连接。
        """
        raise NotImplementedError

    @abc.abstractmethod
    def close(self) -> None:
        """关闭连接。重复调用无副作用。"""
        raise NotImplementedError

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class TcpTransport(BaseTransport):
    """
    封装阻塞式 TCP Socket 的客户端。

    发送使用 send_timeout，接收使用 read_timeout (None 为无限阻塞)。
    单线程使用，每次操作前切换 socket 超时。
    """

    def __init__(self, config: PolarisConfig):
        self.config = config
        self.sock: socket.socket | None = None

    @property
    def connected(self) -> bool:
        return self.sock is not None

    def connect(self) -> None:
        """解析主机名并建立 TCP 连接。"""
        if self.sock:
            return

        host, port = self.config.host, self.config.port
        try:
            infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
        except socket.gaierror as e:
            raise SocketSetupError(f"DNS 解析失败 {host}: {e}") from e
        if not infos:
            raise SocketSetupError(f"DNS 解析无结果: {host}")

        family, sock_type, proto, _, addr = infos[0]
        try:
            sock = socket.socket(family, sock_type, proto)
        except OSError as e:
            raise SocketSetupError(f"Socket 创建失败: {e}") from e

        try:
            sock.settimeout(self.config.connect_timeout)
            sock.connect(addr)
        except socket.timeout:
            sock.close()
            raise SocketSetupError(
                f"连接超时 {host}:{port} ({self.config.connect_timeout}s)"
            ) from None
        except OSError as e:
            sock.close()
            raise SocketSetupError(f"连接失败 {host}:{port}: {e}") from e

        self.sock = sock
        logger.debug(f"TCP 连接已建立: {addr[0]}:{addr[1]}")

    def send(self, data: bytes) -> None:
        """
        发送全部数据 (sendall)。
        """
        sock = self._require_socket()
        try:
            sock.settimeout(self.config.send_timeout)
            sock.sendall(data)
        except socket.timeout:
            raise TransportError(f"发送超时 ({self.config.send_timeout}s)") from None
        except OSError as e:
            raise TransportError(f"发送失败: {e}") from e

    def recv(self, size: int) -> bytes:
        """
        接收最多 size 字节 (阻塞)。
        """
        sock = self._require_socket()
        try:
            sock.settimeout(self.config.read_timeout)
            return sock.recv(size)
        except socket.timeout:
            raise TransportError(f"接收超时 ({self.config.read_timeout}s)") from None
        except OSError as e:
            raise TransportError(f"接收错误: {e}") from e

    def close(self) -> None:
        """关闭 Socket"""
        if self.sock:
            try:
                self.sock.close()
            finally:
                self.sock = None
                logger.debug("TCP 连接已关闭")

    def _require_socket(self) -> socket.socket:
        if self.sock is None:
            raise TransportError("连接未建立")
        return self.sock
