# File: src/polaris_core/core.py
"""
Polaris 核心引擎 (Core Engine)

职责：
1. 资源组装：State + Transport + Config。
2. 生命周期：Connect -> Handshake -> Stream -> Stop。
3. 结果归一：首个错误终止会话，对外只呈现一个布尔结果。
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from .config import PolarisConfig, create_config_from_dict
from .exceptions import PolarisError
from .network import BaseTransport, TcpTransport
from .protocols.handshake import perform_handshake
from .protocols.stream import MessageHandler, RtcmMessage, StreamReader
from .state import SessionState, SessionStatus

logger = logging.getLogger(__name__)

# 定义回调函数类型别名
StatusCallback = Callable[[SessionStatus, str], Any]


class PolarisSession:
    """一次 Polaris 改正数会话 (同步、单连接、不重连)。"""

    def __init__(
        self,
        config: PolarisConfig,
        on_message: MessageHandler | None = None,
        transport: BaseTransport | None = None,
        send_altitude: bool = False,
    ) -> None:
        """初始化会话。

        Args:
            config: 会话配置。
            on_message: 消息处理器，返回 True 表示停止读取。
            transport: 自定义传输层。默认使用 TcpTransport。
            send_altitude: 是否在位置帧中编码配置的海拔 (默认固定为 0)。
        """
        self.config = config
        self.on_message = on_message
        self.transport = transport or TcpTransport(config)
        self.send_altitude = send_altitude

        self._state = SessionState()
        self._listeners: list[StatusCallback] = []
        self.reader: StreamReader | None = None

    @property
    def state(self) -> SessionState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    def add_listener(self, callback: StatusCallback) -> None:
        """注册状态变更监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: StatusCallback) -> None:
        """移除状态变更监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def run(self, raise_errors: bool = False) -> bool:
        """执行完整会话，阻塞直到停止或失败。

        无论以何种方式结束，连接都只会被关闭一次。

        Args:
            raise_errors: 为 True 时向上抛出首个 PolarisError，而不是返回 False。

        Returns:
            bool: 处理器请求停止返回 True；任何错误返回 False。

        Raises:
            PolarisError: 仅当 raise_errors=True。
            Exception: 消息处理器自身抛出的异常总是向上传播。
        """
        if self._state.is_finished:
            raise RuntimeError(f"会话只能运行一次 (已结束: {self._state.status.name})")
        if self._state.status != SessionStatus.IDLE:
            raise RuntimeError(f"会话正在运行: {self._state.status.name}")

        try:
            self._run()
        except PolarisError as e:
            self._state.last_error = str(e)
            self._update_status(SessionStatus.FAILED, f"会话中止: {e}")
            if raise_errors:
                raise
            return False
        except Exception as e:
            self._state.last_error = str(e)
            self._update_status(SessionStatus.FAILED, f"消息处理器异常: {e}")
            raise

        self._update_status(SessionStatus.STOPPED, "会话已停止")
        return True

    def _run(self) -> None:
        self._update_status(
            SessionStatus.CONNECTING,
            f"正在连接 {self.config.host}:{self.config.port}",
        )
        with self.transport:
            self._update_status(SessionStatus.HANDSHAKING, "正在握手...")
            self._state.bytes_sent = perform_handshake(
                self.transport, self.config, self.send_altitude
            )

            self.reader = StreamReader(
                self.transport,
                max_payload_size=self.config.max_payload_size,
                verify_checksum=self.config.verify_checksum,
            )
            self._update_status(SessionStatus.STREAMING, "开始接收数据流")
            try:
                self.reader.run(self._dispatch)
            finally:
                self._state.bytes_received = self.reader.bytes_read

    def _dispatch(self, message: RtcmMessage) -> bool | None:
        self._state.messages_received += 1
        if self.on_message is None:
            return None
        return self.on_message(message)

    def _update_status(self, status: SessionStatus, msg: str) -> None:
        """更新内部状态并同步触发所有回调。"""
        self._state.status = status
        if status == SessionStatus.FAILED:
            logger.error(f"[{status.name}] {msg}")
        else:
            logger.info(f"[{status.name}] {msg}")

        for callback in self._listeners:
            try:
                callback(status, msg)
            except Exception as e:
                logger.error(f"回调执行异常: {e}")


def connect(
    station_id: str,
    station_token: str,
    latitude_deg: float,
    longitude_deg: float,
    on_message: MessageHandler | None = None,
    **overrides: Any,
) -> bool:
    """便捷入口：构建配置并运行一次会话。

    Args:
        station_id: 基站 ID。
        station_token: 认证 Token。
        latitude_deg: 纬度 (度)。
        longitude_deg: 经度 (度)。
        on_message: 消息处理器，返回 True 表示停止。
        **overrides: 其他 PolarisConfig 字段 (如 host、read_timeout)。

    Returns:
        bool: 会话是否以处理器请求停止的方式正常结束。

    Raises:
        ConfigError: 参数校验失败。
    """
    config = create_config_from_dict(
        {
            "station_id": station_id,
            "station_token": station_token,
            "latitude_deg": latitude_deg,
            "longitude_deg": longitude_deg,
            **overrides,
        }
    )
    return PolarisSession(config, on_message).run()
