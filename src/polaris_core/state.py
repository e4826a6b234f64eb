# File: src/polaris_core/state.py
"""
Polaris 核心库 - 状态模块

负责定义和存储会话期间的易变状态。
本模块不包含业务逻辑，仅作为数据容器供 Session 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto


class SessionStatus(Enum):
    """会话的生命周期状态枚举。

    状态流转示意:
    IDLE -> CONNECTING -> HANDSHAKING -> STREAMING -> STOPPED
               |              |             |
               v              v             v
             FAILED         FAILED        FAILED
    """

    IDLE = auto()
    """初始状态，会话已实例化但未执行任何操作。"""

    CONNECTING = auto()
    """正在解析主机名并建立 TCP 连接。"""

    HANDSHAKING = auto()
    """正在发送请求行、认证帧与位置帧。"""

    STREAMING = auto()
    """握手完成，正在持续读取 RTCM3 消息。"""

    STOPPED = auto()
    """消息处理器请求停止，会话正常结束。"""

    FAILED = auto()
    """发生了错误，会话已中止。不会自动重连。"""


@dataclass
class SessionState:
    """存储一次会话的易变状态数据。

    该对象是非持久化的，每个 PolarisSession 持有一份。

    Attributes:
        status: 当前会话状态。
        messages_received: 已分发的消息数。
        bytes_received: 握手后累计接收的字节数。
        bytes_sent: 握手阶段发送的字节数。
        last_error: 最近一次发生的错误信息描述。
    """

    status: SessionStatus = SessionStatus.IDLE
    messages_received: int = 0
    bytes_received: int = 0
    bytes_sent: int = 0
    last_error: str = ""

    @property
    def is_finished(self) -> bool:
        return self.status in (SessionStatus.STOPPED, SessionStatus.FAILED)
