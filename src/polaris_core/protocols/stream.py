# File: src/polaris_core/protocols/stream.py
"""
Polaris RTCM3 数据流读取器 (Stream Reader)

从已完成握手的连接中逐条读取长度前缀的 RTCM3 消息。

状态流转示意:
AWAITING_MARKER -> READING_LENGTH -> READING_BODY -> DISPATCH -> AWAITING_MARKER
       |                 |                |             |
       v                 v                v             v
     FAILED            FAILED           FAILED    FAILED / STOPPED

- 不做重同步扫描：Marker 丢失即终止会话。
- 长度字段来自不可信的对端，超过上限直接拒绝，不分配内存。
- 单次 recv 可能只返回部分数据，读取会循环直到凑满或对端关闭。
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from .. import utils
from ..exceptions import (
    ChecksumMismatch,
    ProtocolViolation,
    ResourceLimitExceeded,
    TransportError,
)
from .constants import MessageConst

if TYPE_CHECKING:
    from ..network import BaseTransport

logger = logging.getLogger(__name__)


class ReaderState(Enum):
    """读取器状态机的状态。"""

    AWAITING_MARKER = auto()
    READING_LENGTH = auto()
    READING_BODY = auto()
    DISPATCH = auto()
    STOPPED = auto()
    """处理器请求停止 (终态)。"""
    FAILED = auto()
    """读取或协议错误 (终态)。"""


@dataclass(frozen=True)
class RtcmMessage:
    """一条完整的入站消息: Header(3) + Payload(N) + Trailer(3)。"""

    raw: bytes

    @property
    def header(self) -> bytes:
        return self.raw[: MessageConst.HEADER_LEN]

    @property
    def length(self) -> int:
        return utils.get_bits_unsigned(
            self.raw, MessageConst.LENGTH_BIT_OFFSET, MessageConst.LENGTH_BIT_LEN
        )

    @property
    def payload(self) -> bytes:
        return self.raw[MessageConst.HEADER_LEN : -MessageConst.TRAILER_LEN]

    @property
    def trailer(self) -> bytes:
        return self.raw[-MessageConst.TRAILER_LEN :]

    @property
    def checksum(self) -> int:
        return int.from_bytes(self.trailer, "big")

    def compute_checksum(self) -> int:
        """对 Header + Payload 计算 CRC-24Q。"""
        return utils.crc24q(self.raw[: -MessageConst.TRAILER_LEN])

    def __len__(self) -> int:
        return len(self.raw)

    def __repr__(self) -> str:
        return f"RtcmMessage(length={self.length}, size={len(self.raw)})"


# 返回 True 表示请求停止读取
MessageHandler = Callable[[RtcmMessage], bool | None]


class StreamReader:
    """RTCM3 消息流的状态机读取器。

    Usage::

        reader = StreamReader(transport)
        reader.run(on_message)
    """

    def __init__(
        self,
        transport: "BaseTransport",
        max_payload_size: int = MessageConst.MAX_PAYLOAD_SIZE,
        verify_checksum: bool = False,
    ) -> None:
        """初始化读取器。

        Args:
            transport: 已连接的传输层。
            max_payload_size: 长度字段上限 (不含)。
            verify_checksum: 严格模式。默认 False，与服务端既有行为一致，
                不校验尾部 CRC 直接分发。
        """
        self.transport = transport
        self.max_payload_size = max_payload_size
        self.verify_checksum = verify_checksum

        self.state = ReaderState.AWAITING_MARKER
        self.messages_read = 0
        self.bytes_read = 0
        self.last_error: Exception | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (ReaderState.STOPPED, ReaderState.FAILED)

    def read_message(self) -> RtcmMessage:
        """读取下一条完整消息 (AWAITING_MARKER -> DISPATCH)。

        Returns:
            RtcmMessage: 组装好的消息，此时状态为 DISPATCH。

        Raises:
            TransportError: 读取不完整 (对端关闭或超时)。
            ProtocolViolation: Marker 错误或长度为 0。
            ResourceLimitExceeded: 长度字段超过上限。
            ChecksumMismatch: 严格模式下校验失败。
        """
        if self.is_terminal:
            raise RuntimeError(f"读取器已处于终态: {self.state.name}")

        try:
            return self._read_message()
        except Exception as e:
            self._fail(e)
            raise

    def run(self, handler: MessageHandler | None = None) -> None:
        """循环读取并分发消息，直到处理器请求停止或发生错误。

        处理器抛出的异常不会被吞没，会以 FAILED 状态向上传播。

        Args:
            handler: 消息处理器，返回 True 表示停止。
        """
        for message in self:
            try:
                stop = handler(message) if handler else False
            except Exception as e:
                self.state = ReaderState.FAILED
                self.last_error = e
                logger.error(f"消息处理器异常: {e}")
                raise

            if stop:
                self.state = ReaderState.STOPPED
                logger.info(f"处理器请求停止，共读取 {self.messages_read} 条消息")
                return

    def __iter__(self) -> Iterator[RtcmMessage]:
        """逐条产出消息。

        调用方提前结束迭代 (break 或 close()) 等同于请求停止，状态置为 STOPPED。
        """
        while not self.is_terminal:
            message = self.read_message()
            try:
                yield message
            except GeneratorExit:
                if not self.is_terminal:
                    self.state = ReaderState.STOPPED
                raise
            if self.state == ReaderState.DISPATCH:
                self.state = ReaderState.AWAITING_MARKER

    # =========================================================================
    # 内部实现
    # =========================================================================

    def _read_message(self) -> RtcmMessage:
        # --- 1. Marker ---
        self.state = ReaderState.AWAITING_MARKER
        marker = self._read_exact(MessageConst.MARKER_LEN)
        marker_val = utils.get_bits_unsigned(marker, 0, 8)
        if marker_val != MessageConst.MARKER:
            raise ProtocolViolation(f"Marker 无效: 0x{marker_val:02X}")

        # --- 2. Length ---
        self.state = ReaderState.READING_LENGTH
        header = marker + self._read_exact(MessageConst.LENGTH_LEN)
        length = utils.get_bits_unsigned(
            header, MessageConst.LENGTH_BIT_OFFSET, MessageConst.LENGTH_BIT_LEN
        )
        if length == 0:
            raise ProtocolViolation("长度字段为 0")
        if length >= self.max_payload_size:
            raise ResourceLimitExceeded(length, self.max_payload_size)

        # --- 3. Body ---
        self.state = ReaderState.READING_BODY
        body = self._read_exact(length + MessageConst.TRAILER_LEN)

        # --- 4. Dispatch ---
        self.state = ReaderState.DISPATCH
        message = RtcmMessage(raw=header + body)

        if self.verify_checksum:
            actual = message.compute_checksum()
            if actual != message.checksum:
                raise ChecksumMismatch(expected=message.checksum, actual=actual)

        self.messages_read += 1
        logger.debug(
            "stream: message #%d length=%d", self.messages_read, message.length
        )
        return message

    def _read_exact(self, size: int) -> bytes:
        """阻塞读取恰好 size 字节，单次 recv 的部分返回会被拼接。

        Raises:
            TransportError: 对端在凑满之前关闭连接。
        """
        buf = bytearray()
        while len(buf) < size:
            chunk = self.transport.recv(size - len(buf))
            if not chunk:
                raise TransportError(
                    f"连接已关闭，读取不完整 ({self.state.name}): "
                    f"{len(buf)}/{size} bytes"
                )
            buf.extend(chunk)
            self.bytes_read += len(chunk)
        return bytes(buf)

    def _fail(self, error: Exception) -> None:
        self.state = ReaderState.FAILED
        self.last_error = error
        logger.error(f"数据流读取失败: {error}")
