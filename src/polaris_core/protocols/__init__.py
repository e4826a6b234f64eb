# src/polaris_core/protocols/__init__.py
"""
Polaris 协议层 (Protocol Layer)

本包负责握手帧的构建 (Build) 与 RTCM3 数据流的读取与解析 (Parse)。

- 不包含任何 socket 创建逻辑，传输层以 BaseTransport 形式注入。
- 不依赖于 core 层。
"""

from . import constants
from .frames import (
    Frame,
    build_auth_frame,
    build_frame,
    build_location_frame,
    encode_location_payload,
    parse_frame,
)
from .handshake import build_handshake, build_request, perform_handshake
from .rtcm import MessageInfo, classify_message, describe_message_number
from .stream import MessageHandler, ReaderState, RtcmMessage, StreamReader

# 公共 API
__all__ = [
    "constants",
    "Frame",
    "build_frame",
    "parse_frame",
    "build_auth_frame",
    "build_location_frame",
    "encode_location_payload",
    "build_request",
    "build_handshake",
    "perform_handshake",
    "StreamReader",
    "ReaderState",
    "RtcmMessage",
    "MessageHandler",
    "MessageInfo",
    "classify_message",
    "describe_message_number",
]
