# File: src/polaris_core/protocols/frames.py
"""
Polaris 握手帧构建器 (Frame Builders)

负责将 Python 数据结构转换为 UBX 风格的二进制帧 (bytes)。
本模块是无状态的 (Stateless)，不持有任何配置或会话信息。

帧结构::

    +---------+---------+---------+------------------+----------+
    | Marker  |  Type   | Length  |     Payload      | Checksum |
    | B5 62   | 2 bytes | 2 bytes |  variable length |  2 bytes |
    +---------+---------+---------+------------------+----------+

- Length: Payload 长度，16 位小端序
- Checksum: UBX 累加校验 (ck_a, ck_b)，覆盖 Type + Length + Payload
"""

import logging
import struct
from dataclasses import dataclass

from .. import utils
from .constants import FrameCode, FrameConst, LocationConst

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    """解析后的握手帧。"""

    frame_type: bytes
    payload: bytes

    def __repr__(self) -> str:
        return (
            f"Frame(type={self.frame_type.hex(' ')}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


# =========================================================================
# 通用帧
# =========================================================================


def build_frame(frame_type: bytes, payload: bytes = b"") -> bytes:
    """构建一个完整的握手帧。

    注意: 早期实现只写入长度的低 8 位 (第二个长度字节恒为 0)，
    Payload >= 256 字节时长度会被截断。这里写入完整的 16 位小端长度，
    256 字节以下的输出与旧实现逐字节一致。

    Args:
        frame_type: 2 字节类型码 (如 FrameCode.AUTHENTICATION)。
        payload: 帧载荷。

    Returns:
        bytes: Marker + Type + Length + Payload + Checksum。

    Raises:
        ValueError: 类型码不是 2 字节，或 Payload 超过 65535 字节。
    """
    if len(frame_type) != FrameConst.TYPE_LEN:
        raise ValueError(f"帧类型码必须为 2 字节: {frame_type!r}")
    if len(payload) > FrameConst.MAX_PAYLOAD_LEN:
        raise ValueError(f"帧载荷过长: {len(payload)} bytes")

    pkt = bytearray()
    pkt.extend(FrameConst.MARKER)
    pkt.extend(frame_type)
    pkt.extend(struct.pack("<H", len(payload)))
    pkt.extend(payload)

    ck_a, ck_b = utils.checksum_ubx(pkt, FrameConst.CHECKSUM_START)
    pkt.append(ck_a)
    pkt.append(ck_b)

    logger.debug(
        "build_frame: type=%s payload_len=%d", frame_type.hex(), len(payload)
    )
    return bytes(pkt)


def parse_frame(data: bytes) -> Frame | None:
    """解析一个握手帧 (build_frame 的逆操作)。

    Args:
        data: 完整的帧字节流。

    Returns:
        Frame | None: Marker、长度或校验和任一不合法时返回 None。
    """
    if len(data) < FrameConst.HEADER_LEN + FrameConst.CHECKSUM_LEN:
        return None
    if data[:2] != FrameConst.MARKER:
        return None

    payload_len = struct.unpack("<H", data[4:6])[0]
    end = FrameConst.HEADER_LEN + payload_len
    if len(data) != end + FrameConst.CHECKSUM_LEN:
        return None

    if not utils.verify_ubx_checksum(
        data, FrameConst.CHECKSUM_START, end, data[end:]
    ):
        return None

    return Frame(frame_type=bytes(data[2:4]), payload=bytes(data[6:end]))


# =========================================================================
# 认证帧 (0xE0 0x01)
# =========================================================================


def build_auth_frame(station_token: str) -> bytes:
    """构建认证帧，载荷为 Token 的原始字节。"""
    return build_frame(FrameCode.AUTHENTICATION, station_token.encode("utf-8"))


# =========================================================================
# 位置帧 (0xE0 0x04)
# =========================================================================


def to_fixed_point(value: float) -> int:
    """将度 (或米) 转换为 1e7 缩放的 int32 定点数。

    Raises:
        ValueError: 结果超出 int32 范围。
    """
    fixed = round(value * LocationConst.SCALE)
    if not LocationConst.INT32_MIN <= fixed <= LocationConst.INT32_MAX:
        raise ValueError(f"定点数超出 int32 范围: {value}")
    return fixed


def encode_location_payload(
    latitude_deg: float, longitude_deg: float, altitude_m: float = 0.0
) -> bytes:
    """编码位置载荷: 3 个小端 int32 (lat, lon, alt) * 1e7。

    Returns:
        bytes: 12 字节载荷。
    """
    return struct.pack(
        LocationConst.PAYLOAD_FORMAT,
        to_fixed_point(latitude_deg),
        to_fixed_point(longitude_deg),
        to_fixed_point(altitude_m),
    )


def build_location_frame(
    latitude_deg: float, longitude_deg: float, altitude_m: float = 0.0
) -> bytes:
    """构建位置帧。位置只在握手时发送一次，会话期间不再更新。"""
    payload = encode_location_payload(latitude_deg, longitude_deg, altitude_m)
    return build_frame(FrameCode.LOCATION_LLA, payload)
