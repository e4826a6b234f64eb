# File: src/polaris_core/protocols/handshake.py
"""
Polaris 握手流程 (Handshake)

会话开始时按固定顺序发送三段数据:
1. HTTP 风格的文本请求行 (GET /<station_id>)。
2. 认证帧 (0xE0 0x01)，载荷为 Station Token。
3. 位置帧 (0xE0 0x04)，载荷为定点数经纬度。

任一段发送失败都会立即终止握手 (Fail Fast)。
"""

import logging
from typing import TYPE_CHECKING

from ..exceptions import TransportError
from . import frames
from .constants import RequestConst

if TYPE_CHECKING:
    from ..config import PolarisConfig
    from ..network import BaseTransport

logger = logging.getLogger(__name__)


def build_request(station_id: str) -> bytes:
    """构建文本请求行。

    Args:
        station_id: 基站 ID，直接拼接在路径中。

    Returns:
        bytes: 完整的请求文本。

    Raises:
        ValueError: station_id 为空，或含空白、控制字符。
    """
    if not station_id or any(c.isspace() or not c.isprintable() for c in station_id):
        raise ValueError(f"基站 ID 无法放入请求行: {station_id!r}")
    return RequestConst.TEMPLATE.format(station_id=station_id).encode(
        RequestConst.ENCODING
    )


def build_handshake(
    config: "PolarisConfig", send_altitude: bool = False
) -> list[tuple[str, bytes]]:
    """按发送顺序构建握手所需的全部数据段。

    Args:
        config: 会话配置。
        send_altitude: 是否编码配置中的海拔。默认 False，海拔固定为 0。

    Returns:
        list[tuple[str, bytes]]: (段名, 数据) 列表，顺序即发送顺序。
    """
    altitude = config.altitude_m if send_altitude else 0.0
    return [
        ("request", build_request(config.station_id)),
        ("auth", frames.build_auth_frame(config.station_token)),
        (
            "location",
            frames.build_location_frame(
                config.latitude_deg, config.longitude_deg, altitude
            ),
        ),
    ]


def perform_handshake(
    transport: "BaseTransport",
    config: "PolarisConfig",
    send_altitude: bool = False,
) -> int:
    """在已连接的传输层上执行握手。

    Args:
        transport: 已连接的传输层。
        config: 会话配置。
        send_altitude: 见 build_handshake。

    Returns:
        int: 发送的总字节数。

    Raises:
        TransportError: 任一段未能完整写出。
    """
    total = 0
    for name, data in build_handshake(config, send_altitude):
        try:
            transport.send(data)
        except TransportError as e:
            logger.error(f"握手发送失败 [{name}]: {e}")
            raise TransportError(f"握手发送失败 [{name}]: {e}") from e
        logger.debug("handshake: sent %s (%d bytes)", name, len(data))
        total += len(data)

    logger.info(f"握手完成: station={config.station_id}, {total} bytes")
    return total
