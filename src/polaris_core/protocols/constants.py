# src/polaris_core/protocols/constants.py
"""
Polaris 协议层 - 常量定义

本模块定义了握手帧与 RTCM3 数据流相关的魔法数字、偏移量和固定值。
采用命名空间 (Class Namespace) 组织，不使用扁平全局变量。
"""

# =========================================================================
# 1. 握手帧 (UBX 风格 Frame)
# =========================================================================


class FrameCode:
    """握手帧的 2 字节类型码"""

    AUTHENTICATION = b"\xe0\x01"
    LOCATION_LLA = b"\xe0\x04"


class FrameConst:
    MARKER = b"\xb5\x62"
    TYPE_LEN = 2
    LENGTH_LEN = 2
    CHECKSUM_LEN = 2

    # 校验和覆盖范围从 Marker 之后开始 (Type + Length + Payload)
    CHECKSUM_START = 2
    HEADER_LEN = 6  # Marker(2) + Type(2) + Length(2)
    MAX_PAYLOAD_LEN = 0xFFFF


class LocationConst:
    """定点数编码参数 (deg * 1e7 -> int32 little-endian)"""

    SCALE = 10_000_000
    PAYLOAD_FORMAT = "<iii"
    INT32_MIN = -(2**31)
    INT32_MAX = 2**31 - 1


# =========================================================================
# 2. HTTP 风格请求行
# =========================================================================


class RequestConst:
    # 与服务端实测行为保持一致：请求行后紧跟空行，然后才是头部
    TEMPLATE = (
        "GET /{station_id} HTTP/1.0\r\n"
        "\r\n"
        "User-Agent: NTRIP\r\n"
        "Content-Type: text/event-stream\r\n"
        "Connection: keep-alive\r\n"
        "\r\n"
    )
    ENCODING = "utf-8"


# =========================================================================
# 3. RTCM3 入站消息
# =========================================================================


class MessageConst:
    MARKER = 0xD3
    MARKER_LEN = 1
    LENGTH_LEN = 2
    HEADER_LEN = 3  # Marker(1) + Length(2)
    TRAILER_LEN = 3  # CRC-24Q

    # 长度字段位于 Header 的 bit 8-23 (big-endian)
    LENGTH_BIT_OFFSET = 8
    LENGTH_BIT_LEN = 16

    # 仅用于限制不可信长度字段导致的内存分配
    MAX_PAYLOAD_SIZE = 200 * 1024


class RtcmField:
    """RTCM3 消息头部字段位置 (相对于整条消息，已跳过 3 字节 Header)"""

    MESSAGE_NUMBER_OFFSET = 24
    MESSAGE_NUMBER_LEN = 12
    STATION_ID_OFFSET = 36
    STATION_ID_LEN = 12
    TOW_OFFSET = 48
    GPS_TOW_LEN = 30
    GLONASS_TOW_LEN = 27

    GPS_OBSERVATIONS = range(1001, 1005)
    GLONASS_OBSERVATIONS = range(1009, 1013)


# =========================================================================
# 4. 网络默认值
# =========================================================================


class NetConst:
    DEFAULT_HOST = "polaris.pointonenav.com"
    DEFAULT_PORT = 8088
    SEND_TIMEOUT = 10.0
    CONNECT_TIMEOUT = 10.0

    DEFAULT_LATITUDE = 37.39
    DEFAULT_LONGITUDE = -122.15
