# File: src/polaris_core/protocols/rtcm.py
"""
RTCM3 消息头部分类 (Message Classifier)

只提取日志所需的少量头部字段 (消息号、基站 ID、周内时)，
不是完整的 RTCM3 解码器。结果仅供展示，不影响会话控制流。
"""

from dataclasses import dataclass

from .. import utils
from .constants import RtcmField

# 常见 RTCM3 消息号的可读名称 (仅用于日志)
MESSAGE_NAMES = {
    1001: "GPS L1 RTK Observables",
    1002: "GPS Extended L1 RTK Observables",
    1003: "GPS L1/L2 RTK Observables",
    1004: "GPS Extended L1/L2 RTK Observables",
    1005: "Stationary RTK Reference Station ARP",
    1006: "Stationary RTK Reference Station ARP with Height",
    1007: "Antenna Descriptor",
    1008: "Antenna Descriptor & Serial Number",
    1009: "GLONASS L1 RTK Observables",
    1010: "GLONASS Extended L1 RTK Observables",
    1011: "GLONASS L1/L2 RTK Observables",
    1012: "GLONASS Extended L1/L2 RTK Observables",
    1019: "GPS Ephemeris",
    1020: "GLONASS Ephemeris",
    1033: "Receiver and Antenna Descriptors",
    1074: "GPS MSM4",
    1077: "GPS MSM7",
    1084: "GLONASS MSM4",
    1087: "GLONASS MSM7",
    1094: "Galileo MSM4",
    1097: "Galileo MSM7",
    1124: "BeiDou MSM4",
    1127: "BeiDou MSM7",
    1230: "GLONASS Code-Phase Biases",
}


@dataclass(frozen=True)
class MessageInfo:
    """消息头部摘要。

    Attributes:
        message_number: 12 位消息号。
        station_id: 12 位基站 ID。
        time_of_week: 周内时 (仅 GPS/GLONASS 观测消息有值)。
    """

    message_number: int
    station_id: int
    time_of_week: int | None = None

    @property
    def name(self) -> str:
        return describe_message_number(self.message_number)


def describe_message_number(message_number: int) -> str:
    return MESSAGE_NAMES.get(message_number, f"Unknown Type {message_number}")


def classify_message(buffer: bytes) -> MessageInfo:
    """读取消息号并按类型提取子字段。

    - 1001-1004 (GPS 观测): station_id(12) + TOW(30)
    - 1009-1012 (GLONASS 观测): station_id(12) + TOW(27)
    - 其他: 仅 station_id(12)

    Args:
        buffer: 分发给处理器的完整消息 (含 3 字节 Header)。

    Returns:
        MessageInfo: 头部摘要。

    Raises:
        OutOfRangeError: 消息过短，不足以容纳所需字段。
    """
    message_number = utils.get_bits_unsigned(
        buffer, RtcmField.MESSAGE_NUMBER_OFFSET, RtcmField.MESSAGE_NUMBER_LEN
    )
    station_id = utils.get_bits_unsigned(
        buffer, RtcmField.STATION_ID_OFFSET, RtcmField.STATION_ID_LEN
    )

    tow_len = None
    if message_number in RtcmField.GPS_OBSERVATIONS:
        tow_len = RtcmField.GPS_TOW_LEN
    elif message_number in RtcmField.GLONASS_OBSERVATIONS:
        tow_len = RtcmField.GLONASS_TOW_LEN

    time_of_week = None
    if tow_len is not None:
        time_of_week = utils.get_bits_unsigned(buffer, RtcmField.TOW_OFFSET, tow_len)

    return MessageInfo(message_number, station_id, time_of_week)
