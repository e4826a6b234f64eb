# tests/test_rtcm.py
"""
测试 RTCM3 消息头部分类，重点验证消息号区间的边界。
"""

import pytest

from polaris_core.exceptions import OutOfRangeError
from polaris_core.protocols.rtcm import (
    MessageInfo,
    classify_message,
    describe_message_number,
)

PAYLOAD_BITS = 80  # 10 字节载荷


def _make_message(message_number: int, station_id: int, tow: int = 0, tow_len: int = 30) -> bytes:
    """构造 Header + 10 字节载荷 + 3 字节尾部的消息"""
    value = (message_number << (PAYLOAD_BITS - 12)) | (station_id << (PAYLOAD_BITS - 24))
    value |= tow << (PAYLOAD_BITS - 24 - tow_len)
    payload = value.to_bytes(PAYLOAD_BITS // 8, "big")
    return b"\xd3" + len(payload).to_bytes(2, "big") + payload + b"\x00\x00\x00"


def test_example_message_outside_observation_ranges():
    """D3 00 06 3B A0 ...: 消息号 0x3BA = 954，只读取 station_id"""
    raw = bytes.fromhex("d300063ba000000000aabb")
    info = classify_message(raw)
    assert info.message_number == 954
    assert info.station_id == 0
    assert info.time_of_week is None


@pytest.mark.parametrize(
    "message_number, has_tow",
    [
        (1000, False),
        (1001, True),
        (1004, True),
        (1005, False),
        (1008, False),
        (1009, True),
        (1012, True),
        (1013, False),
    ],
)
def test_branch_boundaries(message_number, has_tow):
    tow_len = 27 if 1009 <= message_number <= 1012 else 30
    raw = _make_message(message_number, 2003, tow=123456, tow_len=tow_len)
    info = classify_message(raw)

    assert info.message_number == message_number
    assert info.station_id == 2003
    if has_tow:
        assert info.time_of_week == 123456
    else:
        assert info.time_of_week is None


def test_gps_tow_uses_30_bits():
    tow = (1 << 30) - 1
    info = classify_message(_make_message(1002, 1, tow=tow, tow_len=30))
    assert info.time_of_week == tow


def test_glonass_tow_uses_27_bits():
    """GLONASS 只读 27 位，低 3 位属于后续字段"""
    tow = (1 << 27) - 1
    raw = _make_message(1010, 1, tow=(tow << 3) | 0b111, tow_len=30)
    assert classify_message(raw).time_of_week == tow


def test_station_id_max():
    info = classify_message(_make_message(1005, 4095))
    assert info.station_id == 4095


def test_message_too_short():
    """消息号 1004 需要读取 TOW，但整条消息只有 56 位"""
    with pytest.raises(OutOfRangeError):
        classify_message(b"\xd3\x00\x01\x3e\xc0\x00\x00")


def test_message_info_name():
    assert MessageInfo(1005, 0).name == "Stationary RTK Reference Station ARP"
    assert describe_message_number(4094) == "Unknown Type 4094"
