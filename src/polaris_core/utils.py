# File: src/polaris_core/utils.py
"""
Polaris 核心库 - 通用算法工具箱

本模块汇集了握手帧构建与 RTCM3 消息解析共用的位运算与校验算法。
所有函数均为纯函数，无副作用。
"""

from .exceptions import OutOfRangeError

MAX_FIELD_BITS = 32


def get_bits_unsigned(buffer: bytes, bit_offset: int, bit_length: int) -> int:
    """从任意比特偏移处读取一个无符号整数 (MSB first)。

    算法逻辑 (源自 RTKLIB getbitu):
    1. 从 bit_offset 遍历到 bit_offset + bit_length - 1。
    2. 第 i 位取自 buffer[i // 8] 的第 (7 - i % 8) 位。
    3. 每取一位，结果左移一位后或入该位。

    Args:
        buffer: 原始字节流，视作连续的比特序列。
        bit_offset: 起始比特位置。
        bit_length: 读取的比特数 (0-32)。

    Returns:
        int: 无符号整数结果 (0 <= result < 2**bit_length)。

    Raises:
        OutOfRangeError: bit_length 超过 32，或读取范围超出缓冲区。
    """
    if bit_offset < 0 or bit_length < 0:
        raise OutOfRangeError(
            f"位域参数不能为负: offset={bit_offset}, length={bit_length}"
        )
    if bit_length > MAX_FIELD_BITS:
        raise OutOfRangeError(f"位域长度超过 {MAX_FIELD_BITS} 位: {bit_length}")
    if bit_offset + bit_length > len(buffer) * 8:
        raise OutOfRangeError(
            f"位域越界: offset={bit_offset}, length={bit_length}, "
            f"buffer={len(buffer)} bytes"
        )

    bits = 0
    for i in range(bit_offset, bit_offset + bit_length):
        bits = (bits << 1) | ((buffer[i // 8] >> (7 - i % 8)) & 1)
    return bits


def checksum_ubx(buffer: bytes, start: int = 0, end: int | None = None) -> tuple[int, int]:
    """计算 UBX 风格的 2 字节累加校验和 (Fletcher-8)。

    算法逻辑:
    对 buffer[start:end] 中每个字节:
        ck_a = (ck_a + byte) & 0xFF
        ck_b = (ck_b + ck_a) & 0xFF

    注意: 这不是 CRC，对某些错误模式不敏感，更不具备密码学强度。

    Args:
        buffer: 输入数据。
        start: 起始下标 (含)。
        end: 结束下标 (不含)，默认为缓冲区末尾。

    Returns:
        tuple[int, int]: (ck_a, ck_b)。空区间返回 (0, 0)。
    """
    if end is None:
        end = len(buffer)

    ck_a = 0
    ck_b = 0
    for i in range(start, end):
        ck_a = (ck_a + buffer[i]) & 0xFF
        ck_b = (ck_b + ck_a) & 0xFF
    return ck_a, ck_b


def verify_ubx_checksum(
    buffer: bytes, start: int, end: int, expected: bytes
) -> bool:
    """校验 buffer[start:end] 的 UBX 校验和是否等于 expected (ck_a, ck_b)。"""
    if len(expected) != 2:
        return False
    return checksum_ubx(buffer, start, end) == (expected[0], expected[1])


def crc24q(data: bytes) -> int:
    """计算 RTCM3 使用的 CRC-24Q (Qualcomm) 校验值。

    仅用于接收端的严格校验模式，默认流程不会调用。

    Args:
        data: 待校验的数据 (Header + Payload，不含尾部 3 字节)。

    Returns:
        int: 24 位 CRC 值。
    """
    crc = 0
    for byte in data:
        crc ^= byte << 16
        for _ in range(8):
            crc <<= 1
            if crc & 0x1000000:
                crc ^= 0x1864CFB
    return crc & 0xFFFFFF
