# File: src/polaris_core/exceptions.py
"""
Polaris 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI）能进行精细的错误处理。
会话层遵循 Fail Fast 原则：任何一个异常都会立即终止读取循环并关闭连接。
"""


class PolarisError(Exception):
    """Polaris 核心库的所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 polaris-core 抛出的已知错误。
    """

    pass


class ConfigError(PolarisError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 station_id/station_token)。
    2. 字段格式错误 (如经纬度越界、端口非数字)。
    3. 找不到配置文件或环境变量。
    """

    pass


class OutOfRangeError(PolarisError, ValueError):
    """位域读取越界。

    当调用方请求的 (bit_offset, bit_length) 超出缓冲区范围，
    或 bit_length 超过 32 位时抛出。属于调用方契约错误。
    """

    pass


class NetworkError(PolarisError):
    """网络层面的错误 (I/O 级别)。

    本库不做任何重连，上层逻辑可自行决定是否重新建立会话。
    """

    pass


class SocketSetupError(NetworkError):
    """连接建立阶段失败。

    触发场景:
    1. DNS 解析失败。
    2. Socket 创建失败。
    3. 设置超时选项失败。
    4. TCP connect 失败或超时。
    """

    pass


class TransportError(NetworkError):
    """数据收发失败。

    触发场景:
    1. send 失败或超时 (无法完整写出缓冲区)。
    2. recv 失败或超时。
    3. 对端关闭连接导致读取不完整。
    """

    pass


class ProtocolError(PolarisError):
    """协议交互错误 (逻辑级别) 的基类。"""

    pass


class ProtocolViolation(ProtocolError):
    """数据流违反协议约定。

    触发场景:
    1. 消息起始字节不是 0xD3 (Marker 丢失，不做重同步)。
    2. 长度字段为 0。
    """

    pass


class ResourceLimitExceeded(ProtocolViolation):
    """长度字段超过载荷上限。

    长度字段来自不可信的对端，上限仅用于限制内存分配 (DoS 防护)。
    """

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"长度字段超出上限: {length} >= {limit}")
        self.length = length
        self.limit = limit


class ChecksumMismatch(ProtocolViolation):
    """严格模式下消息尾部校验和不匹配。"""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"校验和不匹配: 期望 0x{expected:06X}, 实际 0x{actual:06X}"
        )
        self.expected = expected
        self.actual = actual
