# src/polaris_core/__init__.py
"""
Polaris-Core v1.0.0
Polaris RTK 改正数服务的轻量客户端核心库。
"""

# 暴露核心配置
from .config import (
    PolarisConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
    read_toml_values,
)

# 暴露引擎与状态
from .core import PolarisSession, connect

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    ChecksumMismatch,
    ConfigError,
    NetworkError,
    OutOfRangeError,
    PolarisError,
    ProtocolError,
    ProtocolViolation,
    ResourceLimitExceeded,
    SocketSetupError,
    TransportError,
)
from .network import BaseTransport, TcpTransport
from .protocols import MessageInfo, RtcmMessage, classify_message
from .state import SessionState, SessionStatus

__version__ = "1.0.0"

__all__ = [
    "PolarisSession",
    "connect",
    "PolarisConfig",
    "SessionState",
    "SessionStatus",
    "BaseTransport",
    "TcpTransport",
    "RtcmMessage",
    "MessageInfo",
    "classify_message",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "read_toml_values",
    "PolarisError",
    "ConfigError",
    "OutOfRangeError",
    "NetworkError",
    "SocketSetupError",
    "TransportError",
    "ProtocolError",
    "ProtocolViolation",
    "ResourceLimitExceeded",
    "ChecksumMismatch",
]
