"""
Polaris 核心库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量或字典中加载配置。
核心层只接收 PolarisConfig 对象，从不直接读取进程级的全局状态。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .protocols.constants import MessageConst, NetConst

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolarisConfig:
    """PolarisSession 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在会话期间不可变。

    Attributes:
        station_id: 基站 ID (请求路径)。
        station_token: 认证 Token。
        latitude_deg: 纬度 (度)。
        longitude_deg: 经度 (度)。
        altitude_m: 海拔 (米)，仅在显式开启时编码。
        host: 服务器主机名。
        port: 服务器端口。
        send_timeout: 发送超时 (秒)。
        connect_timeout: TCP 连接超时 (秒)。
        read_timeout: 接收超时 (秒)，None 表示无限阻塞。
        max_payload_size: 入站长度字段上限 (不含)。
        verify_checksum: 是否校验入站消息的 CRC-24Q。
    """

    # --- 1. 身份与位置 ---
    station_id: str
    station_token: str
    latitude_deg: float = NetConst.DEFAULT_LATITUDE
    longitude_deg: float = NetConst.DEFAULT_LONGITUDE
    altitude_m: float = 0.0

    # --- 2. 连接参数 ---
    host: str = NetConst.DEFAULT_HOST
    port: int = NetConst.DEFAULT_PORT
    send_timeout: float = NetConst.SEND_TIMEOUT
    connect_timeout: float = NetConst.CONNECT_TIMEOUT
    read_timeout: float | None = None

    # --- 3. 数据流参数 ---
    max_payload_size: int = MessageConst.MAX_PAYLOAD_SIZE
    verify_checksum: bool = False

    def __repr__(self) -> str:
        """
        覆盖默认的 repr，隐藏 Token 字段，防止日志泄露敏感信息。
        """
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"station_id='{self.station_id}', "
            f"station_token='******', "
            f"location=({self.latitude_deg:.2f}, {self.longitude_deg:.2f})>"
        )


def _to_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("true", "1", "t", "yes", "on")


def create_config_from_dict(raw_data: dict[str, Any]) -> PolarisConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML、Env 或 CLI)。

    Returns:
        PolarisConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:
        # --- 内部辅助函数 ---
        def _req_str(key: str) -> str:
            """获取必要的非空字符串字段"""
            if key not in raw_data or raw_data[key] is None:
                raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
            val = str(raw_data[key]).strip()
            if not val:
                raise ConfigError(f"配置缺失: 字段 '{key}' 不能为空")
            return val

        def _get(key: str, default: Any) -> Any:
            """获取可选字段，缺失则使用默认值"""
            val = raw_data.get(key)
            return default if val is None or val == "" else val

        def _float(key: str, default: float | None) -> float | None:
            val = _get(key, default)
            if val is None:
                return None
            try:
                return float(val)
            except (TypeError, ValueError):
                raise ConfigError(f"数值格式无效 '{key}': {val}")

        def _positive(key: str, default: float | None) -> float | None:
            val = _float(key, default)
            if val is not None and val <= 0:
                raise ConfigError(f"'{key}' 必须为正数: {val}")
            return val

        # 基站 ID 直接拼接进请求行，不允许空白与控制字符
        station_id = _req_str("station_id")
        if any(c.isspace() or not c.isprintable() for c in station_id):
            raise ConfigError(f"基站 ID 含非法字符: {station_id!r}")

        latitude = _float("latitude_deg", NetConst.DEFAULT_LATITUDE)
        longitude = _float("longitude_deg", NetConst.DEFAULT_LONGITUDE)
        if not -90.0 <= latitude <= 90.0:
            raise ConfigError(f"纬度越界: {latitude}")
        if not -180.0 <= longitude <= 180.0:
            raise ConfigError(f"经度越界: {longitude}")

        try:
            port = int(_get("port", NetConst.DEFAULT_PORT))
            max_payload = int(_get("max_payload_size", MessageConst.MAX_PAYLOAD_SIZE))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"整数格式无效: {e}")
        if not 0 < port < 65536:
            raise ConfigError(f"端口无效: {port}")
        if max_payload <= 0:
            raise ConfigError(f"max_payload_size 必须为正数: {max_payload}")

        # --- 构建对象 ---
        return PolarisConfig(
            station_id=station_id,
            station_token=_req_str("station_token"),
            latitude_deg=latitude,
            longitude_deg=longitude,
            altitude_m=_float("altitude_m", 0.0),
            host=str(_get("host", NetConst.DEFAULT_HOST)),
            port=port,
            send_timeout=_positive("send_timeout", NetConst.SEND_TIMEOUT),
            connect_timeout=_positive("connect_timeout", NetConst.CONNECT_TIMEOUT),
            read_timeout=_positive("read_timeout", None),
            max_payload_size=max_payload,
            verify_checksum=_to_bool(_get("verify_checksum", False)),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def read_toml_values(file_path: Path, profile: str = "default") -> dict[str, Any]:
    """读取 TOML 文件中的原始配置表 (不做字段校验)。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [polaris]: 单站点配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        dict[str, Any]: 原始配置字典，可与其他来源合并。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        return dict(data["profile"][profile])
    if "polaris" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [polaris] 节，忽略 profile='{profile}'。")
        return dict(data["polaris"])
    return dict(data)


def load_config_from_toml(file_path: Path, profile: str = "default") -> PolarisConfig:
    """从 TOML 文件加载配置。查找策略见 read_toml_values。

    Raises:
        ConfigError: 文件读取失败、Profile 不存在或字段校验失败。
    """
    return create_config_from_dict(read_toml_values(file_path, profile))


# 字段映射表 (Config Field -> Env Suffix)
ENV_MAP = {
    "station_id": "STATION_ID",
    "station_token": "STATION_TOKEN",
    "latitude_deg": "LAT",
    "longitude_deg": "LON",
    "altitude_m": "ALT",
    "host": "HOST",
    "port": "PORT",
    "send_timeout": "SEND_TIMEOUT",
    "connect_timeout": "CONNECT_TIMEOUT",
    "read_timeout": "READ_TIMEOUT",
    "max_payload_size": "MAX_PAYLOAD_SIZE",
    "verify_checksum": "VERIFY_CHECKSUM",
}


def read_env_values() -> dict[str, str]:
    """收集所有 `POLARIS_` 前缀的环境变量，返回配置字段字典。"""
    raw_data = {}
    for cfg_key, env_suffix in ENV_MAP.items():
        val = os.environ.get(f"POLARIS_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val
    return raw_data


def load_config_from_env() -> PolarisConfig:
    """从环境变量加载配置。

    例如: `POLARIS_STATION_ID` -> `station_id`，`POLARIS_LAT` -> `latitude_deg`。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    raw_data = read_env_values()
    if not raw_data:
        raise ConfigError("未检测到 POLARIS_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
