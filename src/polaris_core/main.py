# src/polaris_core/main.py
"""
Polaris 客户端命令行入口 (CLI)

配置优先级: 命令行参数 > 环境变量 (含 .env) > TOML 配置文件。

示例:
    polaris-client --station-id MYSTATION --station-token xxxx --lat 37.39 --lon -122.15
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .config import (
    PolarisConfig,
    create_config_from_dict,
    read_env_values,
    read_toml_values,
)
from .core import PolarisSession
from .exceptions import ConfigError, OutOfRangeError
from .protocols.rtcm import classify_message
from .protocols.stream import RtcmMessage

logger = logging.getLogger("PolarisCLI")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polaris-client",
        description="连接 Polaris 改正数服务并打印收到的 RTCM3 消息摘要。",
    )
    parser.add_argument("--station-id", help="station id")
    parser.add_argument("--station-token", help="station token")
    parser.add_argument("--lat", type=float, help="latitude deg (默认 37.39)")
    parser.add_argument("--lon", type=float, help="longitude deg (默认 -122.15)")
    parser.add_argument("--config", type=Path, help="TOML 配置文件路径")
    parser.add_argument("--profile", default="default", help="TOML 配置预设名")
    parser.add_argument("--host", help="服务器主机名")
    parser.add_argument("--port", type=int, help="服务器端口")
    parser.add_argument("--read-timeout", type=float, help="接收超时 (秒)")
    parser.add_argument(
        "--strict-checksum",
        action="store_true",
        default=None,
        help="校验入站消息的 CRC-24Q",
    )
    parser.add_argument(
        "--max-messages", type=int, default=0, help="收到 N 条消息后停止 (0 为不限)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出 DEBUG 日志")
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def load_cli_config(args: argparse.Namespace) -> PolarisConfig:
    """
    合并 TOML、环境变量与命令行参数，生成配置对象。
    """
    raw: dict[str, Any] = {}

    if args.config:
        raw.update(read_toml_values(args.config, args.profile))
        logger.debug(f"已加载配置文件: {args.config}")

    # 优先从当前工作目录加载 .env
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)
        logger.debug(f"已加载环境文件: {env_path}")
    raw.update(read_env_values())

    cli_values = {
        "station_id": args.station_id,
        "station_token": args.station_token,
        "latitude_deg": args.lat,
        "longitude_deg": args.lon,
        "host": args.host,
        "port": args.port,
        "read_timeout": args.read_timeout,
        "verify_checksum": args.strict_checksum,
    }
    # 过滤掉值为 None 的项，以便使用下层来源或默认值
    raw.update({k: v for k, v in cli_values.items() if v is not None})

    return create_config_from_dict(raw)


class MessagePrinter:
    """按消息类型输出头部摘要，可选在 N 条后请求停止。"""

    def __init__(self, max_messages: int = 0) -> None:
        self.max_messages = max_messages
        self.count = 0

    def __call__(self, message: RtcmMessage) -> bool:
        try:
            info = classify_message(message.raw)
        except OutOfRangeError:
            logger.warning(f" => MSG: COUNT: {self.count} 消息过短: {message!r}")
        else:
            logger.info(
                f" => MSG: COUNT: {self.count} HEADER: {message.raw[0]:x} "
                f"MESSAGE_ID: {info.message_number} ({info.name})"
            )
            if info.time_of_week is not None:
                logger.info(
                    f"        STATION: {info.station_id} TOW: {info.time_of_week:>10}"
                )
            else:
                logger.info(f"        STATION: {info.station_id}")

        self.count += 1
        return 0 < self.max_messages <= self.count


def main(argv: list[str] | None = None) -> int:
    """
    程序主入口点。

    Returns:
        int: 进程退出码。0 成功，1 会话失败，2 配置错误。
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_cli_config(args)
    except ConfigError as ce:
        logger.critical(f"配置错误: {ce}")
        logger.critical("请通过 --station-id/--station-token 或 POLARIS_* 环境变量提供凭据。")
        return 2

    logger.info(
        f" => POLARIS: CONNECT: STATION: {config.station_id} "
        f"LOCATION: {config.latitude_deg:.2f},{config.longitude_deg:.2f}"
    )

    session = PolarisSession(config, on_message=MessagePrinter(args.max_messages))
    try:
        ok = session.run()
    except KeyboardInterrupt:
        logger.info("收到用户中断信号 (Ctrl+C)，准备退出...")
        return 1

    if not ok:
        logger.error(f" => POLARIS: DISCONNECT: STATION: {config.station_id}")
    return 0 if ok else 1


# 程序入口
if __name__ == "__main__":
    sys.exit(main())
