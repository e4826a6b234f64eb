# tests/test_config.py
import os
from pathlib import Path

import pytest

from polaris_core import ConfigError
from polaris_core.config import (
    PolarisConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
    read_toml_values,
)


# --- 辅助函数：生成有效字典 ---
def _get_valid_raw_dict():
    return {
        "station_id": "TEST01",
        "station_token": "secret",
        "latitude_deg": "37.39",
        "longitude_deg": "-122.15",
    }


# --- Factory 测试 (核心逻辑) ---


def test_create_valid_dict():
    """测试使用合法的字典创建配置，并注入默认值"""
    config = create_config_from_dict(_get_valid_raw_dict())

    assert config.station_id == "TEST01"
    assert config.latitude_deg == pytest.approx(37.39)
    assert config.host == "polaris.pointonenav.com"
    assert config.port == 8088
    assert config.send_timeout == 10.0
    assert config.read_timeout is None
    assert config.max_payload_size == 200 * 1024
    assert config.verify_checksum is False


def test_create_default_location():
    raw = {"station_id": "A", "station_token": "B"}
    config = create_config_from_dict(raw)
    assert config.latitude_deg == 37.39
    assert config.longitude_deg == -122.15


@pytest.mark.parametrize("missing", ["station_id", "station_token"])
def test_missing_required_field(missing):
    raw = _get_valid_raw_dict()
    del raw[missing]
    with pytest.raises(ConfigError, match="配置缺失"):
        create_config_from_dict(raw)


def test_empty_required_field():
    raw = _get_valid_raw_dict()
    raw["station_token"] = "   "
    with pytest.raises(ConfigError, match="不能为空"):
        create_config_from_dict(raw)


@pytest.mark.parametrize(
    "key, value, match",
    [
        ("latitude_deg", "91", "纬度越界"),
        ("longitude_deg", "-180.5", "经度越界"),
        ("latitude_deg", "north", "数值格式无效"),
        ("port", "0", "端口无效"),
        ("port", "abc", "整数格式无效"),
        ("read_timeout", "-1", "必须为正数"),
        ("max_payload_size", "0", "必须为正数"),
    ],
)
def test_invalid_values(key, value, match):
    raw = _get_valid_raw_dict()
    raw[key] = value
    with pytest.raises(ConfigError, match=match):
        create_config_from_dict(raw)


@pytest.mark.parametrize("station_id", ["A B", "A\r\nHost: x", "A\tB", "A\x00", "A\x7f"])
def test_station_id_rejects_whitespace_and_control(station_id):
    raw = _get_valid_raw_dict()
    raw["station_id"] = station_id
    with pytest.raises(ConfigError, match="基站 ID 含非法字符"):
        create_config_from_dict(raw)


def test_verify_checksum_string_flag():
    raw = _get_valid_raw_dict()
    raw["verify_checksum"] = "true"
    assert create_config_from_dict(raw).verify_checksum is True


def test_repr_hides_token():
    config = PolarisConfig(station_id="S", station_token="top-secret")
    assert "top-secret" not in repr(config)
    assert "******" in repr(config)


def test_config_is_frozen():
    config = PolarisConfig(station_id="S", station_token="T")
    with pytest.raises(AttributeError):
        config.station_id = "X"


# --- Loader 测试 (I/O) ---


def test_load_toml_file(tmp_path):
    """测试从 [polaris] 节加载"""
    toml_content = """
    [polaris]
    station_id = "toml_station"
    station_token = "123"
    latitude_deg = 10.5
    longitude_deg = 20.25
    read_timeout = 30
    """
    f = tmp_path / "config.toml"
    f.write_text(toml_content, encoding="utf-8")

    config = load_config_from_toml(f)
    assert config.station_id == "toml_station"
    assert config.latitude_deg == 10.5
    assert config.read_timeout == 30.0


def test_load_toml_profile(tmp_path):
    toml_content = """
    [profile.default]
    station_id = "a"
    station_token = "t"

    [profile.lab]
    station_id = "b"
    station_token = "t"
    """
    f = tmp_path / "config.toml"
    f.write_text(toml_content, encoding="utf-8")

    assert load_config_from_toml(f).station_id == "a"
    assert load_config_from_toml(f, profile="lab").station_id == "b"
    with pytest.raises(ConfigError, match="未找到预设"):
        load_config_from_toml(f, profile="missing")


def test_read_toml_values_skips_validation(tmp_path):
    """原始读取不要求凭据，便于与环境变量合并"""
    f = tmp_path / "config.toml"
    f.write_text('[polaris]\nhost = "example.net"\nport = 9000\n', encoding="utf-8")

    assert read_toml_values(f) == {"host": "example.net", "port": 9000}
    with pytest.raises(ConfigError, match="配置缺失"):
        load_config_from_toml(f)


def test_load_toml_not_found():
    """测试文件不存在"""
    with pytest.raises(ConfigError, match="配置文件未找到"):
        load_config_from_toml(Path("non_existent.toml"))


def test_load_toml_invalid_syntax(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text("station_id = ", encoding="utf-8")
    with pytest.raises(ConfigError, match="读取 TOML 失败"):
        load_config_from_toml(f)


def test_load_env(monkeypatch):
    monkeypatch.setenv("POLARIS_STATION_ID", "ENV01")
    monkeypatch.setenv("POLARIS_STATION_TOKEN", "tok")
    monkeypatch.setenv("POLARIS_LAT", "1.5")
    monkeypatch.setenv("POLARIS_PORT", "9000")

    config = load_config_from_env()
    assert config.station_id == "ENV01"
    assert config.latitude_deg == 1.5
    assert config.port == 9000


def test_load_env_empty(monkeypatch):
    for key in list(os.environ):
        if key.startswith("POLARIS_"):
            monkeypatch.delenv(key)
    with pytest.raises(ConfigError, match="POLARIS_"):
        load_config_from_env()
