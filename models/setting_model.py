# models/setting_model.py

from dataclasses import dataclass
from typing import Any, Dict, Union
from urllib.parse import urlparse

import config


class SettingError(ValueError):
    """config set 的输入无法被接受（格式错误、键不支持或取值非法）。"""


def _env_section(settings: Dict[str, Any]) -> Dict[str, Any]:
    """返回设置中的 env 字典，不存在或类型不对时重建为空字典。"""
    env = settings.get(config.ENV_SECTION)
    if not isinstance(env, dict):
        env = {}
        settings[config.ENV_SECTION] = env
    return env


def set_base_url(settings: Dict[str, Any], url: str) -> Dict[str, Any]:
    """
    将 url 写入 env.ANTHROPIC_BASE_URL，其余字段原样保留。
    顶层的 ANTHROPIC_BASE_URL 属于旧版设置格式，只有在它已经存在时才同步更新，从不新增。
    """
    _env_section(settings)[config.BASE_URL_KEY] = url
    if config.BASE_URL_KEY in settings:
        settings[config.BASE_URL_KEY] = url
    return settings


def set_auth_token(settings: Dict[str, Any], token: str) -> Dict[str, Any]:
    _env_section(settings)[config.AUTH_TOKEN_KEY] = token
    return settings


@dataclass(frozen=True)
class TokenSetting:
    """认证 Token：写入 env.ANTHROPIC_AUTH_TOKEN。"""
    value: str

    key = "token"

    def apply(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return set_auth_token(settings, self.value)

    def describe(self) -> str:
        return "Claude token 已更新"


@dataclass(frozen=True)
class BaseUrlSetting:
    """Base URL：必须是带 http/https 协议头的完整 URL，构造时即校验。"""
    value: str

    key = "url"

    def __post_init__(self):
        try:
            parsed = urlparse(self.value)
            hostname = parsed.hostname
        except ValueError as e:
            # urlparse 对残缺的 IPv6 地址（如 "http://[::1"）直接抛出 ValueError
            raise SettingError(f"无效的URL: {self.value}") from e
        if parsed.scheme not in ("http", "https") or not hostname:
            raise SettingError(f"无效的URL: {self.value}")

    def apply(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return set_base_url(settings, self.value)

    def describe(self) -> str:
        return f"Claude URL 已更新: {self.value}"


Setting = Union[TokenSetting, BaseUrlSetting]

# 所有受支持的配置项，按 key 索引
SETTING_TYPES = {cls.key: cls for cls in (TokenSetting, BaseUrlSetting)}
