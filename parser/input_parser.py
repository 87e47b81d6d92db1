# parser/input_parser.py

import re
import logging
from typing import Iterable, List

import config # 绝对导入 config 模块
from models.setting_model import SETTING_TYPES, Setting, SettingError

# 获取当前模块的日志记录器
logger = logging.getLogger(__name__)

# URL 之间允许使用逗号、分号或任意空白分隔
_URL_SEPARATORS = re.compile(r"[,;\s]+")


def split_urls(values: Iterable[str]) -> List[str]:
    """
    将一个或多个原始参数拆分为 URL 列表。
    Args:
        values (Iterable[str]): 命令行参数，每个参数内部可能含多个 URL。
    Returns:
        List[str]: 去掉首尾空白、丢弃空项后的 URL，保持原始顺序（此处不去重）。
    """
    urls = []
    for value in values:
        for token in _URL_SEPARATORS.split(value):
            token = token.strip()
            if token:
                urls.append(token)
    return urls


def parse_setting(raw: str) -> Setting:
    """
    解析 `key=value` 形式的配置项。
    只在第一个 '=' 处分割，因此取值内部可以包含 '='（例如 base64 token）。
    Args:
        raw (str): 用户输入，如 "token=sk-xxx" 或 "URL=https://example.com"。
    Returns:
        Setting: TokenSetting 或 BaseUrlSetting。
    Raises:
        SettingError: 格式错误、键不受支持或 URL 不合法。
    """
    key, sep, value = raw.partition("=")
    key = key.strip().lower()
    value = value.strip()
    if not sep or not key or not value:
        raise SettingError("格式错误，请使用: token=xxx 或 url=xxx")

    setting_type = SETTING_TYPES.get(key)
    if setting_type is None:
        supported = ", ".join(SETTING_TYPES)
        raise SettingError(f"不支持的配置项: {key}（支持的配置项: {supported}）")

    setting = setting_type(value)
    logger.debug(f"解析配置项成功: {setting_type.__name__}")
    return setting


def mask_token(token: str) -> str:
    """
    隐藏 token 的中间部分，只显示前后各 8 位。
    长度不超过阈值的 token 原样显示（否则前后两段会重叠）。
    """
    if len(token) <= config.TOKEN_MASK_THRESHOLD:
        return token
    visible = config.TOKEN_VISIBLE_CHARS
    hidden = len(token) - 2 * visible
    return token[:visible] + config.TOKEN_MASK_CHAR * hidden + token[-visible:]
