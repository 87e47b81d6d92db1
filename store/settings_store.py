# store/settings_store.py

import os
import copy
import json
import logging
from typing import Any, Dict

import config # 绝对导入 config 模块

# 获取当前模块的日志记录器
logger = logging.getLogger(__name__)


class ClaudeSettingsStore:
    """
    Claude 设置文件（~/.claude/settings.json）的读写。
    该文件的格式归 Claude 所有：读写时不认识的字段一律原样保留。
    """
    def __init__(self, path: str = config.CLAUDE_SETTINGS_FILE):
        self.logger = logging.getLogger(__name__)
        self.path = path

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)

    def load(self) -> Dict[str, Any]:
        """读取设置；文件不存在、无法读取或内容不是 JSON 对象时返回空字典。"""
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            self.logger.warning(f"读取Claude设置失败: {e}")
            return {}
        if not isinstance(data, dict):
            self.logger.warning(f"Claude设置不是 JSON 对象，已忽略: {self.path}")
            return {}
        return data

    def save(self, settings: Dict[str, Any]) -> bool:
        """
        写回完整的设置文档。
        Returns:
            bool: 是否保存成功。
        """
        try:
            os.makedirs(self.directory or ".", exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2, ensure_ascii=False)
            self.logger.info(f"已保存Claude设置: {self.path}")
            return True
        except OSError as e:
            self.logger.error(f"保存Claude settings失败: {e}")
            return False

    def ensure_exists(self) -> bool:
        """确保设置目录和文件存在，文件缺失时写入默认骨架。"""
        if os.path.exists(self.path):
            return True
        return self.save(copy.deepcopy(config.DEFAULT_CLAUDE_SETTINGS))
