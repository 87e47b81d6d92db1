# store/url_store.py

import os
import json
import logging
from typing import Any, Iterable, List, NamedTuple, Optional

import config # 绝对导入 config 模块
from parser.input_parser import split_urls

# 获取当前模块的日志记录器
logger = logging.getLogger(__name__)


class AddReport(NamedTuple):
    """一次 add 操作的结果：新增的 URL、因重复被跳过的 URL，以及写回是否成功。"""
    added: List[str]
    duplicates: List[str]
    saved: bool = True


def _is_valid_document(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and isinstance(data.get("baseUrls"), list)
        and all(isinstance(url, str) for url in data["baseUrls"])
    )


class UrlListStore:
    """
    候选 URL 列表的持久化：{"baseUrls": [...]}，保持插入顺序且不含重复项。
    """
    def __init__(self, path: str = config.CONFIG_FILE):
        self.logger = logging.getLogger(__name__)
        self.path = path

    def load(self) -> List[str]:
        """
        读取候选列表。
        - 文件不存在：创建空列表文件。
        - JSON 损坏或结构不对：重置为空列表并写回（自动修复）。
        - 文件无法读取：记录错误，本次运行按空列表处理，不改动文件。
        """
        if not os.path.exists(self.path):
            self.save([])
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self.logger.warning(f"配置文件已损坏，已重置为空列表: {self.path} ({e})")
            self.save([])
            return []
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"配置文件读取失败: {e}")
            return []

        if not _is_valid_document(data):
            self.logger.warning(f"配置文件结构无效，已重置为空列表: {self.path}")
            self.save([])
            return []
        return list(data["baseUrls"])

    def save(self, urls: List[str]) -> bool:
        """写入候选列表，失败时记录错误并返回 False。"""
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump({"baseUrls": urls}, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            self.logger.error(f"配置文件保存失败: {e}")
            return False

    def add(self, values: Iterable[str]) -> AddReport:
        """
        添加 URL。每个参数都可以包含以逗号、分号或空白分隔的多个 URL。
        与已有条目（以及本次已添加的条目）完全相同的字符串视为重复。
        """
        urls = self.load()
        added, duplicates = [], []
        for url in split_urls(values):
            if url in urls:
                duplicates.append(url)
            else:
                urls.append(url)
                added.append(url)
        saved = True
        if added:
            saved = self.save(urls)
        self.logger.info(f"新增 {len(added)} 个URL，跳过 {len(duplicates)} 个重复URL。")
        return AddReport(added, duplicates, saved)

    def remove(self, url: str) -> Optional[bool]:
        """
        删除第一个完全匹配的 URL。
        Returns:
            Optional[bool]: URL 不存在时返回 None；否则返回写回是否成功。
        """
        urls = self.load()
        if url not in urls:
            return None
        urls.remove(url)
        return self.save(urls)

    def clear(self) -> bool:
        return self.save([])
