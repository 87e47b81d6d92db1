# output/settings_writer.py

import logging
from typing import List, Optional

from models.endpoint_model import ProbeResult
from models.setting_model import Setting, set_base_url
from store.settings_store import ClaudeSettingsStore
from validator.prober import pick_winner

# 获取当前模块的日志记录器
logger = logging.getLogger(__name__)


def write_fastest(ranked: List[ProbeResult], store: ClaudeSettingsStore) -> Optional[str]:
    """
    把探测结果中最快的可用 URL 写入 Claude 设置。
    Args:
        ranked (List[ProbeResult]): 已排序的探测结果。
        store (ClaudeSettingsStore): Claude 设置存储。
    Returns:
        Optional[str]: 写入成功时返回该 URL；没有可用 URL 或保存失败时返回 None。
    """
    winner = pick_winner(ranked)
    if winner is None:
        logger.warning("没有可用的URL，Claude设置保持不变。")
        return None

    settings = store.load()
    set_base_url(settings, winner.url)
    if not store.save(settings):
        return None
    logger.info(f"Claude URL 已更新为最快的URL: {winner.url} ({winner.latency:.2f}ms)")
    return winner.url


def apply_setting(setting: Setting, store: ClaudeSettingsStore) -> bool:
    """读取-修改-写回单个配置项，返回是否保存成功。"""
    settings = store.load()
    setting.apply(settings)
    return store.save(settings)
