# launcher/file_browser.py

import os
import sys
import logging
import subprocess
from typing import List, Optional

import config # 绝对导入 config 模块

# 获取当前模块的日志记录器
logger = logging.getLogger(__name__)


def file_browser_command(path: str, platform: Optional[str] = None) -> List[str]:
    """根据平台选择文件管理器命令：Windows 用 explorer，macOS 用 open，其余用 xdg-open。"""
    platform = platform or sys.platform
    for prefix, command in config.FILE_BROWSER_COMMANDS.items():
        if platform.startswith(prefix):
            return [command, path]
    return [config.DEFAULT_FILE_BROWSER, path]


def open_in_file_browser(path: str, platform: Optional[str] = None) -> bool:
    """
    在系统文件管理器中打开目录。子进程脱离当前进程运行，不等待其结束。
    Returns:
        bool: 子进程是否成功启动。失败不是致命错误，调用方应把目录路径展示给用户。
    """
    command = file_browser_command(path, platform)
    kwargs = {}
    if os.name == "nt":
        kwargs["creationflags"] = subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True
    try:
        subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **kwargs,
        )
    except OSError as e:
        logger.warning(f"无法启动文件管理器 {command[0]}: {e}")
        return False
    logger.debug(f"已启动文件管理器: {' '.join(command)}")
    return True
