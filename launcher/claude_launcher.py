# launcher/claude_launcher.py

import shutil
import logging
import subprocess

import config # 绝对导入 config 模块

# 获取当前模块的日志记录器
logger = logging.getLogger(__name__)

# 找不到可执行文件时的退出码（与 shell 的约定一致）
COMMAND_NOT_FOUND = 127


def run_claude(command: str = config.CLAUDE_COMMAND) -> int:
    """
    启动 Claude CLI，继承当前终端的输入输出，并等待其退出。
    Returns:
        int: 子进程的退出码；无法启动时返回非零值。
    """
    executable = shutil.which(command)
    if executable is None:
        logger.error(f"无法启动Claude: 在 PATH 中找不到 {command}")
        return COMMAND_NOT_FOUND
    try:
        process = subprocess.Popen([executable])
    except OSError as e:
        logger.error(f"启动Claude失败: {e}")
        return 1

    while True:
        try:
            return process.wait()
        except KeyboardInterrupt:
            # Ctrl+C 同时发给了子进程，由 Claude 自行处理；这里继续等待它退出
            continue
