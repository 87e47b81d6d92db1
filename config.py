# cc_switch/config.py

import os
from dataclasses import dataclass

# --- Storage Configuration ---
# Directory holding this tool's own candidate URL list.
CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".cc")

# JSON file with the candidate base URLs: {"baseUrls": [...]}
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

# Settings file of the wrapped Claude CLI. We read and rewrite it but do not own its schema.
CLAUDE_SETTINGS_FILE = os.path.join(os.path.expanduser("~"), ".claude", "settings.json")

# Keys inside the Claude settings document.
ENV_SECTION = "env"
AUTH_TOKEN_KEY = "ANTHROPIC_AUTH_TOKEN"
BASE_URL_KEY = "ANTHROPIC_BASE_URL"

# Skeleton written by `config open` when the settings file does not exist yet.
DEFAULT_CLAUDE_SETTINGS = {
    "env": {},
    "permissions": {"allow": [], "deny": []},
}

# --- Prober Configuration ---
# Timeout for a single HEAD probe (in seconds)
PROBE_TIMEOUT = 10

# User-Agent sent with every probe request.
USER_AGENT = "CC-Claude-Config/1.0"

# --- Launcher Configuration ---
# Executable started when cc is invoked without a subcommand.
CLAUDE_COMMAND = "claude"

# File browser used by `config open`, keyed by sys.platform prefix.
# Anything not listed falls back to xdg-open.
FILE_BROWSER_COMMANDS = {
    "win32": "explorer",
    "darwin": "open",
}
DEFAULT_FILE_BROWSER = "xdg-open"

# --- Display Configuration ---
# Tokens longer than this are masked in `config list`.
TOKEN_MASK_THRESHOLD = 16
TOKEN_VISIBLE_CHARS = 8
TOKEN_MASK_CHAR = "*"


@dataclass
class AppConfig:
    """
    运行时配置，显式传递给存储与探测组件（测试中可注入临时路径）。
    """
    config_file: str = CONFIG_FILE
    settings_file: str = CLAUDE_SETTINGS_FILE
    probe_timeout: float = PROBE_TIMEOUT
    user_agent: str = USER_AGENT
    claude_command: str = CLAUDE_COMMAND
