# models/endpoint_model.py

import math
from typing import Optional

# 不可达哨兵值：所有失败原因（超时、连接错误、状态码 >= 400）统一折叠为无穷大延迟
UNREACHABLE = math.inf


class ProbeResult:
    """
    代表一次探测的结果：候选 URL 及其响应延迟（毫秒）。
    仅在一次 test 命令期间存在于内存中，不做持久化。
    """
    def __init__(self, url: str, latency: float = UNREACHABLE, status: Optional[int] = None):
        """
        初始化 ProbeResult 对象。
        Args:
            url (str): 用户配置的原始候选 URL（未补全协议头）。
            latency (float): 响应头到达耗时（毫秒）；不可达时为 UNREACHABLE。
            status (Optional[int]): 收到的 HTTP 状态码，连接失败或超时时为 None。
        """
        self.url = url
        self.latency = latency
        self.status = status

    @property
    def reachable(self) -> bool:
        return not math.isinf(self.latency)

    def latency_display(self) -> str:
        """以整数毫秒显示延迟，不可达时显示“超时”。"""
        if not self.reachable:
            return "超时"
        return f"{self.latency:.0f}ms"

    def __repr__(self):
        return f"ProbeResult(url='{self.url}', latency={self.latency_display()})"
