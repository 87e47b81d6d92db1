# validator/prober.py

import asyncio
import aiohttp
import logging
from typing import List, Optional
from urllib.parse import urlparse

import config # 绝对导入 config 模块
from models.endpoint_model import ProbeResult, UNREACHABLE # 导入探测结果模型

# 获取当前模块的日志记录器
logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """缺少 http:// 或 https:// 协议头时补上 https://。"""
    if not url.startswith("http://") and not url.startswith("https://"):
        return "https://" + url
    return url


def probe_target(url: str) -> str:
    """
    返回实际探测的地址：补全协议头后只保留协议、主机和端口，路径固定为根路径 '/'。
    """
    parsed = urlparse(normalize_url(url))
    return f"{parsed.scheme}://{parsed.netloc}/"


class ProbeObserver:
    """
    探测进度观察者。默认实现什么也不做；CLI 通过子类实时输出进度。
    回调在事件循环中执行，不同 URL 之间的回调顺序不做保证。
    """
    def on_probe_start(self, url: str) -> None:
        pass

    def on_probe_complete(self, url: str, result: ProbeResult) -> None:
        pass


class ProbeResolution:
    """
    单次探测的一次性结果槽：先到的结果生效，之后的 resolve 调用全部被忽略。
    超时看门狗和请求本身的超时/错误处理可能几乎同时触发，二者都只能通过这里落定结果。
    """
    def __init__(self, url: str):
        self.url = url
        self.result: Optional[ProbeResult] = None

    @property
    def resolved(self) -> bool:
        return self.result is not None

    def resolve(self, latency: float, status: Optional[int] = None) -> bool:
        """
        尝试落定结果。
        Returns:
            bool: 本次调用是否生效（已落定时返回 False）。
        """
        if self.result is not None:
            return False
        self.result = ProbeResult(self.url, latency, status)
        return True


class UrlProber:
    def __init__(self, timeout: float = config.PROBE_TIMEOUT, user_agent: str = config.USER_AGENT):
        # 实例化时初始化日志记录器
        self.logger = logging.getLogger(__name__)
        self.timeout = timeout
        self.user_agent = user_agent

    @classmethod
    def from_config(cls, app_config: config.AppConfig) -> "UrlProber":
        return cls(timeout=app_config.probe_timeout, user_agent=app_config.user_agent)

    async def _request(self, session: aiohttp.ClientSession, url: str,
                       resolution: ProbeResolution, started: float) -> None:
        """
        异步函数：对单个 URL 的根路径发送 HEAD 请求，并把结果写入 resolution。
        Args:
            session (aiohttp.ClientSession): 共享的 HTTP 会话。
            url (str): 原始候选 URL。
            resolution (ProbeResolution): 结果槽。
            started (float): 请求开始时的事件循环时间。
        """
        loop = asyncio.get_running_loop()
        target = probe_target(url)
        try:
            async with session.head(
                target,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                allow_redirects=False, # 3xx 本身即视为可用，不跟随重定向
                headers={"User-Agent": self.user_agent},
            ) as response:
                # 延迟 = 请求开始到收到响应头的耗时；退出 async with 时连接被释放，响应体被丢弃
                latency_ms = (loop.time() - started) * 1000
                if response.status < 400:
                    self.logger.debug(f"{url} 可用，状态码: {response.status}，延迟: {latency_ms:.2f}ms")
                    resolution.resolve(latency_ms, response.status)
                else:
                    self.logger.debug(f"{url} 不可用，状态码: {response.status}")
                    resolution.resolve(UNREACHABLE, response.status)
        except asyncio.TimeoutError:
            self.logger.debug(f"{url} 请求超时。")
            resolution.resolve(UNREACHABLE)
        except aiohttp.ClientError as e:
            self.logger.debug(f"{url} 请求时发生客户端错误: {e}")
            resolution.resolve(UNREACHABLE)
        except Exception as e:
            self.logger.debug(f"{url} 请求时发生未知错误: {e}")
            resolution.resolve(UNREACHABLE)

    async def probe_url(self, session: aiohttp.ClientSession, url: str) -> ProbeResult:
        """
        异步函数：探测单个 URL，保证只产生一个结果。
        除 aiohttp 自身的超时外，另设一个看门狗：到时将结果落定为不可达并中止请求（关闭连接）。
        Args:
            session (aiohttp.ClientSession): 共享的 HTTP 会话。
            url (str): 原始候选 URL。
        Returns:
            ProbeResult: 探测结果；任何失败都表示为不可达，不会抛出异常。
        """
        loop = asyncio.get_running_loop()
        resolution = ProbeResolution(url)
        started = loop.time()
        request = asyncio.ensure_future(self._request(session, url, resolution, started))

        def on_deadline():
            if resolution.resolve(UNREACHABLE):
                self.logger.debug(f"{url} 超过 {self.timeout} 秒未响应，已中止。")
            request.cancel()

        watchdog = loop.call_later(self.timeout, on_deadline)
        try:
            # asyncio.wait 不会因 request 被看门狗取消而抛出异常
            await asyncio.wait({request})
        finally:
            watchdog.cancel()
            if not request.done():
                request.cancel()

        if not resolution.resolved:
            resolution.resolve(UNREACHABLE)
        return resolution.result

    async def _observed_probe(self, session: aiohttp.ClientSession, url: str,
                              observer: Optional[ProbeObserver]) -> ProbeResult:
        self._notify(observer, "on_probe_start", url)
        result = await self.probe_url(session, url)
        self._notify(observer, "on_probe_complete", url, result)
        return result

    def _notify(self, observer: Optional[ProbeObserver], event: str, *args) -> None:
        """调用观察者回调；观察者自身的异常只记录日志，不影响探测结果。"""
        if observer is None:
            return
        try:
            getattr(observer, event)(*args)
        except Exception as e:
            self.logger.warning(f"进度回调 {event} 执行失败: {e}")

    async def probe_all(self, urls: List[str], observer: Optional[ProbeObserver] = None) -> List[ProbeResult]:
        """
        异步函数：并发探测所有候选 URL，全部落定后返回（顺序与输入一致，未排序）。
        Args:
            urls (List[str]): 候选 URL 列表，不能为空。
            observer (Optional[ProbeObserver]): 进度观察者。
        Returns:
            List[ProbeResult]: 每个 URL 恰好一个结果。
        Raises:
            ValueError: 候选列表为空。
        """
        if not urls:
            raise ValueError("候选 URL 列表为空")

        self.logger.info(f"开始并发探测 {len(urls)} 个 URL。")
        async with aiohttp.ClientSession() as session:
            # 各探测相互独立，一个失败不会取消其他探测
            results = await asyncio.gather(*[self._observed_probe(session, url, observer) for url in urls])

        reachable = sum(1 for r in results if r.reachable)
        self.logger.info(f"完成所有 URL 的探测。共 {reachable} 个可用。")
        return list(results)


def rank_results(results: List[ProbeResult]) -> List[ProbeResult]:
    """
    按延迟升序排序；不可达的结果无论多少都排在所有可用结果之后。
    排序是稳定的，延迟相同的结果保持输入顺序。
    """
    return sorted(results, key=lambda r: (not r.reachable, r.latency if r.reachable else 0.0))


def pick_winner(ranked: List[ProbeResult]) -> Optional[ProbeResult]:
    """返回第一个可用的结果；列表为空或全部不可达时返回 None。"""
    for result in ranked:
        if result.reachable:
            return result
    return None


def run_probe(urls: List[str], app_config: config.AppConfig,
              observer: Optional[ProbeObserver] = None) -> List[ProbeResult]:
    """同步入口：完成一轮探测并返回排序后的结果。"""
    prober = UrlProber.from_config(app_config)
    results = asyncio.run(prober.probe_all(urls, observer))
    return rank_results(results)
