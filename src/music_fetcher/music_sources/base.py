"""音乐数据源基类模块"""
import asyncio
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List
import aiohttp

from ..music_item import MusicItem, PlayInfo

DEFAULT_TIMEOUT = 10  # 秒
NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class MusicSource(ABC):
    """音乐数据源基类

    子类实现 search / resolve 两个能力。每次调用都使用独立的会话，
    数据源本身不保存跨调用的状态。
    """

    name: str = ""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    @abstractmethod
    async def search(self, query: str) -> List[MusicItem]:
        """
        搜索歌曲

        Args:
            query: 搜索关键字

        Returns:
            搜索结果列表。内部出错时记录日志并返回空列表，不向调用方抛出异常
        """
        pass

    @abstractmethod
    async def resolve(self, item_id: str, extra: Any = None) -> PlayInfo:
        """
        解析播放地址

        Args:
            item_id: 由本数据源在搜索结果中给出的 id
            extra: 搜索结果中携带的私有数据

        Returns:
            播放信息

        Raises:
            ResolutionError: 无法取得播放地址
        """
        pass

    async def _request(self, method: str, url: str, headers: Dict[str, str],
                       params: Optional[Dict[str, Any]] = None,
                       data: Optional[Dict[str, Any]] = None,
                       as_json: bool = False) -> Any:
        """发送一次 HTTP 请求，非 2xx 状态抛出 aiohttp.ClientResponseError"""
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(method, url, headers=headers, params=params, data=data) as response:
                response.raise_for_status()
                if as_json:
                    # 部分接口以 text/html 返回 JSON
                    return await response.json(content_type=None)
                return await response.text()

    async def _fetch_text(self, url: str, headers: Dict[str, str],
                          params: Optional[Dict[str, Any]] = None) -> str:
        return await self._request("GET", url, headers, params=params)

    async def _fetch_json(self, url: str, headers: Dict[str, str],
                          params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("GET", url, headers, params=params, as_json=True)

    async def _post_form(self, url: str, headers: Dict[str, str], data: Dict[str, Any]) -> Any:
        return await self._request("POST", url, headers, data=data, as_json=True)

    def __repr__(self):
        return f"<{self.__class__.__name__} name={self.name!r}>"
