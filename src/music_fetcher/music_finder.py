"""多数据源聚合搜索模块"""
import asyncio
import logging
from typing import Any, List, Optional

from .config import Config
from .downloader import MusicDownloader
from .music_item import MusicItem, PlayInfo
from .music_sources import MusicSource, SourceRegistry, create_registry

logger = logging.getLogger(__name__)

ALL_PROVIDERS = "all"


class MusicFinder:
    def __init__(self, config_path: str = None, registry: Optional[SourceRegistry] = None):
        """初始化聚合搜索器"""
        self.config = Config(config_path)
        self.registry = registry or create_registry(self.config)

    async def search(self, query: str, provider: Optional[str] = None) -> List[MusicItem]:
        """
        搜索歌曲

        指定数据源时只搜索该数据源；未指定或为 "all" 时并发搜索全部数据源，
        按注册顺序拼接结果。不做跨数据源去重，任何数据源出错都不会抛出异常。
        """
        if provider and provider != ALL_PROVIDERS:
            return await self._safe_search(self.registry.get(provider), query)

        sources = self.registry.get_all()
        results = await asyncio.gather(*(self._safe_search(source, query) for source in sources))

        items: List[MusicItem] = []
        for source, result in zip(sources, results):
            logger.debug(f"数据源 {source.name} 返回 {len(result)} 条结果")
            items.extend(result)
        return items

    async def _safe_search(self, source: MusicSource, query: str) -> List[MusicItem]:
        """带错误处理的安全搜索"""
        try:
            return await source.search(query)
        except Exception as e:
            logger.error(f"数据源 {source.name} 搜索失败: {str(e)}")
            return []

    async def resolve(self, item_id: str, provider: str, extra: Any = None) -> PlayInfo:
        """
        解析单首歌曲的播放地址

        Raises:
            ResolutionError: 数据源无法给出播放地址
        """
        if provider not in self.registry:
            logger.warning(f"未知数据源 {provider}，使用默认数据源 {self.registry.default}")
        source = self.registry.get(provider)
        return await source.resolve(item_id, extra)

    async def download(self, items: List[MusicItem], directory: str = None) -> List[str]:
        """逐首下载，返回已保存的文件路径"""
        downloader = MusicDownloader(
            self.resolve,
            directory or self.config.get('download.directory', 'downloads'),
            delay=float(self.config.get('download.delay', 1.0)),
            timeout=self.config.request_timeout,
        )
        return await downloader.download_all(items)
