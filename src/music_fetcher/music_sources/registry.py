"""数据源注册表模块"""
import logging
from typing import Dict, List, Optional, Type

from ..config import Config
from .base import MusicSource, DEFAULT_TIMEOUT
from .gequbao import GequbaoMusicSource
from .qqmp3 import QQMp3MusicSource

logger = logging.getLogger(__name__)

# 注册顺序即聚合搜索结果的拼接顺序
BUILTIN_SOURCES: List[Type[MusicSource]] = [GequbaoMusicSource, QQMp3MusicSource]
DEFAULT_SOURCE = GequbaoMusicSource.name


class SourceRegistry:
    """数据源名称到实例的只读映射"""

    def __init__(self, sources: List[MusicSource], default: Optional[str] = None):
        if not sources:
            raise ValueError("至少需要注册一个数据源")
        self._sources: Dict[str, MusicSource] = {}
        for source in sources:
            self._sources[source.name] = source

        if default not in self._sources:
            if default:
                logger.warning(f"默认数据源 {default} 未注册，改用 {sources[0].name}")
            default = sources[0].name
        self.default = default

    def get(self, name: Optional[str] = None) -> MusicSource:
        """按名称获取数据源，名称为空或未注册时返回默认数据源"""
        if name and name in self._sources:
            return self._sources[name]
        return self._sources[self.default]

    def get_all(self) -> List[MusicSource]:
        """按注册顺序返回全部数据源"""
        return list(self._sources.values())

    def names(self) -> List[str]:
        return list(self._sources)

    def __contains__(self, name: str) -> bool:
        return name in self._sources


def create_registry(config: Optional[Config] = None) -> SourceRegistry:
    """根据配置创建注册表，未提供配置时注册全部内置数据源"""
    if config is None:
        return SourceRegistry([cls(timeout=DEFAULT_TIMEOUT) for cls in BUILTIN_SOURCES], DEFAULT_SOURCE)

    timeout = config.request_timeout
    sources = []
    for cls in BUILTIN_SOURCES:
        if config.is_source_enabled(cls.name):
            sources.append(cls(timeout=timeout))
            logger.info(f"{cls.name} 数据源已启用")

    if not sources:
        logger.warning("没有启用的数据源，请检查配置，将启用全部内置数据源")
        sources = [cls(timeout=timeout) for cls in BUILTIN_SOURCES]

    return SourceRegistry(sources, config.default_provider)
