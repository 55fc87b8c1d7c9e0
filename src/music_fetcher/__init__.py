"""
音乐搜索下载工具
~~~~~~~~~~~~~~~

聚合多个音乐网站的搜索结果，并解析出可播放、可下载的音频地址。
"""

from .music_finder import MusicFinder
from .music_item import MusicItem, PlayInfo
from .music_sources import MusicSource, GequbaoMusicSource, QQMp3MusicSource, SourceRegistry
from .downloader import MusicDownloader
from .errors import MusicFetcherError, ResolutionError, ExtractionError, ApiError
from .config import Config

__all__ = [
    'MusicFinder',
    'MusicItem',
    'PlayInfo',
    'MusicSource',
    'GequbaoMusicSource',
    'QQMp3MusicSource',
    'SourceRegistry',
    'MusicDownloader',
    'MusicFetcherError',
    'ResolutionError',
    'ExtractionError',
    'ApiError',
    'Config',
]
