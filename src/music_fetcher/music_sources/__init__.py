"""音乐数据源模块"""
from .base import MusicSource
from .gequbao import GequbaoMusicSource
from .qqmp3 import QQMp3MusicSource
from .registry import SourceRegistry, create_registry, DEFAULT_SOURCE

__all__ = [
    'MusicSource',
    'GequbaoMusicSource',
    'QQMp3MusicSource',
    'SourceRegistry',
    'create_registry',
    'DEFAULT_SOURCE',
]
