"""异常定义模块"""
from typing import Optional


class MusicFetcherError(Exception):
    """所有异常的基类"""


class ResolutionError(MusicFetcherError):
    """无法解析出播放地址"""
    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider

    def __str__(self):
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class ExtractionError(ResolutionError):
    """详情页中找不到或无法解析内嵌数据"""


class ApiError(ResolutionError):
    """数据源接口返回了非成功状态，message 为数据源给出的提示"""
