"""歌曲下载模块"""
import re
import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import aiofiles
import aiohttp
from tqdm import tqdm

from .errors import ResolutionError
from .music_item import MusicItem, PlayInfo

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DOWNLOAD_HEADERS = {
    'user-agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36',
}

Resolver = Callable[[str, str, Any], Awaitable[PlayInfo]]


def clean_filename(name: str) -> str:
    """净化文件名中的非法字符"""
    name = re.sub(r'\s+', ' ', name)
    name = re.sub(r'[<>:"/\\|?*]', '_', name)
    name = name.strip()
    return name if name else "Unknown"


class MusicDownloader:
    """逐首下载歌曲

    多首歌曲串行下载，每首之间等待 delay 秒，避免触发数据源的反爬限制。
    """

    def __init__(self, resolve: Resolver, directory: str, delay: float = 1.0, timeout: float = 10):
        """
        Args:
            resolve: 解析播放地址的协程函数，签名为 (id, provider, extra)
            directory: 保存目录
            delay: 相邻两首之间的等待时间（秒）
            timeout: 连接与读取的超时（秒）
        """
        self.resolve = resolve
        self.directory = Path(directory)
        self.delay = delay
        self.timeout = timeout

    async def download_all(self, items: List[MusicItem]) -> List[str]:
        """依次下载，单首失败不影响后续歌曲"""
        if not items:
            return []

        self.directory.mkdir(parents=True, exist_ok=True)
        saved: List[str] = []
        for index, item in enumerate(tqdm(items, desc="下载歌曲")):
            if index > 0 and self.delay > 0:
                await asyncio.sleep(self.delay)
            path = await self.download_one(item)
            if path:
                saved.append(path)

        logger.info(f"下载完成: {len(saved)}/{len(items)}")
        return saved

    async def download_one(self, item: MusicItem) -> Optional[str]:
        """下载单首歌曲，失败时返回 None"""
        try:
            play_info = await self.resolve(item.id, item.provider, item.extra)
        except ResolutionError as e:
            logger.error(f"无法获取播放地址 {item}: {str(e)}")
            return None

        if play_info.cover:
            item.cover = play_info.cover

        target = self._unique_target(clean_filename(item.title), play_info.type or "mp3")
        try:
            await self._fetch_to_file(play_info.url, target)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"下载失败 {item}: {str(e)}")
            if target.exists():
                target.unlink()
            return None

        logger.info(f"已保存: {target}")
        return str(target)

    def _unique_target(self, name: str, ext: str) -> Path:
        """同名文件已存在时追加序号，如 "晴天 (2).mp3"，不覆盖已有文件"""
        target = self.directory / f"{name}.{ext}"
        counter = 2
        while target.exists():
            target = self.directory / f"{name} ({counter}).{ext}"
            counter += 1
        return target

    async def _fetch_to_file(self, url: str, target: Path) -> None:
        timeout = aiohttp.ClientTimeout(sock_connect=self.timeout, sock_read=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, headers=DOWNLOAD_HEADERS) as response:
                response.raise_for_status()
                async with aiofiles.open(target, "wb") as f:
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        await f.write(chunk)
