"""歌曲宝数据源模块（网页抓取）"""
import re
import json
import logging
from typing import Optional, Dict, Any, List
from urllib.parse import quote

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..errors import ResolutionError, ExtractionError, ApiError
from ..music_item import MusicItem, PlayInfo, UNKNOWN_ARTIST
from .base import MusicSource, NETWORK_ERRORS

logger = logging.getLogger(__name__)

BASE_URL = "https://www.gequbao.com"
PLAY_URL_API = f"{BASE_URL}/api/play-url"
HTML_PARSER = "html.parser"

# 站点会拦截非浏览器请求，请求头需与真实浏览器保持一致
HEADERS_PAGE = {
    'accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7',
    'accept-language': 'zh-CN,zh;q=0.9,en;q=0.8',
    'cache-control': 'max-age=0',
    'priority': 'u=0, i',
    'referer': 'https://www.gequbao.com/',
    'sec-ch-ua': '"Google Chrome";v="143", "Chromium";v="143", "Not A(Brand";v="24"',
    'sec-ch-ua-mobile': '?0',
    'sec-ch-ua-platform': '"Windows"',
    'sec-fetch-dest': 'document',
    'sec-fetch-mode': 'navigate',
    'sec-fetch-site': 'same-origin',
    'sec-fetch-user': '?1',
    'upgrade-insecure-requests': '1',
    'user-agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36',
}

HEADERS_API = {
    'accept': 'application/json, text/javascript, */*; q=0.01',
    'accept-language': 'zh-CN,zh;q=0.9,en;q=0.8',
    'content-type': 'application/x-www-form-urlencoded; charset=UTF-8',
    'origin': 'https://www.gequbao.com',
    'priority': 'u=1, i',
    'sec-ch-ua': '"Google Chrome";v="143", "Chromium";v="143", "Not A(Brand";v="24"',
    'sec-ch-ua-mobile': '?0',
    'sec-ch-ua-platform': '"Windows"',
    'sec-fetch-dest': 'empty',
    'sec-fetch-mode': 'cors',
    'sec-fetch-site': 'same-origin',
    'user-agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36',
    'x-requested-with': 'XMLHttpRequest',
}

TRACK_LINK_SELECTOR = 'a[href^="/music/"]'
ARTIST_LINK_SELECTOR = 'a[href*="/singer/"], a[href*="/artist/"]'
CONTAINER_TAGS = ["li", "div", "tr"]

# 页面上的按钮、广告链接，不是歌曲
CHROME_LABELS = {"播放&下载", "播放", "下载"}
NOTICE_PREFIX = "网友刚刚下载了"

_TRACK_ID_RE = re.compile(r"/music/([0-9]+)")
_WHITESPACE_RE = re.compile(r"\s+")
_APP_DATA_RE = re.compile(r"window\.appData\s*=\s*(\{.*?\});", re.S)
_QUERY_SAFE = "!~*'()"  # 路径中不转义的字符


def _collapse(text: str) -> str:
    """合并连续空白并去除首尾空白"""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _is_decoration(title: str) -> bool:
    return not title or title in CHROME_LABELS or title.startswith(NOTICE_PREFIX)


def _find_artist(anchor: Tag, title: str) -> str:
    """
    按顺序尝试三种方式确定歌手：
    1. 所在行中指向歌手页的链接
    2. 所在行文本按 " - " 分割
    3. 标题本身按分隔符分割
    都失败时返回空字符串
    """
    container = anchor.find_parent(CONTAINER_TAGS)
    if container is not None:
        links = container.select(ARTIST_LINK_SELECTOR)
        if links:
            artist = _collapse("".join(link.get_text() for link in links))
            if artist:
                return artist

        row_text = _collapse(container.get_text())
        if " - " in row_text:
            parts = [part for part in row_text.split(" - ") if part.strip()]
            if len(parts) >= 2 and title in parts[0]:
                return parts[1].strip()

    sep = " - " if " - " in title else "-"
    if sep in title:
        # 只取前两段
        parts = [part.strip() for part in title.split(sep)[:2]]
        return parts[1]
    return ""


def _strip_artist(title: str, artist: str) -> str:
    """标题中若仍带有 " - 歌手" 或 "-歌手"，将其去掉"""
    for sep in (f" - {artist}", f"-{artist}"):
        if sep in title:
            return title.replace(sep, "", 1).strip()
    return title


def parse_search_page(html: str, provider: str = "gequbao") -> List[MusicItem]:
    """
    从搜索结果页中提取歌曲

    Args:
        html: 搜索结果页 HTML
        provider: 写入条目的数据源名称

    Returns:
        按页面顺序排列、以 (id, title) 去重后的条目列表
    """
    soup = BeautifulSoup(html, HTML_PARSER)
    items: List[MusicItem] = []

    for anchor in soup.select(TRACK_LINK_SELECTOR):
        match = _TRACK_ID_RE.search(anchor.get("href") or "")
        if not match:
            continue

        track_id = match.group(1)
        title = _collapse(anchor.get_text())
        if _is_decoration(title):
            continue

        artist = _find_artist(anchor, title)
        if artist:
            title = _strip_artist(title, artist)

        items.append(MusicItem(
            id=track_id,
            title=title,
            artist=artist or UNKNOWN_ARTIST,
            provider=provider,
        ))

    seen = set()
    unique: List[MusicItem] = []
    for item in items:
        key = (item.id, item.title)
        if key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


def extract_app_data(html: str) -> Dict[str, Any]:
    """提取详情页中 window.appData 赋值的 JSON 对象"""
    match = _APP_DATA_RE.search(html)
    if not match:
        raise ExtractionError("详情页中未找到 window.appData", provider="gequbao")
    try:
        app_data = json.loads(match.group(1))
    except ValueError as e:
        raise ExtractionError(f"window.appData 解析失败: {e}", provider="gequbao") from e
    if not isinstance(app_data, dict):
        raise ExtractionError("window.appData 不是对象", provider="gequbao")
    return app_data


class GequbaoMusicSource(MusicSource):
    """歌曲宝数据源"""

    name = "gequbao"

    async def search(self, query: str) -> List[MusicItem]:
        """搜索音乐信息"""
        try:
            url = f"{BASE_URL}/s/{quote(query, safe=_QUERY_SAFE)}"
            html = await self._fetch_text(url, HEADERS_PAGE)
            items = parse_search_page(html, self.name)
            logger.debug(f"歌曲宝搜索 {query!r} 得到 {len(items)} 条结果")
            return items
        except Exception as e:
            logger.error(f"歌曲宝搜索出错: {str(e)}")
            return []

    async def resolve(self, item_id: str, extra: Any = None) -> PlayInfo:
        """解析播放地址：详情页 -> play_id -> 播放地址接口"""
        page_url = f"{BASE_URL}/music/{item_id}"
        try:
            html = await self._fetch_text(page_url, {**HEADERS_PAGE, 'referer': f"{BASE_URL}/"})
            app_data = extract_app_data(html)
            play_id = app_data.get("play_id")
            if not play_id:
                raise ExtractionError("Failed to extract play_id", provider=self.name)
            cover: Optional[str] = app_data.get("mp3_cover") or None

            result = await self._post_form(
                PLAY_URL_API,
                {**HEADERS_API, 'referer': page_url},
                {"id": str(play_id)},
            )
        except ResolutionError as e:
            logger.error(f"歌曲宝解析播放地址出错: {str(e)}")
            raise
        except NETWORK_ERRORS as e:
            logger.error(f"歌曲宝请求失败: {str(e)}")
            raise ResolutionError(f"请求失败: {e}", provider=self.name) from e
        except ValueError as e:
            # 被拦截时接口会返回 HTML 页面
            logger.error(f"歌曲宝播放地址接口返回了非 JSON 内容: {str(e)}")
            raise ApiError("接口返回内容无法解析", provider=self.name) from e

        data = result.get("data") if isinstance(result, dict) else None
        if isinstance(data, dict) and result.get("code") == 1 and data.get("url"):
            return PlayInfo(url=data["url"], type="mp3", cover=cover)

        message = result.get("msg") if isinstance(result, dict) else None
        logger.error(f"歌曲宝播放地址接口返回错误: {result}")
        raise ApiError(message or "API error", provider=self.name)
