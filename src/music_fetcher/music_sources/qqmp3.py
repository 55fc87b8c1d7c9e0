"""QQMP3 数据源模块（JSON 接口）"""
import logging
from typing import Any, List

from ..errors import ResolutionError, ApiError
from ..music_item import MusicItem, PlayInfo, UNKNOWN_ARTIST
from .base import MusicSource, NETWORK_ERRORS

logger = logging.getLogger(__name__)

SEARCH_URL = "https://api.qqmp3.vip/api/songs.php"
DETAIL_URL = "https://api.qqmp3.vip/api/kw.php"

# 接口会校验 origin / referer / user-agent
HEADERS = {
    'accept': '*/*',
    'accept-language': 'zh-CN,zh;q=0.9,en;q=0.8',
    'origin': 'https://www.qqmp3.vip',
    'priority': 'u=1, i',
    'referer': 'https://www.qqmp3.vip/',
    'sec-ch-ua': '"Google Chrome";v="143", "Chromium";v="143", "Not A(Brand";v="24"',
    'sec-ch-ua-mobile': '?0',
    'sec-ch-ua-platform': '"Windows"',
    'sec-fetch-dest': 'empty',
    'sec-fetch-mode': 'cors',
    'sec-fetch-site': 'same-site',
    'user-agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36',
}

SUCCESS_CODE = 200


class QQMp3MusicSource(MusicSource):
    """QQMP3 数据源"""

    name = "qqmp3"

    async def search(self, query: str) -> List[MusicItem]:
        """搜索音乐信息"""
        try:
            data = await self._fetch_json(SEARCH_URL, HEADERS, params={
                "type": "search",
                "keyword": query,
            })

            songs = data.get("data") if isinstance(data, dict) else None
            if not isinstance(songs, list):
                return []

            items: List[MusicItem] = []
            for song in songs:
                if not isinstance(song, dict) or not song.get("rid") or not song.get("name"):
                    logger.debug(f"跳过不完整的搜索结果: {song}")
                    continue
                items.append(MusicItem(
                    id=str(song["rid"]),
                    title=song["name"],
                    artist=song.get("artist") or UNKNOWN_ARTIST,
                    cover=song.get("pic") or None,
                    provider=self.name,
                    extra={"lrc": None},  # 歌词在 resolve 时获取
                ))
            return items
        except Exception as e:
            logger.error(f"QQMP3 搜索出错: {str(e)}")
            return []

    async def resolve(self, item_id: str, extra: Any = None) -> PlayInfo:
        """解析播放地址"""
        try:
            data = await self._fetch_json(DETAIL_URL, HEADERS, params={
                "rid": item_id,
                "type": "json",
                "level": "exhigh",
                "lrc": "true",
            })
        except NETWORK_ERRORS as e:
            logger.error(f"QQMP3 请求失败: {str(e)}")
            raise ResolutionError(f"请求失败: {e}", provider=self.name) from e
        except ValueError as e:
            logger.error(f"QQMP3 返回了非 JSON 内容: {str(e)}")
            raise ApiError("接口返回内容无法解析", provider=self.name) from e

        detail = data.get("data") if isinstance(data, dict) else None
        if isinstance(detail, dict) and data.get("code") == SUCCESS_CODE and detail.get("url"):
            # 封面已在搜索结果中给出
            return PlayInfo(
                url=detail["url"],
                type="mp3",
                lyrics=detail.get("lrc") or None,
            )

        message = data.get("msg") if isinstance(data, dict) else None
        logger.error(f"QQMP3 获取播放地址失败: {data}")
        raise ApiError(message or "Failed to get play info", provider=self.name)
