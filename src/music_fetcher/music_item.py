"""音乐条目模块"""
from typing import Optional, Dict, Any

UNKNOWN_ARTIST = "未知歌手"


class MusicItem:
    """统一的搜索结果条目"""
    def __init__(self, id: str, title: str, artist: str, provider: str,
                 album: Optional[str] = None, cover: Optional[str] = None,
                 duration: Optional[str] = None, extra: Any = None):
        self.id = id
        self.title = title
        self.artist = artist
        self.provider = provider  # 产生该条目的数据源名称
        self.album = album
        self.cover = cover
        self.duration = duration
        self.extra = extra  # 数据源私有数据，原样传回 resolve

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "provider": self.provider,
        }
        for key in ("album", "cover", "duration", "extra"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MusicItem":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            artist=data.get("artist", UNKNOWN_ARTIST),
            provider=data["provider"],
            album=data.get("album"),
            cover=data.get("cover"),
            duration=data.get("duration"),
            extra=data.get("extra"),
        )

    def __eq__(self, other):
        if not isinstance(other, MusicItem):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"MusicItem({self.to_dict()!r})"

    def __str__(self):
        return f"{self.artist} - {self.title} [{self.provider}:{self.id}]"


class PlayInfo:
    """播放地址解析结果"""
    def __init__(self, url: str, type: str = "mp3", bitrate: Optional[str] = None,
                 cover: Optional[str] = None, lyrics: Optional[str] = None):
        self.url = url
        self.type = type  # mp3 / m4a / flac 或任意字符串，仅用作文件名提示
        self.bitrate = bitrate
        self.cover = cover  # 若存在，覆盖搜索阶段得到的封面
        self.lyrics = lyrics

    def to_dict(self) -> Dict[str, Any]:
        data = {"url": self.url, "type": self.type}
        for key in ("bitrate", "cover", "lyrics"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    def __repr__(self):
        return f"PlayInfo({self.to_dict()!r})"
