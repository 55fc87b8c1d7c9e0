# tests/test_http.py
"""数据源在真实 HTTP 服务下的行为：本地 aiohttp 服务模拟两个站点"""
import asyncio
import contextlib

import pytest
from aiohttp import web

import music_fetcher.music_sources.gequbao as gequbao_module
import music_fetcher.music_sources.qqmp3 as qqmp3_module
from music_fetcher.downloader import MusicDownloader
from music_fetcher.errors import ApiError, ExtractionError, ResolutionError
from music_fetcher.music_item import MusicItem
from music_fetcher.music_sources import GequbaoMusicSource, QQMp3MusicSource


SEARCH_PAGE = (
    '<html><body><ul>'
    '<li><a href="/music/12345">  晴天 - 周杰伦  </a><a href="/singer/3">周杰伦</a></li>'
    '</ul></body></html>'
)
DETAIL_PAGE = '<script>window.appData = {"play_id": "pid-77", "mp3_cover": "https://img.example.com/c.jpg"};</script>'
CAPTCHA_PAGE = "<html>请完成人机验证</html>"


# ──────────────────────────────────────────────────────────────────────────────
#                               辅助函数
# ──────────────────────────────────────────────────────────────────────────────

@contextlib.asynccontextmanager
async def _serve(routes):
    """启动本地服务，返回 base url"""
    app = web.Application()
    app.add_routes(routes)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


def _point_gequbao(monkeypatch, base_url):
    monkeypatch.setattr(gequbao_module, "BASE_URL", base_url)
    monkeypatch.setattr(gequbao_module, "PLAY_URL_API", f"{base_url}/api/play-url")


def _point_qqmp3(monkeypatch, base_url):
    monkeypatch.setattr(qqmp3_module, "SEARCH_URL", f"{base_url}/api/songs.php")
    monkeypatch.setattr(qqmp3_module, "DETAIL_URL", f"{base_url}/api/kw.php")


async def _hang(request):
    await asyncio.sleep(2)
    return web.Response(text="too late")


# ──────────────────────────────────────────────────────────────────────────────
#                                  歌曲宝
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_gequbao_search_and_resolve_over_http(monkeypatch):
    seen = {}

    async def search_page(request):
        seen["query"] = request.match_info["query"]
        seen["user_agent"] = request.headers.get("User-Agent", "")
        return web.Response(text=SEARCH_PAGE, content_type="text/html")

    async def detail_page(request):
        return web.Response(text=DETAIL_PAGE, content_type="text/html")

    async def play_url(request):
        form = await request.post()
        seen["play_id"] = form.get("id")
        seen["referer"] = request.headers.get("Referer")
        # 接口以 text/html 返回 JSON
        return web.Response(text='{"code": 1, "data": {"url": "https://cdn.example.com/a.mp3"}}',
                            content_type="text/html")

    routes = [
        web.get("/s/{query}", search_page),
        web.get("/music/{id}", detail_page),
        web.post("/api/play-url", play_url),
    ]
    async with _serve(routes) as base_url:
        _point_gequbao(monkeypatch, base_url)
        source = GequbaoMusicSource(timeout=2)

        items = await source.search("晴天")
        info = await source.resolve("12345")

    assert [(i.id, i.title, i.artist) for i in items] == [("12345", "晴天", "周杰伦")]
    assert seen["query"] == "晴天"
    assert "Chrome" in seen["user_agent"]
    assert seen["play_id"] == "pid-77"
    assert seen["referer"] == f"{base_url}/music/12345"
    assert info.url == "https://cdn.example.com/a.mp3"
    assert info.cover == "https://img.example.com/c.jpg"


@pytest.mark.asyncio
async def test_gequbao_error_status(monkeypatch):
    async def blocked(request):
        return web.Response(status=403, text="forbidden")

    routes = [web.get("/s/{query}", blocked), web.get("/music/{id}", blocked)]
    async with _serve(routes) as base_url:
        _point_gequbao(monkeypatch, base_url)
        source = GequbaoMusicSource(timeout=2)

        assert await source.search("晴天") == []
        with pytest.raises(ResolutionError) as exc_info:
            await source.resolve("12345")

    assert not isinstance(exc_info.value, (ApiError, ExtractionError))


@pytest.mark.asyncio
async def test_gequbao_non_json_play_url(monkeypatch):
    async def detail_page(request):
        return web.Response(text=DETAIL_PAGE, content_type="text/html")

    async def captcha(request):
        return web.Response(text=CAPTCHA_PAGE, content_type="text/html")

    routes = [web.get("/music/{id}", detail_page), web.post("/api/play-url", captcha)]
    async with _serve(routes) as base_url:
        _point_gequbao(monkeypatch, base_url)
        with pytest.raises(ApiError):
            await GequbaoMusicSource(timeout=2).resolve("12345")


@pytest.mark.asyncio
async def test_gequbao_timeout(monkeypatch):
    routes = [web.get("/s/{query}", _hang), web.get("/music/{id}", _hang)]
    async with _serve(routes) as base_url:
        _point_gequbao(monkeypatch, base_url)
        source = GequbaoMusicSource(timeout=0.2)

        assert await source.search("晴天") == []
        with pytest.raises(ResolutionError):
            await source.resolve("12345")


# ──────────────────────────────────────────────────────────────────────────────
#                                  QQMP3
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_qqmp3_search_and_resolve_over_http(monkeypatch):
    seen = {}

    async def songs(request):
        seen["search"] = dict(request.query)
        seen["origin"] = request.headers.get("Origin")
        return web.json_response({"data": [{"rid": "228908", "name": "晴天", "artist": "周杰伦", "pic": "p.jpg"}]})

    async def detail(request):
        seen["detail"] = dict(request.query)
        return web.json_response({"code": 200, "data": {"url": "https://cdn.example.com/q.mp3", "lrc": "[00:00]晴天"}})

    routes = [web.get("/api/songs.php", songs), web.get("/api/kw.php", detail)]
    async with _serve(routes) as base_url:
        _point_qqmp3(monkeypatch, base_url)
        source = QQMp3MusicSource(timeout=2)

        items = await source.search("晴天")
        info = await source.resolve("228908")

    assert [(i.id, i.title, i.cover) for i in items] == [("228908", "晴天", "p.jpg")]
    assert seen["search"] == {"type": "search", "keyword": "晴天"}
    assert seen["origin"] == "https://www.qqmp3.vip"
    assert seen["detail"] == {"rid": "228908", "type": "json", "level": "exhigh", "lrc": "true"}
    assert info.url == "https://cdn.example.com/q.mp3"
    assert info.lyrics == "[00:00]晴天"


@pytest.mark.asyncio
async def test_qqmp3_error_status_and_non_json(monkeypatch):
    async def unavailable(request):
        return web.Response(status=502, text="bad gateway")

    async def captcha(request):
        return web.Response(text=CAPTCHA_PAGE, content_type="text/html")

    routes = [web.get("/api/songs.php", captcha), web.get("/api/kw.php", captcha),
              web.get("/down/kw.php", unavailable)]
    async with _serve(routes) as base_url:
        _point_qqmp3(monkeypatch, base_url)
        source = QQMp3MusicSource(timeout=2)

        assert await source.search("晴天") == []
        with pytest.raises(ApiError):
            await source.resolve("1")

        monkeypatch.setattr(qqmp3_module, "DETAIL_URL", f"{base_url}/down/kw.php")
        with pytest.raises(ResolutionError) as exc_info:
            await source.resolve("1")

    assert not isinstance(exc_info.value, ApiError)


@pytest.mark.asyncio
async def test_qqmp3_timeout(monkeypatch):
    routes = [web.get("/api/songs.php", _hang), web.get("/api/kw.php", _hang)]
    async with _serve(routes) as base_url:
        _point_qqmp3(monkeypatch, base_url)
        source = QQMp3MusicSource(timeout=0.2)

        assert await source.search("晴天") == []
        with pytest.raises(ResolutionError):
            await source.resolve("1")


# ──────────────────────────────────────────────────────────────────────────────
#                                  批量下载
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_batch_download_continues_after_blocked_item(tmp_path, monkeypatch):
    async def detail(request):
        if request.query["rid"] == "1":
            return web.Response(text=CAPTCHA_PAGE, content_type="text/html")
        base = f"{request.scheme}://{request.host}"
        return web.json_response({"code": 200, "data": {"url": f"{base}/media/{request.query['rid']}.mp3"}})

    async def media(request):
        return web.Response(body=b"ID3-audio-" + request.match_info["name"].encode())

    routes = [web.get("/api/kw.php", detail), web.get("/media/{name}", media)]
    async with _serve(routes) as base_url:
        _point_qqmp3(monkeypatch, base_url)
        source = QQMp3MusicSource(timeout=2)

        async def resolve(item_id, provider, extra):
            return await source.resolve(item_id, extra)

        downloader = MusicDownloader(resolve, str(tmp_path), delay=0, timeout=2)
        items = [
            MusicItem(id="1", title="晴天", artist="周杰伦", provider="qqmp3"),
            MusicItem(id="2", title="七里香", artist="周杰伦", provider="qqmp3"),
        ]
        saved = await downloader.download_all(items)

    assert saved == [str(tmp_path / "七里香.mp3")]
    assert (tmp_path / "七里香.mp3").read_bytes() == b"ID3-audio-2.mp3"
    assert not (tmp_path / "晴天.mp3").exists()
