# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 添加 src 到 sys.path，未安装时也能导入 music_fetcher
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FakeHttp:
    """替代 MusicSource._request，按顺序返回预设响应并记录每次调用"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, method, url, headers, params=None, data=None, as_json=False):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers,
            "params": params,
            "data": data,
            "as_json": as_json,
        })
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def fake_http(monkeypatch):
    """把数据源实例的网络请求替换为 FakeHttp"""
    def install(source, *responses):
        fake = FakeHttp(*responses)
        monkeypatch.setattr(source, "_request", fake)
        return fake
    return install
