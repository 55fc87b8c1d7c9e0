#!/usr/bin/env python3

import sys
import json
import asyncio
import logging
import argparse

from music_fetcher import MusicFinder, ResolutionError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _print_json(data):
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _parse_pick(value: str):
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"无效的序号: {value}")


async def run(args) -> int:
    finder = MusicFinder(config_path=args.config)

    if args.command == "search":
        items = await finder.search(args.query, args.provider)
        _print_json([item.to_dict() for item in items])
        return 0

    if args.command == "url":
        extra = json.loads(args.extra) if args.extra else None
        try:
            play_info = await finder.resolve(args.id, args.provider, extra)
        except ResolutionError as e:
            logger.error(f"无法获取播放地址: {str(e)}")
            return 1
        _print_json(play_info.to_dict())
        return 0

    # download
    items = await finder.search(args.query, args.provider)
    if not items:
        logger.warning(f"没有找到歌曲: {args.query}")
        return 1
    picked = [items[i - 1] for i in args.pick if 1 <= i <= len(items)]
    if not picked:
        logger.error(f"序号超出范围，共 {len(items)} 条结果")
        return 1
    saved = await finder.download(picked, args.output)
    for path in saved:
        print(path)
    return 0 if len(saved) == len(picked) else 1


def main():
    parser = argparse.ArgumentParser(description="音乐聚合搜索下载工具")
    parser.add_argument("--config", help="配置文件路径")
    parser.add_argument("--debug", action="store_true", help="启用调试模式")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="搜索歌曲")
    search_parser.add_argument("query", help="搜索关键字")
    search_parser.add_argument("--provider", help="数据源名称，all 表示全部")

    url_parser = subparsers.add_parser("url", help="获取播放地址")
    url_parser.add_argument("id", help="歌曲 id")
    url_parser.add_argument("--provider", required=True, help="数据源名称")
    url_parser.add_argument("--extra", help="搜索结果中的 extra（JSON）")

    download_parser = subparsers.add_parser("download", help="搜索并下载歌曲")
    download_parser.add_argument("query", help="搜索关键字")
    download_parser.add_argument("--provider", help="数据源名称，all 表示全部")
    download_parser.add_argument("--pick", type=_parse_pick, default=[1], help="下载的结果序号，如 1,3")
    download_parser.add_argument("--output", help="保存目录")

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Debug mode enabled")

    if args.command in ("search", "download") and not args.query.strip():
        parser.error("搜索关键字不能为空")

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
