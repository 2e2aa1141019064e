"""Figify 命令行入口

子命令:
    figify serve                      只运行 Bridge 服务器，等待插件连接
    figify extract SNAPSHOT.json      离线把页面快照转换为图层树 JSON
    figify import URL [--layers]      截图/提取并发送到 Figma 插件
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from rich.console import Console

from . import config
from .bridge import BridgeServer, FigmaBridge
from .extraction import DomNode, extract_layers
from .runtime import create_session
from .summary import build_tree
from .telemetry import get_logger, setup_logging

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="figify", description="Web page → Figma layers")
    parser.add_argument("--log-level", default=None, help="日志级别（默认 FIGIFY_LOG_LEVEL）")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="运行 Bridge WebSocket 服务器")
    serve.add_argument("--port", type=int, default=config.BRIDGE_PORT)

    extract = sub.add_parser("extract", help="页面快照 JSON → 图层树 JSON")
    extract.add_argument("snapshot", type=Path)
    extract.add_argument("-o", "--output", type=Path, default=None)
    extract.add_argument("--summary", action="store_true", help="在 stderr 打印树形摘要")

    imp = sub.add_parser("import", help="捕获页面并发送到 Figma 插件")
    imp.add_argument("source")
    imp.add_argument(
        "--viewport",
        dest="viewports",
        action="append",
        choices=sorted(config.VIEWPORTS),
        help="可重复，默认 desktop",
    )
    imp.add_argument("--layers", action="store_true", help="发送可编辑图层而不是截图")
    imp.add_argument("--port", type=int, default=config.BRIDGE_PORT)
    imp.add_argument("--wait", type=float, default=config.PLUGIN_CONNECT_WAIT_SECONDS)
    return parser


async def _serve(port: int) -> int:
    server = BridgeServer(FigmaBridge(), port=port)
    print(f"Figify bridge listening on ws://{server.host}:{port}")
    await server.serve()
    return 0


def _extract(snapshot: Path, output: Path | None, show_summary: bool) -> int:
    body = DomNode.from_dict(json.loads(snapshot.read_text(encoding="utf-8")))
    result = extract_layers(body)
    text = json.dumps(result.root.to_dict(), indent=2)
    if output is not None:
        output.write_text(text, encoding="utf-8")
    else:
        print(text)
    if show_summary:
        Console(stderr=True).print(build_tree(result.root))
    logger.info(f"[CLI] {result.layer_count} layers extracted from {snapshot}")
    return 0


async def _import(source: str, viewports: list[str], layers: bool, port: int, wait: float) -> int:
    session = create_session(port=port)
    await session.start()
    try:
        print(f"Waiting up to {wait:.0f}s for the Figma plugin on port {port}...")
        if not await session.wait_for_connection(wait):
            print(session.check_connection().message)
            return 1
        if layers:
            result = await session.import_page_as_layers(source, viewports)
        else:
            result = await session.import_page(source, viewports)
        print(result.message)
        return 0 if result.success else 1
    finally:
        await session.close()


def main(argv: list[str] | None = None) -> int:
    """入口函数"""
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.command == "serve":
            return asyncio.run(_serve(args.port))
        if args.command == "extract":
            return _extract(args.snapshot, args.output, args.summary)
        if args.command == "import":
            return asyncio.run(
                _import(args.source, args.viewports or ["desktop"], args.layers, args.port, args.wait)
            )
    except KeyboardInterrupt:
        print("\nStopped")
        return 130
    return 2


if __name__ == "__main__":
    sys.exit(main())
