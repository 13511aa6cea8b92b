"""CLI entrypoint for roast batches, persona classification and video status."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
import sys
from typing import Any, Dict, List, Optional

from config import get_settings
from core import BatchOptions, ProfileRecord
from utils.exceptions import RoastPipelineError
from utils.logger import setup_logger


def _emit(payload: Dict[str, Any], out: Optional[str] = None) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
    if out:
        Path(out).write_text(text, encoding="utf-8")
        print(json.dumps({"written": out}, ensure_ascii=False))
        return
    print(text)


def _load_profile(path: str) -> ProfileRecord:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict) and "profile" in data:
        data = data["profile"]
    return ProfileRecord.model_validate(data)


async def _roast(args: argparse.Namespace) -> Dict[str, Any]:
    from orchestrator.service import build_orchestrator
    from scrapers import StaticProfileSource

    settings = get_settings()
    source = StaticProfileSource.from_json_file(args.profiles_json) if args.profiles_json else None
    orchestrator = build_orchestrator(settings, profile_source=source)
    options = BatchOptions(
        generate_video=settings.pipeline.generate_video and not args.no_video,
        callback_url=args.callback_url,
    )
    try:
        result = await orchestrator.run_batch(list(args.identifiers), options)
    finally:
        await orchestrator.aclose()
    return result.to_payload()


async def _video_status(args: argparse.Namespace) -> Dict[str, Any]:
    from render import VideoRenderManager

    renderer = VideoRenderManager(settings=get_settings().video)
    try:
        job = await renderer.lookup(args.talk_id)
    finally:
        await renderer.aclose()
    return job.model_dump(mode="json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Persona roast pipeline CLI")
    parser.add_argument("--log-level", default=None, help="Override PIPELINE_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    roast = sub.add_parser("roast", help="Run a roast batch")
    roast.add_argument("identifiers", nargs="+", help="LinkedIn profile URLs")
    roast.add_argument("--no-video", action="store_true", help="Skip talking-head video rendering")
    roast.add_argument("--callback-url", default=None)
    roast.add_argument("--profiles-json", default=None, help="Serve profiles from a JSON file instead of Proxycurl")
    roast.add_argument("--out", default=None, help="Write the batch payload to this file")

    classify = sub.add_parser("classify", help="Classify one profile JSON file")
    classify.add_argument("--profile-json", required=True)

    status = sub.add_parser("video-status", help="Poll an existing video job")
    status.add_argument("--talk-id", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind host")
    serve.add_argument("--port", type=int, default=8765, help="Bind port")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(level=args.log_level or get_settings().pipeline.log_level)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("webapp.app:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    try:
        if args.command == "roast":
            _emit(asyncio.run(_roast(args)), args.out)
        elif args.command == "classify":
            from persona import PersonaClassifier

            result = PersonaClassifier(get_settings().persona).classify(_load_profile(args.profile_json))
            _emit(result.model_dump(mode="json"))
        elif args.command == "video-status":
            _emit(asyncio.run(_video_status(args)))
    except RoastPipelineError as exc:
        print(json.dumps({"success": False, "error": exc.message, "details": exc.details}, ensure_ascii=False, default=str), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
