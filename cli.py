"""
event-normalizer: fill event keys for a JSON-lines stream of requests.

    event-normalizer --config normalizer.yaml access.jsonl > keyed.jsonl
    tail -f access.jsonl | event-normalizer --config normalizer.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import IO, List, Optional

from pydantic import ValidationError

from config import load_normalizer_config
from logging_setup import setup_logging
from normalizer import NormalizerConfigError, build_key_builder
from pipeline import STREAM_CLOSED, NormalizationStage
from schemas import HttpRequestEvent


def _parse_event(line: str, lineno: int) -> Optional[HttpRequestEvent]:
    line = line.strip()
    if not line:
        return None
    try:
        return HttpRequestEvent.model_validate_json(line)
    except ValidationError as e:
        print(f"line {lineno}: skipping invalid event: {e.error_count()} error(s)", file=sys.stderr)
        return None


async def _pump(stage: NormalizationStage, source: IO[str], sink: IO[str], queue_size: int) -> int:
    inbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
    outbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
    worker = stage.start(inbox, outbox)

    async def write_out() -> int:
        written = 0
        while True:
            event = await outbox.get()
            if event is STREAM_CLOSED:
                return written
            sink.write(event.model_dump_json() + "\n")
            written += 1

    writer = asyncio.create_task(write_out())
    lineno = 0
    while True:
        # readline blocks, keep it off the loop so the stage keeps draining
        line = await asyncio.to_thread(source.readline)
        if not line:
            break
        lineno += 1
        event = _parse_event(line, lineno)
        if event is not None:
            await inbox.put(event)
    await inbox.put(STREAM_CLOSED)

    written = await writer
    await worker
    sink.flush()
    return written


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="event-normalizer")
    p.add_argument("input", nargs="?", default="-", help="JSON-lines events file, '-' for stdin")
    p.add_argument("--config", default=None, help="normalizer YAML configuration")
    p.add_argument("--log-level", default="WARNING")
    p.add_argument("--queue-size", type=int, default=1000)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    # logs go to stderr so stdout stays a clean event stream
    setup_logging(args.log_level, stream=sys.stderr)

    try:
        builder = build_key_builder(load_normalizer_config(args.config))
    except NormalizerConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    stage = NormalizationStage(builder)
    if args.input == "-":
        asyncio.run(_pump(stage, sys.stdin, sys.stdout, args.queue_size))
    else:
        with open(args.input, "r", encoding="utf-8") as f:
            asyncio.run(_pump(stage, f, sys.stdout, args.queue_size))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
