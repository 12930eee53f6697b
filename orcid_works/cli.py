"""Command line tool: fetch every work detail of an ORCID iD into a JSON file."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Protocol, Sequence

import httpx

from orcid_works.api import OrcidApiError, fetch_work_detail, fetch_works
from orcid_works.compare import detail_changed
from orcid_works.model import ModelError, OrcidWorkDetail, OrcidWorkDetailFile

APP_NAME = "orcid-works-cli"
APP_VERSION = "0.1.0"
REPO_URL = "https://example.com/orcid-works-cli"

MIN_RATE_LIMIT = 1
MAX_RATE_LIMIT = 40


class _Serializable(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


class RateLimiter:
    """Requests-per-second limiter allowing a burst of ``per_second`` requests."""

    def __init__(
        self,
        per_second: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if per_second < 1:
            raise ValueError("rate limit must be at least 1 request per second")
        self._interval = 1.0 / per_second
        self._tolerance = (per_second - 1) * self._interval
        self._clock = clock
        self._sleep = sleep
        self._tat: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until one more request is allowed."""
        async with self._lock:
            now = self._clock()
            tat = now if self._tat is None else max(self._tat, now)
            wait = tat - self._tolerance - now
            self._tat = tat + self._interval
        if wait > 0:
            await self._sleep(wait)


def build_user_agent(note: str | None) -> str:
    """User-Agent string, with ``note`` appended when it is not blank."""
    base = f"{APP_NAME}/{APP_VERSION} (+{REPO_URL})"
    if note is not None and note.strip():
        return f"{base}; {note}"
    return base


def _rate_limit(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if not MIN_RATE_LIMIT <= value <= MAX_RATE_LIMIT:
        raise argparse.ArgumentTypeError(
            f"{value} is not in {MIN_RATE_LIMIT}..={MAX_RATE_LIMIT}"
        )
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Fetch all WorkDetails for a given ORCID iD (ORCID API v3.0)",
        epilog="Disclaimer: This is a third-party tool and not endorsed by ORCID.",
    )
    parser.add_argument("-i", "--id", required=True, help="ORCID iD (xxxx-xxxx-xxxx-xxxx)")
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        default=Path("./output.json"),
        help="Output path to the JSON file; Parent dirs are created if absent.",
    )
    parser.add_argument(
        "--concurrency", type=int, default=10, help="Maximum parallel requests"
    )
    parser.add_argument(
        "--rate-limit",
        type=_rate_limit,
        default=12,
        help="Requests-per-second cap (1-40).",
    )
    parser.add_argument(
        "--user-agent-note",
        default=None,
        help="Extra text appended to the built-in User-Agent string [default: None]",
    )
    parser.add_argument("-V", "--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def write_if_changed(
    path: str | Path,
    value: _Serializable,
    is_changed: Callable[[Path, Any], bool],
) -> bool:
    """Write ``value`` as pretty JSON atomically if ``is_changed`` says so.

    Returns True if the file was written.
    """
    path = Path(path)
    if not is_changed(path, value):
        print(f"[{APP_NAME}] no changes in {path}")
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(value.to_dict(), indent=2, ensure_ascii=False)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)
    print(f"[{APP_NAME}] wrote {path}")
    return True


async def fetch_all_details(
    client: httpx.AsyncClient,
    orcid: str,
    putcodes: Iterable[int],
    concurrency: int,
    limiter: RateLimiter | None,
) -> list[OrcidWorkDetail]:
    """Fetch the details of ``putcodes`` in parallel, sorted by put-code."""
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")
    slots = asyncio.Semaphore(concurrency)

    async def fetch_one(putcode: int) -> OrcidWorkDetail:
        async with slots:
            if limiter is not None:
                await limiter.acquire()
            return await fetch_work_detail(client, orcid, putcode)

    results = await asyncio.gather(
        *(fetch_one(pc) for pc in putcodes), return_exceptions=True
    )
    details: list[OrcidWorkDetail] = []
    for result in results:
        if isinstance(result, BaseException):
            raise result
        details.append(result)
    details.sort(key=lambda detail: detail.summary.put_code)
    return details


async def run(args: argparse.Namespace) -> OrcidWorkDetailFile:
    """Fetch all works of ``args.id`` and write them to ``args.out``."""
    user_agent = build_user_agent(args.user_agent_note)
    print(f"[{APP_NAME}] {user_agent}")
    limiter = RateLimiter(args.rate_limit)
    async with httpx.AsyncClient(headers={"User-Agent": user_agent}) as client:
        print(f"[{APP_NAME}] fetch work summaries of ORCID iD {args.id}")
        try:
            works = await fetch_works(client, args.id)
        except OrcidApiError as exc:
            raise OrcidApiError(f"fetch work summaries of {args.id}: {exc}") from exc

        putcodes = [
            summary.put_code for group in works.group for summary in group.work_summary
        ]
        print(f"[{APP_NAME}] fetch work details of ORCID iD {args.id}")
        details = await fetch_all_details(client, args.id, putcodes, args.concurrency, limiter)

    detail_file = OrcidWorkDetailFile(records=details)
    write_if_changed(args.out, detail_file, detail_changed)
    print(f"[{APP_NAME}] finished: {len(detail_file.records)} entries → {args.out}")
    return detail_file


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run(args))
    except (OrcidApiError, ModelError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())