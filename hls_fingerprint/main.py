from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, Dict, List, Optional, Tuple

from dotenv import load_dotenv

from .errors import HLSFingerprintError, URLParseError
from .fingerprinter import StreamFingerprinter
from .models import SegmentFingerprint
from .utils.http_client import DEFAULT_HEADERS, ClientConfig, HttpClient
from .utils.url_utils import require_absolute_url

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_URL = 2
EXIT_INTERRUPTED = 130

load_dotenv()


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _env_bool(name: str) -> bool:
    value = _env_str(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _header_arg(value: str) -> Tuple[str, str]:
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected 'Name: value', got {value!r}")
    return name.strip(), header_value.strip()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fingerprint every segment of the lowest-bandwidth rendition of an HLS stream."
    )
    parser.add_argument("url", help="Absolute URL of the master playlist")
    parser.add_argument(
        "--json",
        action="store_true",
        default=_env_bool("HLSFP_JSON"),
        help="Print one JSON object per segment instead of the text line",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=_env_int("HLSFP_WORKERS") or 1,
        help="Segments to download concurrently (output order is unchanged)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=_env_float("HLSFP_TIMEOUT") or 10.0,
        help="Per-request connect/read timeout in seconds",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=_env_float("HLSFP_DEADLINE"),
        help="Optional overall limit in seconds for each request including its body",
    )
    parser.add_argument(
        "--user-agent",
        default=_env_str("HLSFP_USER_AGENT") or DEFAULT_HEADERS["user-agent"],
        help="User-Agent header sent with every request",
    )
    parser.add_argument(
        "--header",
        dest="headers",
        type=_header_arg,
        action="append",
        default=[],
        help="Extra request header as 'Name: value' (repeatable)",
    )
    parser.add_argument("--no-redirects", action="store_true", help="Treat HTTP redirects as failures")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def build_config(args: argparse.Namespace) -> ClientConfig:
    headers: Dict[str, str] = DEFAULT_HEADERS.copy()
    headers["user-agent"] = args.user_agent
    for name, value in args.headers:
        headers[name.lower()] = value
    return ClientConfig(
        headers=headers,
        timeout=args.timeout,
        deadline=args.deadline,
        follow_redirects=not args.no_redirects,
    )


def make_printer(as_json: bool) -> Callable[[SegmentFingerprint], None]:
    def emit(record: SegmentFingerprint) -> None:
        print(record.to_json() if as_json else record.to_line(), flush=True)

    return emit


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        require_absolute_url(args.url)
    except URLParseError as exc:
        logging.error("Error parsing URL %s: %s", args.url, exc.reason)
        return EXIT_BAD_URL

    if args.workers < 1:
        logging.error("--workers must be at least 1")
        return EXIT_FAILURE

    try:
        config = build_config(args)
    except ValueError as exc:
        logging.error("Invalid transport settings: %s", exc)
        return EXIT_FAILURE

    emitted = 0

    def on_record(record: SegmentFingerprint) -> None:
        nonlocal emitted
        emitted += 1
        printer(record)

    printer = make_printer(args.json)
    with HttpClient(config) as http_client:
        fingerprinter = StreamFingerprinter(http_client, workers=args.workers)
        try:
            fingerprinter.run(args.url, on_record=on_record)
        except HLSFingerprintError as exc:
            logging.error("%s (after %s segments)", exc, emitted)
            return EXIT_FAILURE
        except KeyboardInterrupt:
            logging.warning("Interrupted after %s segments", emitted)
            return EXIT_INTERRUPTED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
