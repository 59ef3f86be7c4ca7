"""Shared HTTP helpers for playlist and segment requests."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Mapping, Optional

import aiohttp
import requests
from pydantic import BaseModel, Field
from urllib3.exceptions import ReadTimeoutError

from ..errors import Cancelled, FetchTimeout, ReadError, TransportError
from .url_utils import require_absolute_url

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS: Dict[str, str] = {
    "user-agent": DEFAULT_USER_AGENT,
    "accept": "*/*",
}


class ClientConfig(BaseModel):
    """Transport settings passed explicitly to every fetch."""

    headers: Dict[str, str] = Field(default_factory=lambda: DEFAULT_HEADERS.copy())
    timeout: float = Field(default=10.0, gt=0)
    deadline: Optional[float] = Field(default=None, gt=0)
    follow_redirects: bool = True
    chunk_size: int = Field(default=1 << 14, gt=0)

    def merged_headers(self, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        merged = {name.lower(): value for name, value in self.headers.items()}
        if extra:
            merged.update({name.lower(): value for name, value in extra.items()})
        return merged


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _log_redirect(requested: str, final: str) -> None:
    if final and final != requested:
        logging.info("GET %s was redirected to %s", requested, final)


class FetchResponse:
    """An open response whose body is read in chunks, honouring deadline and cancellation."""

    def __init__(
        self,
        url: str,
        response: requests.Response,
        config: ClientConfig,
        started_at: float,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.url = url
        self.final_url = response.url or url
        self.status_code = response.status_code
        self._response = response
        self._config = config
        self._started_at = started_at
        self._cancel_event = cancel_event

    def iter_chunks(self) -> Iterator[bytes]:
        try:
            for chunk in self._response.iter_content(chunk_size=self._config.chunk_size):
                self._check_budget()
                if chunk:
                    yield chunk
        except requests.Timeout as exc:
            raise FetchTimeout(self.url, self._config.timeout) from exc
        except requests.RequestException as exc:
            if exc.args and isinstance(exc.args[0], ReadTimeoutError):
                raise FetchTimeout(self.url, self._config.timeout) from exc
            logging.error("Body of %s could not be read: %s", self.url, exc)
            raise ReadError(self.url, str(exc)) from exc

    def read_all(self) -> bytes:
        return b"".join(self.iter_chunks())

    def close(self) -> None:
        self._response.close()

    def _check_budget(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise Cancelled(f"GET {self.url} cancelled")
        deadline = self._config.deadline
        if deadline is not None and time.monotonic() - self._started_at > deadline:
            raise FetchTimeout(self.url, deadline)


class HttpClient:
    """Performs GET requests for playlists and segments with shared headers."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._session = session or requests.Session()
        self._owns_session = session is None

        self._async_session: Optional[aiohttp.ClientSession] = None
        self._async_lock: Optional[asyncio.Lock] = None
        self._async_loop: Optional[asyncio.AbstractEventLoop] = None

    @contextmanager
    def open(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[FetchResponse]:
        """GET ``url`` and yield the open response; it is closed on every exit path."""

        require_absolute_url(url)
        if cancel_event is not None and cancel_event.is_set():
            raise Cancelled(f"GET {url} cancelled")

        started_at = time.monotonic()
        try:
            response = self._session.get(
                url,
                headers=self.config.merged_headers(headers),
                timeout=self.config.timeout,
                stream=True,
                allow_redirects=self.config.follow_redirects,
            )
        except requests.Timeout as exc:
            logging.error("GET %s timed out: %s", url, exc)
            raise FetchTimeout(url, self.config.timeout) from exc
        except requests.RequestException as exc:
            logging.error("GET %s failed: %s", url, exc)
            raise TransportError(url, str(exc)) from exc

        try:
            if not _is_success(response.status_code):
                logging.error("GET %s returned status %s", url, response.status_code)
                raise TransportError(
                    url,
                    f"HTTP {response.status_code} {response.reason or ''}".rstrip(),
                    status_code=response.status_code,
                )
            _log_redirect(url, response.url)
            yield FetchResponse(url, response, self.config, started_at, cancel_event)
        finally:
            response.close()

    def fetch_bytes(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> bytes:
        """GET ``url`` and return its fully drained body."""

        with self.open(url, headers=headers, cancel_event=cancel_event) as response:
            return response.read_all()

    async def fetch_bytes_async(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> bytes:
        """Asynchronously GET ``url`` and return its fully drained body."""

        require_absolute_url(url)
        session = await self._get_async_session()
        try:
            async with session.get(
                url,
                headers=self.config.merged_headers(headers),
                allow_redirects=self.config.follow_redirects,
            ) as resp:
                if not _is_success(resp.status):
                    logging.error("GET %s returned status %s", url, resp.status)
                    raise TransportError(
                        url,
                        f"HTTP {resp.status} {resp.reason or ''}".rstrip(),
                        status_code=resp.status,
                    )
                _log_redirect(url, str(resp.url))
                chunks = []
                try:
                    async for chunk in resp.content.iter_chunked(self.config.chunk_size):
                        if cancel_event is not None and cancel_event.is_set():
                            raise Cancelled(f"GET {url} cancelled")
                        chunks.append(chunk)
                except asyncio.TimeoutError:
                    raise
                except (aiohttp.ClientPayloadError, aiohttp.ClientConnectionError) as exc:
                    logging.error("Body of %s could not be read: %s", url, exc)
                    raise ReadError(url, str(exc)) from exc
                return b"".join(chunks)
        except asyncio.TimeoutError as exc:
            logging.error("GET %s timed out", url)
            raise FetchTimeout(url, self.config.deadline or self.config.timeout) from exc
        except aiohttp.ClientError as exc:
            logging.error("GET %s failed: %s", url, exc)
            raise TransportError(url, str(exc)) from exc

    async def _get_async_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()
        if self._async_session:
            if (
                self._async_session.closed
                or not self._async_loop
                or self._async_loop.is_closed()
                or self._async_loop is not current_loop
            ):
                await self.aclose()

        if self._async_lock is None:
            self._async_lock = asyncio.Lock()

        async with self._async_lock:
            if self._async_session and not self._async_session.closed:
                return self._async_session
            timeout = aiohttp.ClientTimeout(
                total=self.config.deadline,
                sock_connect=self.config.timeout,
                sock_read=self.config.timeout,
            )
            self._async_session = aiohttp.ClientSession(timeout=timeout)
            self._async_loop = current_loop
        return self._async_session

    async def aclose(self) -> None:
        """Closes the aiohttp session bound to the running loop, if any."""

        if self._async_session and not self._async_session.closed:
            await self._async_session.close()
        self._async_session = None
        self._async_lock = None
        self._async_loop = None

    def close(self) -> None:
        """Closes the requests session. The aiohttp session is closed by :meth:`aclose`."""

        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
