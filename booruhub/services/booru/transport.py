import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Protocol

import requests

from .request_builder import RequestTarget

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "booruhub/0.1 (+https://pypi.org/project/booruhub/)"
DEFAULT_TIMEOUT = 15  # seconds

@dataclass(frozen=True)
class RedirectResult:
    """Outcome of a request sent with redirect following disabled."""
    status_code: int
    location: Optional[str] = None

    @property
    def captured(self) -> bool:
        return self.location is not None

class Transport(Protocol):
    async def get(self, target: RequestTarget) -> bytes:
        ...

    async def get_redirect(self, target: RequestTarget) -> RedirectResult:
        ...

class RequestsTransport:
    """
    Sends requests through requests sessions.

    Blocking calls run in worker threads so callers can await them. Each
    worker thread gets its own Session, since a Session is not guaranteed to
    be thread-safe; an injected session is used as is by every thread.
    Network errors and non-success statuses surface as requests exceptions.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.timeout = timeout
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "application/json, application/xml;q=0.9",
        }
        self._shared_session = session
        if session is not None:
            session.headers.update(self.headers)
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The calling thread's session."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    async def get(self, target: RequestTarget) -> bytes:
        response = await asyncio.to_thread(self._send, target, True)
        response.raise_for_status()
        return response.content

    async def get_redirect(self, target: RequestTarget) -> RedirectResult:
        response = await asyncio.to_thread(self._send, target, False)
        if response.is_redirect:
            return RedirectResult(status_code=response.status_code, location=response.headers.get("Location"))
        response.raise_for_status()
        return RedirectResult(status_code=response.status_code)

    def _send(self, target: RequestTarget, allow_redirects: bool) -> requests.Response:
        logger.debug(f"GET {target.url} params={sorted(target.params)} redirects={allow_redirects}")
        return self.session.get(
            target.url,
            params=target.params,
            headers=target.headers or None,
            timeout=self.timeout,
            allow_redirects=allow_redirects,
        )

    def close(self) -> None:
        if self._shared_session is not None:
            self._shared_session.close()
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
