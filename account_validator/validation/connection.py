"""
Remote connection boundary — the read-only calls the orchestrator issues.

RemoteConnection is structural: any object exposing these coroutines works
(a live messaging client adapter, or MockConnection below).
"""
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class RemoteConnection(Protocol):
    async def check_existence(self, jid: str) -> List[dict]: ...

    async def fetch_status(self, jid: str) -> Optional[dict]: ...

    async def fetch_profile_picture(self, jid: str, kind: str = "image") -> Any: ...

    async def fetch_business_profile(self, jid: str) -> Any: ...

    async def subscribe_presence(self, jid: str) -> Any: ...


class MockConnection:
    """
    Scripted in-memory connection for tests and local runs.

    Behaviour is keyed by method name ("check_existence", "fetch_status",
    "fetch_profile_picture", "fetch_business_profile", "subscribe_presence"):

        responses: method → payload returned on success
        errors:    method → exception (or list of exceptions consumed one per
                   call; once exhausted the call succeeds)
        delays:    method → seconds to sleep before answering

    `per_jid` overrides any of the three maps for a specific jid.
    """

    DEFAULT_RESPONSES: Dict[str, Any] = {
        "check_existence": [{"exists": True}],
        "fetch_status": {"status": "Hey there! I am using WhatsApp."},
        "fetch_profile_picture": "https://pps.example.net/v/t61/avatar.jpg",
        "fetch_business_profile": None,
        "subscribe_presence": {"presence": "available"},
    }

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        errors: Optional[Dict[str, Any]] = None,
        delays: Optional[Dict[str, float]] = None,
        per_jid: Optional[Dict[str, dict]] = None,
    ):
        self.responses = {**self.DEFAULT_RESPONSES, **(responses or {})}
        self.errors = dict(errors or {})
        self.delays = dict(delays or {})
        self.per_jid = per_jid or {}
        self.calls: Dict[str, int] = defaultdict(int)
        self._pending_errors: Dict[tuple, list] = {}

    async def _call(self, method: str, jid: str) -> Any:
        self.calls[method] += 1
        override = self.per_jid.get(jid, {})

        delay = override.get("delays", {}).get(method, self.delays.get(method, 0))
        if delay:
            await asyncio.sleep(delay)

        error = override.get("errors", {}).get(method, self.errors.get(method))
        if isinstance(error, list):
            queue = self._pending_errors.setdefault((jid, method), list(error))
            if queue:
                raise queue.pop(0)
        elif error is not None:
            raise error

        return override.get("responses", {}).get(method, self.responses.get(method))

    async def check_existence(self, jid: str) -> List[dict]:
        return await self._call("check_existence", jid)

    async def fetch_status(self, jid: str) -> Optional[dict]:
        return await self._call("fetch_status", jid)

    async def fetch_profile_picture(self, jid: str, kind: str = "image") -> Any:
        return await self._call("fetch_profile_picture", jid)

    async def fetch_business_profile(self, jid: str) -> Any:
        return await self._call("fetch_business_profile", jid)

    async def subscribe_presence(self, jid: str) -> Any:
        return await self._call("subscribe_presence", jid)
