# coffeeshop/middleware.py
"""ASGI middleware making up the request pipeline.

Outer to inner the server stacks them as:

    TransportTimeoutMiddleware -> RequestTimeoutMiddleware
        -> SetHeaderMiddleware -> DelayMiddleware -> router

Each stage only looks at HTTP scopes and passes anything else (lifespan)
straight through.
"""
import asyncio
import logging
from datetime import timedelta
from typing import Union

from starlette.datastructures import MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

Seconds = Union[float, timedelta]


class PeerTimeoutError(Exception):
    """The client was too slow sending its request or reading the response."""


def _seconds(value: Seconds) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class DelayMiddleware:
    """Pause every request for a fixed time before handing it on."""

    def __init__(self, app: ASGIApp, delay: Seconds) -> None:
        self.app = app
        self.delay = _seconds(delay)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self.delay > 0:
            await asyncio.sleep(self.delay)
        await self.app(scope, receive, send)


class SetHeaderMiddleware:
    """Force a header onto every response."""

    def __init__(self, app: ASGIApp, name: str, value: str) -> None:
        self.app = app
        self.name = name
        self.value = value

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[self.name] = self.value
            await send(message)

        await self.app(scope, receive, send_with_header)


class RequestTimeoutMiddleware:
    """Bound the total time spent handling a request.

    When the inner pipeline overruns and nothing has been sent yet, the
    client gets a 504 with an empty body. If the response had already
    started there is nothing left to replace, and the timeout propagates to
    the server which drops the connection.
    """

    def __init__(self, app: ASGIApp, timeout: Seconds, media_type: str = JSON_CONTENT_TYPE) -> None:
        self.app = app
        self.timeout = _seconds(timeout)
        self.media_type = media_type

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_tracking), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("request %s %s timed out after %.3fs", scope["method"], scope["path"], self.timeout)
            if response_started:
                raise
            response = Response(status_code=504, media_type=self.media_type)
            await response(scope, receive, send)


class TransportTimeoutMiddleware:
    """Bound how long the server waits on slow peers.

    The read timeout covers receiving the complete request body; the write
    timeout applies to every message sent back.
    """

    def __init__(self, app: ASGIApp, read_timeout: Seconds, write_timeout: Seconds) -> None:
        self.app = app
        self.read_timeout = _seconds(read_timeout)
        self.write_timeout = _seconds(write_timeout)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        loop = asyncio.get_running_loop()
        read_deadline = loop.time() + self.read_timeout
        body_complete = False

        async def timed_receive() -> Message:
            nonlocal body_complete
            if body_complete:
                # past the body only disconnect notifications are left
                return await receive()
            remaining = max(read_deadline - loop.time(), 0)
            try:
                message = await asyncio.wait_for(receive(), timeout=remaining)
            except asyncio.TimeoutError as exc:
                raise PeerTimeoutError(f"request not received within {self.read_timeout}s") from exc
            if message["type"] != "http.request" or not message.get("more_body", False):
                body_complete = True
            return message

        async def timed_send(message: Message) -> None:
            try:
                await asyncio.wait_for(send(message), timeout=self.write_timeout)
            except asyncio.TimeoutError as exc:
                raise PeerTimeoutError(f"response not written within {self.write_timeout}s") from exc

        await self.app(scope, timed_receive, timed_send)
