"""Shared test helpers."""

import httpx

from jxss.utils.http import ClientHandle

CANARY = "jxss1337"


def page(script: str) -> str:
    return f"<html><head><title>t</title></head><body><script>{script}</script></body></html>"


class CountingGate:
    """Stands in for RateGate and counts acquisitions."""

    def __init__(self):
        self.count = 0

    async def acquire(self, cancel=None):
        self.count += 1


def make_handle(handler, requests: list | None = None) -> ClientHandle:
    """ClientHandle backed by a MockTransport; records requested URLs."""

    def recording(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(str(request.url))
        return handler(request)

    return ClientHandle(httpx.AsyncClient(transport=httpx.MockTransport(recording)))


def reflecting_handler(variable: str = "x", quote: str = "'"):
    """Echo the ``variable`` query parameter into ``var <variable> = '...'``."""

    def handler(request: httpx.Request) -> httpx.Response:
        value = request.url.params.get(variable.lower(), "")
        return httpx.Response(200, text=page(f"var {variable} = {quote}{value}{quote};"))

    return handler


