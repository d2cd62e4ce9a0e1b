"""Utility modules for jXSS."""

from jxss.utils.http import ClientHandle, ClientProvider
from jxss.utils.ratelimit import RateGate

__all__ = ["ClientHandle", "ClientProvider", "RateGate"]
