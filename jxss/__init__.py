"""
jXSS - find reflected XSS in inline JavaScript.

For every target page jXSS:
- Extracts variable assignments from inline <script> blocks
- Re-requests the page with a canary in a same-named query parameter
- Reports assignments that echo the canary back unescaped

Requests are spread over a rotating proxy pool (HTTP(S) or SOCKS5) and
throttled by one shared rate limit across all workers.
"""

__version__ = "1.0.0"

from jxss.config import JXSSConfig
from jxss.detectors.inline_js import Finding, InlineJSDetector, scan
from jxss.scanner import JXSSScanner, ScanSummary
from jxss.utils.http import ClientHandle, ClientProvider
from jxss.utils.ratelimit import RateGate

__all__ = [
    "JXSSConfig",
    "Finding",
    "InlineJSDetector",
    "scan",
    "JXSSScanner",
    "ScanSummary",
    "ClientHandle",
    "ClientProvider",
    "RateGate",
    "__version__",
]
