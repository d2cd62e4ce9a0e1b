"""
Inline JavaScript reflection detector for jXSS.

Finds variable assignments in inline <script> blocks, injects a canary as a
same-named query parameter and confirms the canary comes back unescaped in
the same assignment.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator

from bs4 import BeautifulSoup

from jxss.errors import FetchError, ParseError, PatternError
from jxss.utils.http import ClientHandle, build_injected_url, fetch_body
from jxss.utils.ratelimit import RateGate

# Assignment of any single-line quoted literal, empty or not.
DEFAULT_PATTERN = r"""(?i)(?:var|let|const)\s+([a-zA-Z0-9_$]+)\s*=\s*(['"])(?:\\.|(?!\2)[^\\\r\n])*\2"""

# Assignment of an empty literal only ('' or "").
EMPTY_LITERAL_PATTERN = r"""(?i)(?:var|let|const)\s+([a-zA-Z0-9_$]+)\s*=\s*(['"])\2"""

STATUS_REFLECTED = "reflected"


@dataclass(frozen=True)
class Finding:
    """A confirmed reflection of the canary into an inline assignment."""
    url: str
    variable: str
    status: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert finding to dictionary."""
        return {
            "url": self.url,
            "variable": self.variable,
            "status": self.status,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        return cls(
            url=data["url"],
            variable=data["variable"],
            status=data["status"],
            message=data["message"],
        )


@dataclass(frozen=True)
class Candidate:
    """Variable name captured by a detection pattern."""
    variable: str
    pattern: str


def compile_patterns(
    patterns: list[str], logger: logging.Logger | None = None
) -> list[re.Pattern]:
    """Compile detection patterns, skipping invalid ones and ones without a group."""
    logger = logger or logging.getLogger(__name__)
    compiled = []
    for pattern in patterns:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            err = PatternError(pattern, str(e))
            logger.warning("Skipping pattern: %s", err, extra={"pattern": pattern, "error": str(e)})
            continue
        if regex.groups < 1:
            logger.debug("Pattern %r has no capturing group, ignored", pattern)
            continue
        compiled.append(regex)
    return compiled


def extract_scripts(body: str) -> list[str]:
    """Return the text of every non-blank <script> element."""
    soup = BeautifulSoup(body, "html.parser")
    scripts = []
    for tag in soup.find_all("script"):
        text = tag.get_text()
        if text.strip():
            scripts.append(text)
    return scripts


def find_candidates(scripts: list[str], patterns: list[re.Pattern]) -> Iterator[Candidate]:
    """Yield one candidate per match whose first group is non-empty."""
    for script in scripts:
        for regex in patterns:
            for match in regex.finditer(script):
                name = match.group(1)
                if name:
                    yield Candidate(variable=name, pattern=regex.pattern)


def reflection_pattern(variable: str, canary: str) -> re.Pattern:
    """Pattern for ``var <variable> = '<canary>'`` with matching quotes."""
    return re.compile(
        rf"""(?i)(?:var|let|const)\s+{re.escape(variable)}\s*=\s*(['"]){re.escape(canary)}\1"""
    )


def is_reflected(body: str, variable: str, canary: str) -> bool:
    return reflection_pattern(variable, canary).search(body) is not None


class InlineJSDetector:
    """Runs the fetch, inject, re-fetch, verify sequence for one URL at a time."""

    def __init__(
        self,
        canary: str,
        patterns: list[str],
        gate: RateGate | None = None,
        cancel: asyncio.Event | None = None,
        logger: logging.Logger | None = None,
    ):
        if not canary:
            raise ValueError("canary must not be empty")
        self.canary = canary
        self.gate = gate
        self.cancel = cancel
        self.logger = logger or logging.getLogger(__name__)
        self.patterns = compile_patterns(patterns, self.logger)

    async def _get(self, handle: ClientHandle, url: str) -> str:
        if self.gate is not None:
            await self.gate.acquire(self.cancel)
        return await fetch_body(handle, url)

    async def scan_url(self, url: str, handle: ClientHandle) -> list[Finding]:
        """
        Scan one URL.

        Raises:
            FetchError: the baseline request failed.
            RateLimitError: the run was cancelled while waiting for a token.
        """
        body = await self._get(handle, url)

        scripts = extract_scripts(body)
        if not scripts:
            self.logger.debug("No inline scripts in %s", url, extra={"url": url})
            return []

        findings = []
        for candidate in find_candidates(scripts, self.patterns):
            finding = await self._test_candidate(url, candidate, handle)
            if finding:
                findings.append(finding)
        return findings

    async def _test_candidate(
        self, url: str, candidate: Candidate, handle: ClientHandle
    ) -> Finding | None:
        """Inject the canary for one candidate and check the response."""
        try:
            injected_url = build_injected_url(url, candidate.variable, self.canary)
        except ParseError as e:
            self.logger.debug("Skipping %s: %s", candidate.variable, e, extra={"url": url})
            return None

        try:
            injected_body = await self._get(handle, injected_url)
        except FetchError as e:
            self.logger.debug(
                "Injected request failed: %s", e,
                extra={"url": injected_url, "variable": candidate.variable},
            )
            return None

        if not is_reflected(injected_body, candidate.variable, self.canary):
            return None

        return Finding(
            url=injected_url,
            variable=candidate.variable,
            status=STATUS_REFLECTED,
            message=f"Canary '{self.canary}' reflected in variable '{candidate.variable}'",
        )


async def scan(
    url: str,
    canary: str,
    patterns: list[str],
    client: ClientHandle,
    gate: RateGate | None = None,
) -> list[Finding]:
    """Scan a single URL with a one-off detector."""
    detector = InlineJSDetector(canary, patterns, gate=gate)
    return await detector.scan_url(url, client)
