"""
Main scanner for jXSS.

Runs a fixed pool of async workers over the target list and collects their
findings.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from jxss.config import JXSSConfig
from jxss.detectors.inline_js import (
    DEFAULT_PATTERN,
    EMPTY_LITERAL_PATTERN,
    Finding,
    InlineJSDetector,
)
from jxss.errors import FetchError, RateLimitError
from jxss.utils.http import ClientProvider, read_urls
from jxss.utils.ratelimit import RateGate


@dataclass
class ScanSummary:
    """Result of a scan run."""
    findings: list[Finding] = field(default_factory=list)
    urls_processed: int = 0
    errors: int = 0
    scan_time: float = 0.0


class JXSSScanner:
    """Fans targets out to workers and fans findings back in."""

    def __init__(
        self,
        config: JXSSConfig | None = None,
        provider: ClientProvider | None = None,
        gate: RateGate | None = None,
        logger: logging.Logger | None = None,
    ):
        self.config = config or JXSSConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.provider = provider
        self.gate = gate or RateGate(self.config.rate_limit)
        # A fresh event per run; asyncio events bind to the loop they first wait on.
        self._cancel: asyncio.Event | None = None
        self._cancel_requested = False
        self._on_finding: Callable[[Finding], None] | None = None
        self._on_progress: Callable[[str, int, int], None] | None = None

    def on_finding(self, callback: Callable[[Finding], None]):
        """Set callback for when a finding is discovered."""
        self._on_finding = callback

    def on_progress(self, callback: Callable[[str, int, int], None]):
        """Set callback for progress updates (message, current, total)."""
        self._on_progress = callback

    @property
    def patterns(self) -> list[str]:
        """Built-in pattern followed by configured ones."""
        builtin = EMPTY_LITERAL_PATTERN if self.config.empty_literals_only else DEFAULT_PATTERN
        return [builtin, *self.config.patterns]

    def cancel(self):
        """Cancel the current (or next) run. Pending rate-limit waits fail with RateLimitError."""
        self._cancel_requested = True
        if self._cancel is not None:
            self._cancel.set()

    async def scan(self, targets: list[str]) -> ScanSummary:
        """
        Scan every target with ``config.concurrency`` workers.

        Args:
            targets: URLs to scan

        Returns:
            ScanSummary with all findings, in arrival order
        """
        start_time = time.time()
        summary = ScanSummary()

        if not self.config.canary:
            raise ValueError("canary must be set before scanning")

        self._cancel = asyncio.Event()
        if self._cancel_requested:
            self._cancel.set()

        own_provider = self.provider is None
        provider = self.provider or ClientProvider(
            self.config.proxies,
            timeout=self.config.timeout,
            verify_ssl=self.config.verify_ssl,
            headers=self.config.headers,
            logger=self.logger,
        )
        detector = InlineJSDetector(
            self.config.canary,
            self.patterns,
            gate=self.gate,
            cancel=self._cancel,
            logger=self.logger,
        )

        url_queue: asyncio.Queue[str] = asyncio.Queue()
        for target in targets:
            url_queue.put_nowait(target)
        # Unbounded: a full results queue must never stall a worker.
        results: asyncio.Queue[Finding] = asyncio.Queue()

        workers = [
            asyncio.create_task(
                self._worker(i, url_queue, results, detector, provider, summary, len(targets))
            )
            for i in range(max(1, self.config.concurrency))
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            if own_provider:
                await provider.close()
            self._cancel_requested = False

        while not results.empty():
            summary.findings.append(results.get_nowait())

        summary.scan_time = time.time() - start_time
        return summary

    async def _worker(
        self,
        worker_id: int,
        url_queue: "asyncio.Queue[str]",
        results: "asyncio.Queue[Finding]",
        detector: InlineJSDetector,
        provider: ClientProvider,
        summary: ScanSummary,
        total: int,
    ):
        """Pull targets until the queue is drained."""
        while True:
            try:
                target = url_queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            summary.urls_processed += 1
            if self._on_progress:
                self._on_progress(f"Scanning {target}", summary.urls_processed, total)

            handle = provider.next()
            try:
                findings = await detector.scan_url(target, handle)
            except (FetchError, RateLimitError) as e:
                summary.errors += 1
                self.logger.error(
                    "Error processing URL %s: %s", target, e,
                    extra={"url": target, "error": str(e), "worker": worker_id},
                )
                continue
            except Exception as e:
                summary.errors += 1
                self.logger.exception(
                    "Unexpected error processing URL %s", target,
                    extra={"url": target, "error": str(e), "worker": worker_id},
                )
                continue

            for finding in findings:
                results.put_nowait(finding)
                self.logger.info(
                    "Reflection detected: %s in %s", finding.variable, finding.url,
                    extra={"url": finding.url, "variable": finding.variable},
                )
                if self._on_finding:
                    try:
                        self._on_finding(finding)
                    except Exception:
                        self.logger.exception(
                            "on_finding callback failed for %s", finding.url,
                            extra={"url": finding.url, "variable": finding.variable},
                        )

    async def scan_file(self, filepath: str | Path) -> ScanSummary:
        """Scan URLs from a file (one per line)."""
        return await self.scan(read_urls(filepath))

