"""Detectors for jXSS."""

from jxss.detectors.inline_js import InlineJSDetector, Finding, Candidate

__all__ = ["InlineJSDetector", "Finding", "Candidate"]
