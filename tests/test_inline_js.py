"""Tests for the inline JavaScript reflection detector."""

import asyncio
import logging

import httpx
import pytest

from jxss.detectors.inline_js import (
    DEFAULT_PATTERN,
    EMPTY_LITERAL_PATTERN,
    InlineJSDetector,
    compile_patterns,
    extract_scripts,
    find_candidates,
    is_reflected,
    scan,
)
from jxss.errors import FetchError, RateLimitError
from jxss.utils.ratelimit import RateGate
from tests.helpers import CANARY, CountingGate, make_handle, page, reflecting_handler


def run(coro):
    return asyncio.run(coro)


class TestExtraction:
    def test_extracts_non_blank_scripts(self):
        body = (
            "<script>var a = '';</script>"
            "<script>   \n  </script>"
            "<script src='/x.js'></script>"
            "<div><script>let b = \"\";</script></div>"
        )
        assert extract_scripts(body) == ["var a = '';", 'let b = "";']

    def test_no_scripts(self):
        assert extract_scripts("<html><body><p>hello</p></body></html>") == []

    def test_script_with_markup_inside_string(self):
        scripts = extract_scripts("<script>var html = '<b>x</b>';</script>")
        assert scripts == ["var html = '<b>x</b>';"]


class TestCandidates:
    def test_default_pattern_matches_any_literal(self):
        script = "var a = ''; let B = \"abc\"; const c='q\\'r'; d = '';"
        patterns = compile_patterns([DEFAULT_PATTERN])
        names = [c.variable for c in find_candidates([script], patterns)]
        assert names == ["a", "B", "c"]

    def test_empty_literal_pattern_matches_only_empty(self):
        script = "var a = ''; let b = \"abc\"; const c = \"\";"
        patterns = compile_patterns([EMPTY_LITERAL_PATTERN])
        names = [c.variable for c in find_candidates([script], patterns)]
        assert names == ["a", "c"]

    def test_mismatched_quotes_not_a_candidate(self):
        patterns = compile_patterns([EMPTY_LITERAL_PATTERN])
        assert list(find_candidates(["var a = '\";"], patterns)) == []

    def test_duplicate_matches_are_each_candidates(self):
        patterns = compile_patterns([DEFAULT_PATTERN])
        names = [c.variable for c in find_candidates(["var q = ''; var q = '';"], patterns)]
        assert names == ["q", "q"]

    def test_invalid_pattern_skipped_others_applied(self, caplog):
        with caplog.at_level(logging.WARNING):
            patterns = compile_patterns(["(unclosed", DEFAULT_PATTERN])
        assert len(patterns) == 1
        assert "Skipping pattern" in caplog.text
        names = [c.variable for c in find_candidates(["var ok = '';"], patterns)]
        assert names == ["ok"]

    def test_pattern_without_group_ignored(self):
        patterns = compile_patterns([r"var\s+\w+", DEFAULT_PATTERN])
        assert [p.pattern for p in patterns] == [DEFAULT_PATTERN]

    def test_empty_group_ignored(self):
        patterns = compile_patterns([r"var\s+(\w*)\s*;"])
        assert list(find_candidates(["var ;"], patterns)) == []


class TestReflection:
    def test_same_quotes(self):
        assert is_reflected(f"var x = '{CANARY}';", "x", CANARY)
        assert is_reflected(f'LET x="{CANARY}"', "x", CANARY)

    def test_mixed_quotes_rejected(self):
        assert not is_reflected(f"var x = '{CANARY}\";", "x", CANARY)

    def test_other_value_rejected(self):
        assert not is_reflected("var x = 'something-else';", "x", CANARY)

    def test_different_variable_rejected(self):
        assert not is_reflected(f"var xy = '{CANARY}';", "x", CANARY)

    def test_metacharacters_escaped(self):
        assert is_reflected("var $a = 'c.n(r)y';", "$a", "c.n(r)y")
        assert not is_reflected("var $a = 'cXn(r)y';", "$a", "c.n(r)y")


class TestPipeline:
    def test_reflected_candidate_yields_finding(self):
        requests = []
        handle = make_handle(reflecting_handler("x"), requests)
        detector = InlineJSDetector(CANARY, [EMPTY_LITERAL_PATTERN])

        findings = run(detector.scan_url("http://target.test/page", handle))

        assert requests == [
            "http://target.test/page",
            f"http://target.test/page?x={CANARY}",
        ]
        assert len(findings) == 1
        finding = findings[0]
        assert finding.url == f"http://target.test/page?x={CANARY}"
        assert finding.variable == "x"
        assert finding.status == "reflected"
        assert finding.message == f"Canary '{CANARY}' reflected in variable 'x'"

    def test_not_reflected(self):
        def handler(request):
            if "x" in request.url.params:
                return httpx.Response(200, text=page("var x = 'something-else';"))
            return httpx.Response(200, text=page("var x = '';"))

        requests = []
        handle = make_handle(handler, requests)
        findings = run(scan("http://target.test/", CANARY, [EMPTY_LITERAL_PATTERN], handle))

        assert findings == []
        assert len(requests) == 2

    def test_mixed_quote_reflection_is_not_a_finding(self):
        def handler(request):
            if "x" in request.url.params:
                return httpx.Response(200, text=page(f"var x = '{CANARY}\";"))
            return httpx.Response(200, text=page("var x = '';"))

        findings = run(scan("http://target.test/", CANARY, [EMPTY_LITERAL_PATTERN], make_handle(handler)))
        assert findings == []

    def test_variable_lowercased_in_query(self):
        requests = []
        handle = make_handle(reflecting_handler("UserName", quote='"'), requests)

        findings = run(scan("http://target.test/?a=1", CANARY, [DEFAULT_PATTERN], handle))

        assert requests[1] == f"http://target.test/?a=1&username={CANARY}"
        assert [f.variable for f in findings] == ["UserName"]

    def test_non_2xx_body_still_scanned(self):
        def handler(request):
            value = request.url.params.get("x", "")
            return httpx.Response(404, text=page(f"var x = '{value}';"))

        findings = run(scan("http://target.test/", CANARY, [EMPTY_LITERAL_PATTERN], make_handle(handler)))
        assert len(findings) == 1

    def test_baseline_fetch_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError) as exc:
            run(scan("http://down.test/", CANARY, [DEFAULT_PATTERN], make_handle(handler)))
        assert exc.value.url == "http://down.test/"

    def test_injected_fetch_failure_skips_candidate(self):
        def handler(request):
            if "a" in request.url.params:
                raise httpx.ReadTimeout("timed out", request=request)
            value = request.url.params.get("b", "")
            return httpx.Response(200, text=page(f"var a = ''; var b = '{value}';"))

        findings = run(scan("http://target.test/", CANARY, [EMPTY_LITERAL_PATTERN], make_handle(handler)))
        assert [f.variable for f in findings] == ["b"]

    def test_no_scripts_no_findings(self):
        requests = []
        handle = make_handle(lambda r: httpx.Response(200, text="<p>plain</p>"), requests)
        findings = run(scan("http://target.test/", CANARY, [DEFAULT_PATTERN], handle))
        assert findings == []
        assert len(requests) == 1

    def test_findings_never_come_from_baseline(self):
        # The baseline already contains the canary, but the injected page does not.
        def handler(request):
            if request.url.params:
                return httpx.Response(200, text=page("var x = 'scrubbed'; var y = '';"))
            return httpx.Response(200, text=page(f"var x = ''; var y = '{CANARY}';"))

        findings = run(scan("http://target.test/", CANARY, [DEFAULT_PATTERN], make_handle(handler)))
        assert findings == []

    def test_every_request_takes_a_token(self):
        gate = CountingGate()
        handle = make_handle(reflecting_handler("x"))
        detector = InlineJSDetector(CANARY, [EMPTY_LITERAL_PATTERN], gate=gate)

        run(detector.scan_url("http://target.test/", handle))
        assert gate.count == 2

    def test_cancelled_gate_abandons_url(self):
        requests = []
        handle = make_handle(reflecting_handler("x"), requests)
        cancel = asyncio.Event()
        cancel.set()
        detector = InlineJSDetector(CANARY, [EMPTY_LITERAL_PATTERN], gate=RateGate(100), cancel=cancel)

        with pytest.raises(RateLimitError):
            run(detector.scan_url("http://target.test/", handle))
        assert requests == []

    def test_empty_canary_rejected(self):
        with pytest.raises(ValueError):
            InlineJSDetector("", [DEFAULT_PATTERN])
