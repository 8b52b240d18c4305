"""
Tests for PICS protocol request parsing.

Tests:
- Recognition of the request prefix
- Detail level selection and its priority order
- Service list extraction
- Rejection of malformed and oversized requests
- Per-render caching in PicsRequestContext
"""

import os
import sys
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from pics_request import (
    MAX_REQUESTED_SERVICES,
    DetailLevel,
    ParsedPicsRequest,
    PicsRequestContext,
    parse_protocol_request,
)


def _request(services, params="full"):
    quoted = " ".join(f'"{service}"' for service in services)
    return "{PICS-1.1 {params " + params + " services " + quoted + "}}}"


class TestParseProtocolRequest:
    """Tests for parse_protocol_request."""

    def test_full_request_with_two_services(self):
        """Should parse the detail level and both services."""
        result = parse_protocol_request('{pics-1.1 {params full services "a" "b"}}}')
        assert result == ParsedPicsRequest(
            completeness=DetailLevel.FULL, services=("a", "b")
        )

    def test_prefix_is_case_insensitive(self):
        """Should accept the prefix in any case."""
        result = parse_protocol_request('{PICS-1.1 {PARAMS SHORT services "http://x/"}}}')
        assert result is not None
        assert result.completeness is DetailLevel.SHORT

    def test_services_keep_original_case(self):
        """Should not lowercase the service URLs."""
        result = parse_protocol_request(_request(["http://Example.com/Ratings"]))
        assert result.services == ("http://Example.com/Ratings",)

    @pytest.mark.parametrize(
        "params,expected",
        [
            ("minimal", DetailLevel.MINIMAL),
            ("short", DetailLevel.SHORT),
            ("full", DetailLevel.FULL),
            ("signed", DetailLevel.SIGNED),
            ("whatever", DetailLevel.MINIMAL),
        ],
    )
    def test_detail_levels(self, params, expected):
        """Should map the params keyword to a detail level."""
        result = parse_protocol_request(_request(["svc"], params=params))
        assert result.completeness is expected

    def test_short_wins_over_later_keywords(self):
        """Should apply the fixed short, full, signed priority."""
        header = '{pics-1.1 {params signed params full params short services "a"}}}'
        assert parse_protocol_request(header).completeness is DetailLevel.SHORT

    def test_full_wins_over_signed(self):
        """Should prefer full when both full and signed appear."""
        header = '{pics-1.1 {params signed params full services "a"}}}'
        assert parse_protocol_request(header).completeness is DetailLevel.FULL

    def test_unquoted_single_service(self):
        """Should treat a quote-free payload as one service name."""
        result = parse_protocol_request('{pics-1.1 {params full services "only-one"}}}')
        assert result.services == ("only-one",)

    def test_services_never_carry_quotes(self):
        """Split service names should not contain separator quotes."""
        result = parse_protocol_request(_request(["a", "b", "c"]))
        assert all('"' not in service for service in result.services)

    @pytest.mark.parametrize(
        "header",
        [
            None,
            "",
            "{PICS-1.0 {params full services \"a\"}}}",
            "pics-1.1 {params full services \"a\"}}}",
            "{pics-1.1 {params full}}}",
            "{pics-1.1 {params full services \"a\"",
            "{pics-1.1 {params \"}}} services \"a",
        ],
    )
    def test_malformed_requests_are_absent(self, header):
        """Should treat malformed requests as no request."""
        assert parse_protocol_request(header) is None

    def test_nine_services_accepted(self):
        """Should accept requests just under the sanity limit."""
        services = [f"svc{i}" for i in range(MAX_REQUESTED_SERVICES - 1)]
        result = parse_protocol_request(_request(services))
        assert result is not None
        assert len(result.services) == 9

    def test_ten_services_rejected(self):
        """Should reject requests naming ten or more services."""
        services = [f"svc{i}" for i in range(MAX_REQUESTED_SERVICES)]
        assert parse_protocol_request(_request(services)) is None


class TestPicsRequestContext:
    """Tests for the render-scoped request context."""

    def test_no_header_means_minimal(self):
        """Should default to minimal detail without a request."""
        context = PicsRequestContext(None)
        assert context.parsed is None
        assert context.detail_level is DetailLevel.MINIMAL

    def test_detail_level_from_request(self):
        """Should expose the requested completeness."""
        context = PicsRequestContext(_request(["a"], params="short"))
        assert context.detail_level is DetailLevel.SHORT

    def test_parses_once(self):
        """Should parse on first access and reuse the result."""
        context = PicsRequestContext(_request(["a"]))
        with patch("pics_request.parse_protocol_request", wraps=parse_protocol_request) as parser:
            first = context.parsed
            second = context.parsed
            _ = context.detail_level
        assert first is second
        assert parser.call_count == 1

    def test_absent_result_is_cached(self):
        """Should also cache the 'no request' result."""
        context = PicsRequestContext("not a pics request")
        with patch("pics_request.parse_protocol_request", wraps=parse_protocol_request) as parser:
            assert context.parsed is None
            assert context.parsed is None
        assert parser.call_count == 1

    def test_contexts_are_independent(self):
        """Separate renders should not share parsed requests."""
        first = PicsRequestContext(_request(["a"]))
        second = PicsRequestContext(None)
        assert first.parsed is not None
        assert second.parsed is None
