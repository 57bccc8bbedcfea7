# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for query string parsing."""

import pytest

from rest_bridge.core.engine import parse_query_string
from rest_bridge.core.models import MalformedInputError


class TestParseQueryString:
    def test_pairs(self):
        assert parse_query_string("a=1&b=2") == {"a": "1", "b": "2"}

    def test_last_value_wins(self):
        assert parse_query_string("a=1&a=2") == {"a": "2"}

    def test_segment_without_equals(self):
        with pytest.raises(MalformedInputError, match="expected to be a pair but was a"):
            parse_query_string("a")

    def test_bad_segment_among_good_ones(self):
        with pytest.raises(MalformedInputError):
            parse_query_string("a=1&b&c=3")

    def test_split_on_first_equals_only(self):
        assert parse_query_string("expr=x=y") == {"expr": "x=y"}

    def test_empty_value(self):
        assert parse_query_string("a=") == {"a": ""}

    def test_trailing_ampersand(self):
        assert parse_query_string("a=1&") == {"a": "1"}

    def test_percent_and_plus_decoding(self):
        assert parse_query_string("na%20me=a+b%26c") == {"na me": "a b&c"}

    def test_charset(self):
        assert parse_query_string("n=caf%E9", "iso-8859-1") == {"n": "café"}
        assert parse_query_string("n=caf%C3%A9") == {"n": "café"}

    def test_unknown_charset(self):
        with pytest.raises(MalformedInputError, match="Unknown charset"):
            parse_query_string("a=1", "no-such-charset")

    @pytest.mark.parametrize("query", ["a=%zz", "a=%4", "a%=1", "a=1&b=50%"])
    def test_malformed_escape(self, query: str):
        with pytest.raises(MalformedInputError, match="percent-encoding"):
            parse_query_string(query)
