"""Tests for model output decoding helpers."""

import pytest

from diy_hub.errors import DecodeError
from diy_hub.utils import parse_model_json, strip_code_fence


class TestStripCodeFence:

    def test_plain_text_is_untouched(self):
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_untyped_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_fence_without_newlines(self):
        assert strip_code_fence('```json{"a": 1}```') == '{"a": 1}'


class TestParseModelJson:

    def test_fenced_object(self):
        assert parse_model_json('```json\n{"title": "Shelf"}\n```') == {"title": "Shelf"}

    def test_invalid_json_is_a_decode_error(self):
        with pytest.raises(DecodeError):
            parse_model_json("Sure! Here is your plan.")

    def test_empty_fence_is_a_decode_error(self):
        with pytest.raises(DecodeError):
            parse_model_json("```\n```")
