"""
Unit tests for output post-processing helpers.
"""

import pytest

from aibridge.llm.postprocess import clean_json, is_valid_result, strip_reasoning_block


class TestStripReasoningBlock:
    """Tests for strip_reasoning_block()."""

    def test_removes_leading_block(self):
        assert strip_reasoning_block("<think>reasoning</think>Hi") == "Hi"

    def test_removes_whitespace_after_block(self):
        assert strip_reasoning_block("<think>\nstep 1\nstep 2\n</think>\n\nAnswer") == "Answer"

    def test_case_insensitive_tags(self):
        assert strip_reasoning_block("<THINK>x</Think>Answer") == "Answer"

    @pytest.mark.parametrize("text", [
        "Plain answer",
        "",
        " <think>indented</think>Answer",
        "Answer <think>later</think>",
        "<think>never closed",
    ])
    def test_text_without_leading_block_is_unchanged(self, text):
        assert strip_reasoning_block(text) == text

    def test_only_first_block_removed(self):
        text = "<think>a</think>Answer <think>b</think> more"
        assert strip_reasoning_block(text) == "Answer <think>b</think> more"

    def test_stacked_blocks_removed_one_per_call(self):
        once = strip_reasoning_block("<think>a</think>\n<think>b</think>X")
        assert once == "<think>b</think>X"
        assert strip_reasoning_block(once) == "X"

    def test_unclosed_block_after_closed_one_is_kept(self):
        text = "<think>a</think>\n<think>never closed"
        assert strip_reasoning_block(text) == "<think>never closed"

    @pytest.mark.parametrize("text", [
        "<think>a</think>Answer",
        "Answer",
        "<think>a</think>\n  Answer <think>b</think>",
        "<think>a</think>\n<think>never closed",
    ])
    def test_idempotent(self, text):
        once = strip_reasoning_block(text)
        assert strip_reasoning_block(once) == once


class TestCleanJson:
    def test_unwraps_fenced_block(self):
        assert clean_json('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_multiline_payload(self):
        raw = '```json\n{\n  "a": 1\n}\n```'
        assert clean_json(raw) == '{\n  "a": 1\n}'

    def test_unfenced_input_returned_as_is(self):
        assert clean_json('{"a": 1}') == '{"a": 1}'

    def test_other_language_fence_untouched(self):
        raw = "```python\nprint(1)\n```"
        assert clean_json(raw) == raw


class TestIsValidResult:
    def test_matching_value(self):
        assert is_valid_result({"priority": "high"}, "priority", "high") is True

    def test_other_value(self):
        assert is_valid_result({"priority": "high"}, "priority", "low") is False

    def test_missing_key(self):
        assert is_valid_result({}, "priority", "high") is False
