"""
Tests for remote reply parsing
"""
import pytest

from remote import build_evaluation_prompt, parse_remote_score, strip_code_fences


class TestParseRemoteScore:
    @pytest.mark.parametrize(
        "reply, expected",
        [
            ('```json\n{"score": 85}\n```', 85),
            ('```\n{"score": 12}\n```', 12),
            ('{"score": 40}', 40),
            ("Score: 72/100", 72),
            ('{"score": 87.5}', 87),
            ('{"score": "high"}', None),
            ("no digits here", None),
            ("", None),
            (None, None),
            ({"score": 80}, None),
            (80, None),
        ],
    )
    def test_replies(self, reply, expected):
        assert parse_remote_score(reply) == expected

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences("  plain  ") == "plain"

    def test_prompt_mentions_both_answers(self):
        prompt = build_evaluation_prompt("Paris", "paris!")
        assert '"paris!"' in prompt
        assert '"Paris"' in prompt
        assert '"score"' in prompt
