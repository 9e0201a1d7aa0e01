"""Tests for telling edit replies apart from chat replies."""

import pytest
from mithoo.classify import classify, parse_edit_payload
from mithoo.models import ChatReply, EditReply


class TestParseEditPayload:
    def test_fenced_json(self):
        raw = '```json\n{"explanation":"E","newContent":"C"}\n```'
        payload = parse_edit_payload(raw)
        assert payload is not None
        assert payload.explanation == "E"
        assert payload.new_content == "C"

    def test_fenced_json_with_surrounding_prose(self):
        raw = 'Here is the update:\n```json\n{"explanation": "Tightened intro", "newContent": "# Title\\nBody"}\n```\nLet me know!'
        payload = parse_edit_payload(raw)
        assert payload.explanation == "Tightened intro"
        assert payload.new_content == "# Title\nBody"

    def test_bare_object_in_prose(self):
        raw = 'Here you go: {"explanation":"E","newContent":"C"} thanks'
        payload = parse_edit_payload(raw)
        assert payload.explanation == "E"
        assert payload.new_content == "C"

    def test_unparseable_fence_falls_back_to_braces(self):
        raw = '```json\nnot json\n```\n{"explanation":"E","newContent":"C"}'
        payload = parse_edit_payload(raw)
        assert payload.explanation == "E"

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "Sure, happy to help!",
            '{"foo":"bar"}',
            '{"explanation":"E"}',
            '{"explanation":"","newContent":"C"}',
            '{"explanation":"E","newContent":"   "}',
            '{"explanation":"E","newContent":42}',
            "Use a dict like {a: 1} in your example.",
            '["explanation", "newContent"]',
            "} backwards {",
        ],
    )
    def test_not_an_edit(self, raw):
        assert parse_edit_payload(raw) is None

    def test_wrong_shape_in_fence_is_not_retried_with_braces(self):
        raw = '```json\n{"foo": "bar"}\n```\n{"explanation":"E","newContent":"C"}'
        assert parse_edit_payload(raw) is None


class TestClassify:
    def test_edit_round_trip(self):
        raw = '```json\n{"explanation":"E","newContent":"C"}\n```'
        reply, history_text = classify(raw)
        assert reply == EditReply(explanation="E", new_content="C")
        assert history_text == "E"

    def test_bare_object(self):
        reply, _ = classify('Here you go: {"explanation":"E","newContent":"C"} thanks')
        assert isinstance(reply, EditReply)
        assert reply.new_content == "C"

    def test_wrong_shape_is_chat_verbatim(self):
        reply, history_text = classify('{"foo":"bar"}')
        assert reply == ChatReply(content='{"foo":"bar"}')
        assert history_text == '{"foo":"bar"}'

    def test_plain_text(self):
        reply, history_text = classify("Sure, happy to help!")
        assert reply == ChatReply(content="Sure, happy to help!")
        assert history_text == "Sure, happy to help!"

    def test_chat_content_is_not_trimmed(self):
        reply, _ = classify("  spaced out  \n")
        assert reply.content == "  spaced out  \n"
