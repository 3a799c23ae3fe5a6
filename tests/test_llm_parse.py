import pytest

from replica.exceptions import LLMResponseError
from replica.utils.llm_parse import extract_items, parse_json_payload, strip_think_tags


class TestStripThinkTags:
    def test_removes_closed_block(self):
        assert strip_think_tags("<think>hmm</think>{}") == "{}"

    def test_removes_unterminated_block(self):
        assert strip_think_tags('{"a": 1}<think>still thinking') == '{"a": 1}'


class TestParseJsonPayload:
    def test_plain_object(self):
        assert parse_json_payload('{"a": 1}') == {"a": 1}

    def test_fenced_reply(self):
        assert parse_json_payload('```json\n[{"id": "x"}]\n```') == [{"id": "x"}]

    def test_prose_around_object(self):
        text = 'Sure! Here is the result: {"roles": []} Hope that helps.'
        assert parse_json_payload(text) == {"roles": []}

    def test_array_inside_prose(self):
        assert parse_json_payload("Result: [1, 2] done") == [1, 2]

    def test_empty_reply(self):
        with pytest.raises(LLMResponseError):
            parse_json_payload("<think>only thoughts</think>  ")

    def test_not_json(self):
        with pytest.raises(LLMResponseError):
            parse_json_payload("I cannot help with that.")


class TestExtractItems:
    def test_bare_list(self):
        assert extract_items([1, 2], "items") == [1, 2]

    def test_named_key_wins(self):
        assert extract_items({"other": [0], "overlays": [1]}, "overlays") == [1]

    def test_first_list_value_fallback(self):
        assert extract_items({"data": [3]}, "overlays") == [3]

    def test_scalar(self):
        assert extract_items("nope", "overlays") == []
