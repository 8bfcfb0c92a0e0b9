import json

import pytest

from src.core.llm.exceptions import ParseError
from src.services.response_parser import ResponseParser
from tests.fakes import make_block


@pytest.fixture
def parser():
    return ResponseParser()


class TestResponseParser:

    def test_top_level_list(self, parser):
        blocks = [make_block(), make_block(kind="quiz")]
        assert parser.parse(json.dumps(blocks)) == blocks

    @pytest.mark.parametrize("key", ["blocks", "items", "contentBlocks", "content_blocks"])
    def test_known_envelope_keys(self, parser, key):
        blocks = [make_block()]
        assert parser.parse(json.dumps({"meta": {"note": "x"}, key: blocks})) == blocks

    def test_nested_data_blocks(self, parser):
        """{"data":{"blocks":[...]}} 형태에서 정확히 3개 추출"""
        blocks = [make_block(fact=f"fact {i}", title=f"t{i}") for i in range(3)]
        payload = json.dumps({"data": {"blocks": blocks}})

        assert parser.parse(payload) == blocks

    def test_first_list_field_in_order(self, parser):
        payload = json.dumps({"title": "Volcanoes", "cards": [{"a": 1}], "other": [{"b": 2}]})
        assert parser.parse(payload) == [{"a": 1}]

    def test_strips_markdown_code_fence(self, parser):
        payload = "```json\n" + json.dumps([make_block()]) + "\n```"
        assert len(parser.parse(payload)) == 1

    def test_trailing_commas_are_repaired(self, parser):
        payload = '[{"kind": "fact", "payload": {"fact": "a", "title": "b",},},]'
        assert parser.parse(payload)[0]["payload"]["title"] == "b"

    def test_array_embedded_in_prose(self, parser):
        payload = 'Here are your blocks:\n[{"kind": "fact"}]\nEnjoy!'
        assert parser.parse(payload) == [{"kind": "fact"}]

    def test_object_without_list_is_parse_error(self, parser):
        with pytest.raises(ParseError):
            parser.parse(json.dumps({"kind": "fact", "payload": {"fact": "x"}}))

    @pytest.mark.parametrize("payload", ["", "   ", "not json at all", "42", '"just a string"'])
    def test_unusable_payload_is_parse_error(self, parser, payload):
        with pytest.raises(ParseError):
            parser.parse(payload)
