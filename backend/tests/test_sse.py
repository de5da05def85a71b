"""Tests for SSE line decoding."""

from llm.sse import decode_data_line


class TestDecodeDataLine:
    def test_data_line(self):
        event = decode_data_line('data: {"type": "ping"}')
        assert event == {"type": "ping"}

    def test_non_data_lines_are_skipped(self):
        assert decode_data_line("event: content_block_delta") is None
        assert decode_data_line(": keep-alive") is None
        assert decode_data_line("") is None

    def test_done_sentinel_and_empty_payload(self):
        assert decode_data_line("data: [DONE]") is None
        assert decode_data_line("data: ") is None

    def test_malformed_json_is_skipped(self):
        assert decode_data_line('data: {"type": "content_block_delta", "del') is None

    def test_non_object_payload_is_skipped(self):
        assert decode_data_line("data: [1, 2, 3]") is None
