#!/usr/bin/env python3
"""Tests for compdb_deps/json_stream.py"""

import io
import json
from typing import Any, Dict, Iterator

import pytest

from compdb_deps.constants import MalformedInputError, RecordDecodeError
from compdb_deps.json_stream import iter_json_array


def decode(text: str, **kwargs: Any) -> list:
    return list(iter_json_array(io.BytesIO(text.encode("utf-8")), **kwargs))


class TestIterJsonArrayMatchesJsonLoads:
    """Streaming decode must agree with whole-document decode."""

    @pytest.mark.parametrize(
        "document",
        [
            "[1]",
            "[1, 2, 3]",
            '[{"file": "a.cpp", "command": "g++ -Iinc -c a.cpp"}]',
            '[{"a": [1, {"b": [2, 3]}]}, [], {}, "x", null, true, false, -1.5e3]',
            '[{"s": "brackets ] } [ { inside"}, "esc \\" ]"]',
            '["backslash at end \\\\", "unicode \\u00e9 é"]',
            ' \n\t[ \n 1 ,\n\t2 \n] ',
            "[[[[]]]]",
        ],
    )
    def test_same_as_json_loads(self, document: str) -> None:
        """Test decoded elements equal json.loads() of the whole array."""
        assert decode(document) == json.loads(document)

    def test_small_chunks(self) -> None:
        """Test records spanning many read chunks."""
        document = json.dumps([{"file": f"f{i}.cpp", "command": "g++ -I include" * 5} for i in range(20)])
        assert decode(document, chunk_size=1) == json.loads(document)
        assert decode(document, chunk_size=7) == json.loads(document)

    def test_text_stream(self) -> None:
        """Test that text streams are accepted as well as binary ones."""
        assert list(iter_json_array(io.StringIO('["é", 2]'))) == ["é", 2]


class TestIterJsonArrayEmpty:
    """Test empty arrays."""

    def test_empty_array(self) -> None:
        assert decode("[]") == []

    def test_empty_array_with_whitespace(self) -> None:
        assert decode("  [ \n ]  ") == []


class TestIterJsonArrayMalformed:
    """Test malformed outer shapes."""

    def test_object_instead_of_array(self) -> None:
        """Test that a top-level object fails before any record is produced."""
        records = iter_json_array(io.BytesIO(b'{"file": "a.cpp"}'))
        with pytest.raises(MalformedInputError, match="`\\[` not found"):
            next(records)

    def test_empty_input(self) -> None:
        with pytest.raises(MalformedInputError, match="premature EOF"):
            decode("")

    def test_whitespace_only_input(self) -> None:
        with pytest.raises(MalformedInputError, match="premature EOF"):
            decode("   \n")

    def test_missing_separator(self) -> None:
        """Test that a missing comma fails after the first record."""
        records = iter_json_array(io.BytesIO(b"[1 2]"))
        assert next(records) == 1
        with pytest.raises(MalformedInputError, match="`,` or `]` not found"):
            next(records)

    def test_unterminated_array(self) -> None:
        with pytest.raises(MalformedInputError, match="premature EOF"):
            decode("[1, 2")

    def test_eof_after_comma(self) -> None:
        with pytest.raises(MalformedInputError, match="premature EOF"):
            decode("[1,")

    def test_unterminated_object(self) -> None:
        with pytest.raises(MalformedInputError, match="premature EOF"):
            decode('[{"file": "a.cpp"')

    def test_unterminated_string(self) -> None:
        with pytest.raises(MalformedInputError, match="premature EOF"):
            decode('["abc')

    def test_malformed_is_database_error(self) -> None:
        """Test that malformed input is reported through the database error hierarchy."""
        from compdb_deps.constants import CompilationDatabaseError

        with pytest.raises(CompilationDatabaseError):
            decode("nope")


class TestIterJsonArrayRecords:
    """Test record decoding and record factories."""

    def test_invalid_element(self) -> None:
        with pytest.raises(RecordDecodeError):
            decode("[{bad}]")

    def test_trailing_comma(self) -> None:
        with pytest.raises(RecordDecodeError):
            decode("[1,]")

    def test_record_factory_applied(self) -> None:
        """Test that each element passes through the record factory."""
        assert decode('[{"n": 1}, {"n": 2}]', record_factory=lambda d: d["n"] * 10) == [10, 20]

    def test_record_factory_error_propagates(self) -> None:
        def reject(entry: Dict[str, Any]) -> Any:
            raise RecordDecodeError("missing field `file`")

        with pytest.raises(RecordDecodeError, match="missing field"):
            decode('[{"n": 1}]', record_factory=reject)

    def test_trailing_garbage_ignored(self) -> None:
        """Test that nothing after the closing bracket is inspected."""
        assert decode("[1, 2] this is not json {") == [1, 2]


class TestIterJsonArrayLaziness:
    """Test that records are produced one at a time."""

    def test_first_record_before_later_error(self) -> None:
        """Test that a broken later element does not prevent reading earlier ones."""
        records = iter_json_array(io.BytesIO(b'[{"a": 1}, {broken'))
        assert next(records) == {"a": 1}
        with pytest.raises((MalformedInputError, RecordDecodeError)):
            next(records)

    def test_reads_incrementally(self) -> None:
        """Test that the stream is not consumed past the first record on the first pull."""

        class CountingStream(io.BytesIO):
            def __init__(self, data: bytes) -> None:
                super().__init__(data)
                self.bytes_read = 0

            def read(self, size: int = -1) -> bytes:  # type: ignore[override]
                chunk = super().read(size)
                self.bytes_read += len(chunk)
                return chunk

        data = json.dumps([{"file": f"f{i}.cpp"} for i in range(1000)]).encode("utf-8")
        stream = CountingStream(data)
        records: Iterator[Any] = iter_json_array(stream, chunk_size=64)

        assert next(records) == {"file": "f0.cpp"}
        assert stream.bytes_read <= 128
        assert len(list(records)) == 999

    def test_not_restartable(self) -> None:
        records = iter_json_array(io.BytesIO(b"[1, 2]"))
        assert list(records) == [1, 2]
        assert list(records) == []
