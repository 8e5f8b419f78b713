#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Incremental decoding of large top-level JSON arrays.

Compilation databases of big projects can hold hundreds of thousands of entries.
iter_json_array() walks the outer array byte by byte and hands exactly one
element at a time to the json module, so memory use is bounded by the size of
a single record (plus one read chunk) rather than by the whole document.
"""

import json
import logging
from typing import IO, Any, Callable, Iterator, Optional, TypeVar, Union

from compdb_deps.constants import READ_CHUNK_SIZE, MalformedInputError, RecordDecodeError

logger = logging.getLogger(__name__)

__all__ = ["iter_json_array"]

T = TypeVar("T")

_WHITESPACE = frozenset(b" \t\n\r")
_LBRACKET = ord("[")
_RBRACKET = ord("]")
_LBRACE = ord("{")
_RBRACE = ord("}")
_COMMA = ord(",")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")

# Bytes that end a bare scalar (number, true, false, null) inside an array
_SCALAR_TERMINATORS = _WHITESPACE | {_COMMA, _RBRACKET, _RBRACE}


class _ByteReader:
    """Chunked byte reader with a single byte of push-back."""

    def __init__(self, stream: IO[Any], chunk_size: int) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._buffer = b""
        self._pos = 0

    def read_byte(self) -> Optional[int]:
        """Return the next byte, or None at end of input."""
        if self._pos >= len(self._buffer):
            chunk: Union[str, bytes] = self._stream.read(self._chunk_size)
            if not chunk:
                return None
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            self._buffer = chunk
            self._pos = 0
        byte = self._buffer[self._pos]
        self._pos += 1
        return byte

    def unread(self) -> None:
        """Push back the byte returned by the last read_byte() call."""
        self._pos -= 1


def _read_skipping_ws(reader: _ByteReader) -> int:
    while True:
        byte = reader.read_byte()
        if byte is None:
            raise MalformedInputError("premature EOF")
        if byte not in _WHITESPACE:
            return byte


def _read_required(reader: _ByteReader) -> int:
    byte = reader.read_byte()
    if byte is None:
        raise MalformedInputError("premature EOF")
    return byte


def _collect_value(reader: _ByteReader, first: int) -> bytes:
    """Collect the raw bytes of one JSON value whose first byte was already consumed."""
    out = bytearray([first])

    if first in (_LBRACE, _LBRACKET):
        depth = 1
        in_string = False
        escaped = False
        while depth:
            byte = _read_required(reader)
            out.append(byte)
            if in_string:
                if escaped:
                    escaped = False
                elif byte == _BACKSLASH:
                    escaped = True
                elif byte == _QUOTE:
                    in_string = False
            elif byte == _QUOTE:
                in_string = True
            elif byte in (_LBRACE, _LBRACKET):
                depth += 1
            elif byte in (_RBRACE, _RBRACKET):
                depth -= 1
    elif first == _QUOTE:
        escaped = False
        while True:
            byte = _read_required(reader)
            out.append(byte)
            if escaped:
                escaped = False
            elif byte == _BACKSLASH:
                escaped = True
            elif byte == _QUOTE:
                break
    else:
        while True:
            byte = reader.read_byte()
            if byte is None:
                break
            if byte in _SCALAR_TERMINATORS:
                reader.unread()
                break
            out.append(byte)

    return bytes(out)


def _decode_single(reader: _ByteReader, first: int, record_factory: Optional[Callable[[Any], T]]) -> Any:
    raw = _collect_value(reader, first)
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise RecordDecodeError(f"Invalid JSON array element: {e}") from e

    if record_factory is None:
        return value
    return record_factory(value)


def iter_json_array(stream: IO[Any], record_factory: Optional[Callable[[Any], T]] = None, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[T]:
    """Lazily decode the elements of a top-level JSON array.

    The returned generator is finite and cannot be restarted. Nothing after the
    closing ']' is ever inspected.

    Args:
        stream: Binary (or text) file object positioned at the start of the array
        record_factory: Optional callable turning each decoded element into a record.
                        It may raise RecordDecodeError for elements of the wrong shape.
        chunk_size: Number of bytes requested from the stream per read

    Yields:
        One decoded record per array element, in document order

    Raises:
        MalformedInputError: If the input is not a JSON array or ends prematurely
        RecordDecodeError: If an element is not valid JSON or is rejected by record_factory

    Example:
        >>> import io
        >>> list(iter_json_array(io.BytesIO(b'[1, {"a": 2}]')))
        [1, {'a': 2}]
    """
    reader = _ByteReader(stream, chunk_size)

    if _read_skipping_ws(reader) != _LBRACKET:
        raise MalformedInputError("`[` not found")

    # Peek at the next byte to see if the array is empty
    peek = _read_skipping_ws(reader)
    if peek == _RBRACKET:
        return
    yield _decode_single(reader, peek, record_factory)

    while True:
        separator = _read_skipping_ws(reader)
        if separator == _RBRACKET:
            return
        if separator != _COMMA:
            raise MalformedInputError("`,` or `]` not found")
        yield _decode_single(reader, _read_skipping_ws(reader), record_factory)
