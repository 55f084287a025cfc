# Licensed to the Apache Software Foundation (ASF) under one
# or more contributor license agreements.  See the NOTICE file
# distributed with this work for additional information
# regarding copyright ownership.  The ASF licenses this file
# to you under the Apache License, Version 2.0 (the
# "License"); you may not use this file except in compliance
# with the License.  You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

"""Buffered byte cursor with bounded lookahead."""

import io
from typing import BinaryIO, Callable, Optional, Union

from proto_ls.parser.errors import ReadError

Source = Union[bytes, bytearray, str, BinaryIO]


class ByteCursor:
    """Streams bytes from a binary source, buffering only the lookahead.

    ``peek`` and ``pop`` return ``None`` at end of input. ``line`` and
    ``column`` are the 1-based position of the next unread byte.
    """

    LOOKAHEAD = 4

    def __init__(self, source: BinaryIO):
        self.source = source
        self.line = 1
        self.column = 1
        self._buffer = bytearray()
        self._eof = False

    @classmethod
    def wrap(cls, source: Union[Source, "ByteCursor"]) -> "ByteCursor":
        """Build a cursor over bytes, text or a readable binary stream."""
        if isinstance(source, ByteCursor):
            return source
        if isinstance(source, str):
            source = source.encode("utf-8")
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))
        return cls(source)

    def _fill(self, size: int) -> None:
        while len(self._buffer) < size and not self._eof:
            try:
                chunk = self.source.read(size - len(self._buffer))
            except OSError as exc:
                raise ReadError(
                    f"Failed to read source: {exc}", self.line, self.column
                ) from exc
            if not chunk:
                self._eof = True
                break
            self._buffer.extend(chunk)

    def at_end(self) -> bool:
        return self.peek() is None

    def peek(self) -> Optional[int]:
        if not self._buffer:
            self._fill(1)
        if not self._buffer:
            return None
        return self._buffer[0]

    def peek_bytes(self, size: int) -> bytes:
        """Return up to ``size`` upcoming bytes without consuming them."""
        if size > self.LOOKAHEAD:
            raise ValueError(f"Lookahead is limited to {self.LOOKAHEAD} bytes")
        self._fill(size)
        return bytes(self._buffer[:size])

    def pop(self) -> Optional[int]:
        byte = self.peek()
        if byte is None:
            return None
        del self._buffer[0]
        if byte == 0x0A:
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return byte

    def take_while(self, predicate: Callable[[int], bool]) -> bytes:
        """Consume bytes while ``predicate`` holds and return them."""
        taken = bytearray()
        while True:
            byte = self.peek()
            if byte is None or not predicate(byte):
                return bytes(taken)
            taken.append(byte)
            self.pop()
