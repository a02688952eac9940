# -*- coding: utf-8 -*-
"""
pypartio - Binary Writer

- Centralizes binary writing with explicit endianness (big-endian for BGEO)
- Scalar writers (u16/u32), raw bytes, length-prefixed strings
- Counts every byte that reached the stream so failures can report progress
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO

from ..errors import EncodeIOError


@dataclass
class BinaryWriter:
    """
    Minimalistic binary writer with explicit endianness and a byte counter.
    """
    stream: BinaryIO
    little_endian: bool = False
    bytes_written: int = 0

    # ---- scalar writers ----
    def write_u16(self, v: int) -> None:
        self.write_bytes(struct.pack('<H' if self.little_endian else '>H', v & 0xFFFF))

    def write_u32(self, v: int) -> None:
        self.write_bytes(struct.pack('<I' if self.little_endian else '>I', v & 0xFFFFFFFF))

    # ---- bulk writers ----
    def write_bytes(self, data: bytes) -> None:
        try:
            written = self.stream.write(data)
        except OSError as e:
            raise EncodeIOError(f"write failed: {e}", self.bytes_written) from e
        # raw streams may accept fewer bytes than offered
        if written is None:
            written = len(data)
        self.bytes_written += written
        if written != len(data):
            raise EncodeIOError(
                f"short write: {written} of {len(data)} bytes accepted", self.bytes_written
            )

    def write_u16_string(self, s: str) -> None:
        """
        Write UTF-8 string prefixed with its u16 byte length. No terminator.
        """
        encoded = s.encode('utf-8')
        self.write_u16(len(encoded))
        self.write_bytes(encoded)

    def flush(self) -> None:
        try:
            self.stream.flush()
        except OSError as e:
            raise EncodeIOError(f"flush failed: {e}", self.bytes_written) from e
