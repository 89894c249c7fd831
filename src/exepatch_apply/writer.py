from __future__ import annotations

import os
import struct
from typing import BinaryIO, Sequence

import click

from exepatch_verify.const import ERRORS


class ByteWriter:
    """Seek-then-write primitive over an open binary file.

    Every write sets the position explicitly before writing. Failures are
    reported on stderr and signalled by a False return; they never raise,
    so one bad edit cannot stop the ones after it.

    The target has a fixed size: writes that start past end-of-file or run
    beyond it are refused instead of growing the file.
    """

    def __init__(self, f: BinaryIO):
        self.f = f

    def _fail(self, code: str, detail: str) -> bool:
        click.echo(f"{ERRORS[code]}: {detail}", err=True)
        return False

    def _seek(self, pos: int) -> int | None:
        """Position the cursor at `pos`; returns the file size, or None on failure."""
        if self.f is None or self.f.closed:
            self._fail("E_NOT_OPEN", f"cannot write at 0x{pos:X}")
            return None
        try:
            size = self.f.seek(0, os.SEEK_END)
            if pos < 0 or pos > size:
                self._fail("E_SEEK_FAILURE", f"offset 0x{pos:X} outside file of {size} bytes")
                return None
            self.f.seek(pos)
        except (OSError, ValueError) as e:
            self._fail("E_SEEK_FAILURE", f"offset 0x{pos:X}: {e}")
            return None
        return size

    def _write(self, pos: int, data: bytes) -> bool:
        size = self._seek(pos)
        if size is None:
            return False
        if pos + len(data) > size:
            return self._fail(
                "E_WRITE_FAILURE",
                f"{len(data)} bytes at 0x{pos:X} would extend past end of file ({size} bytes)",
            )
        try:
            written = self.f.write(data)
        except (OSError, ValueError) as e:
            return self._fail("E_WRITE_FAILURE", f"at 0x{pos:X}: {e}")
        if written is not None and written != len(data):
            return self._fail("E_WRITE_FAILURE", f"short write at 0x{pos:X} ({written} of {len(data)} bytes)")
        return True

    def _check_byte(self, pos: int, value) -> bool:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
            self._fail("E_WRITE_FAILURE", f"byte value {value!r} out of range at 0x{pos:X}")
            return False
        return True

    def write_byte_at(self, pos: int, value: int) -> bool:
        if not self._check_byte(pos, value):
            return False
        return self._write(pos, bytes([value]))

    def write_bytes_at(self, pos: int, values: bytes | Sequence[int], fmt: str = "B") -> bool:
        """Write `values` starting at `pos`.

        Byte strings are written verbatim. Other sequences are packed with
        struct in the host's native layout ('@' + fmt per element), so
        multi-byte values must already match the target's binary layout.
        """
        if isinstance(values, (bytes, bytearray, memoryview)):
            data = bytes(values)
        else:
            try:
                data = struct.pack(f"@{len(values)}{fmt}", *values)
            except (struct.error, TypeError) as e:
                return self._fail("E_WRITE_FAILURE", f"cannot encode values at 0x{pos:X}: {e}")
        if not data:
            return True
        return self._write(pos, data)

    def write_repeated_bytes_at(self, pos: int, value: int, n: int) -> bool:
        if not self._check_byte(pos, value):
            return False
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            return self._fail("E_WRITE_FAILURE", f"run length {n!r} at 0x{pos:X} must be >= 1")
        # One buffer, one write call.
        return self._write(pos, bytes([value]) * n)
