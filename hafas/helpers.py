import enum
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Final, Literal, TypeAlias, TypeVar

from bitstring import ConstBitStream, ReadError

TEnum = TypeVar("TEnum", bound="SafeIntEnumMixin")

ByteOrder: TypeAlias = Literal["little", "big"]

BYTE_SIZE: Final[int] = 8
STRING_TERMINATOR: Final[bytes] = b"\x00"

_ORDER_SUFFIX: Final[dict[str, str]] = {"little": "le", "big": "be"}


class SafeIntEnumMixin(enum.IntEnum):
    """IntEnum that never raises *ValueError* on construction.

    When an undefined integer value is supplied, ``UNKNOWN`` is returned if the
    subclass defines it; otherwise the first declared member is used as a
    fallback. Upstream servers add codes over time and decoding must not
    stop on them.
    """

    @classmethod
    def _missing_(cls: type[TEnum], value: Any) -> TEnum:
        return getattr(cls, "UNKNOWN", next(iter(cls)))  # type: ignore[arg-type]


# --------------------------------------------------------------------------- #
# Error taxonomy                                                              #
# --------------------------------------------------------------------------- #
class HafasDecodeError(RuntimeError):
    """Base class of every failure raised while decoding a binary document."""


class HafasFormatError(HafasDecodeError):
    """Unsupported version, truncated header or unexpected record size."""


class HafasRangeError(HafasDecodeError):
    """Raised when a seek or read leaves the document buffer.

    Attributes:
        offset: Absolute byte offset that was accessed
        size: Size of the document in bytes
        hint: Name of the field that was being read, if known
    """

    def __init__(self, offset: int, size: int, hint: str | None = None) -> None:
        self.offset = offset
        self.size = size
        self.hint = hint
        where = f" for '{hint}'" if hint else ""
        super().__init__(f"Invalid position {offset}{where}, buffer size is {size}")


# --------------------------------------------------------------------------- #
# Byte reader                                                                 #
# --------------------------------------------------------------------------- #
class ByteReader:
    """Cursor over a HAFAS document backed by :class:`bitstring.ConstBitStream`.

    All multi-byte integers are read with an explicit byte order. Every access
    outside of the buffer raises :class:`HafasRangeError` instead of returning
    truncated data.
    """

    def __init__(self, data: bytes | bytearray, byteorder: ByteOrder = "little") -> None:
        if byteorder not in _ORDER_SUFFIX:
            raise ValueError(f"Unsupported byte order: {byteorder!r}")
        self._data = bytes(data)
        self._bs = ConstBitStream(bytes=self._data)
        self._suffix = _ORDER_SUFFIX[byteorder]
        self.byteorder: ByteOrder = byteorder

    # ------------------------------------------------------------------ #
    # Properties                                                         #
    # ------------------------------------------------------------------ #
    @property
    def pos(self) -> int:
        """Current read position in *bytes*."""
        return self._bs.bytepos

    @property
    def size(self) -> int:
        """Total length of the document in *bytes*."""
        return len(self._data)

    # ------------------------------------------------------------------ #
    # Positioning                                                        #
    # ------------------------------------------------------------------ #
    def seek(self, offset: int, hint: str | None = None) -> None:
        """Move the cursor to the absolute *offset*."""
        if not 0 <= offset < self.size:
            raise HafasRangeError(offset, self.size, hint)
        self._bs.bytepos = offset

    def skip(self, count: int, hint: str | None = None) -> None:
        """Advance the cursor by *count* bytes."""
        target = self.pos + count
        if not 0 <= target <= self.size:
            raise HafasRangeError(target, self.size, hint)
        self._bs.bytepos = target

    @contextmanager
    def excursion(self) -> Iterator["ByteReader"]:
        """Restore the current position when the block exits, even on error."""
        saved = self._bs.bytepos
        try:
            yield self
        finally:
            self._bs.bytepos = saved

    # ------------------------------------------------------------------ #
    # Primitive reads                                                    #
    # ------------------------------------------------------------------ #
    def _read(self, fmt: str, width: int, hint: str | None) -> int:
        offset = self.pos
        if offset + width > self.size:
            raise HafasRangeError(offset, self.size, hint)
        try:
            return self._bs.read(fmt)
        except ReadError as err:
            raise HafasRangeError(offset, self.size, hint) from err

    def u8(self, hint: str | None = None) -> int:
        return self._read("uint:8", 1, hint)

    def u16(self, hint: str | None = None) -> int:
        return self._read(f"uint{self._suffix}:16", 2, hint)

    def i16(self, hint: str | None = None) -> int:
        return self._read(f"int{self._suffix}:16", 2, hint)

    def u32(self, hint: str | None = None) -> int:
        return self._read(f"uint{self._suffix}:32", 4, hint)

    def i32(self, hint: str | None = None) -> int:
        return self._read(f"int{self._suffix}:32", 4, hint)

    # ------------------------------------------------------------------ #
    # Offset-relative lookups                                            #
    # ------------------------------------------------------------------ #
    def read_zero_terminated_bytes_at(self, offset: int, hint: str | None = None) -> bytes:
        """Return the bytes from *offset* up to (excluding) the next NUL byte.

        The cursor is not moved. A run without terminator is treated as an
        out-of-range access at the end of the buffer.
        """
        if not 0 <= offset < self.size:
            raise HafasRangeError(offset, self.size, hint)
        end = self._data.find(STRING_TERMINATOR, offset)
        if end < 0:
            raise HafasRangeError(self.size, self.size, hint)
        return self._data[offset:end]

    def read_string_at(
        self, offset: int, encoding: str = "iso-8859-1", hint: str | None = None
    ) -> str:
        """Decode the zero-terminated string at *offset* without moving the cursor."""
        raw = self.read_zero_terminated_bytes_at(offset, hint)
        return raw.decode(encoding, errors="replace")
