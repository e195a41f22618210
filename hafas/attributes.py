from collections.abc import Iterator
from typing import Final

from .helpers import ByteReader
from .tables import StringTable

ATTRIBUTE_RECORD_SIZE: Final[int] = 4

KEY_CONNECTION_ID: Final[str] = "ConnectionId"
KEY_OPERATOR: Final[str] = "Operator"
KEY_CATEGORY: Final[str] = "Category"
KEY_CLASS: Final[str] = "Class"


class AttributeChains:
    """Key/value attribute chains stored at ``attributes_offset + 4 * index``.

    A chain is a run of (key, value) string offset pairs ending with an
    empty key.
    """

    def __init__(
        self,
        reader: ByteReader,
        attributes_offset: int,
        attributes_position: int,
        strings: StringTable,
    ) -> None:
        self._reader = reader
        self.attributes_offset = attributes_offset
        self.attributes_position = attributes_position
        self.strings = strings

    def chain_position(self, index: int) -> int:
        return self.attributes_offset + index * ATTRIBUTE_RECORD_SIZE

    def has_chain(self, index: int) -> bool:
        return self.chain_position(index) < self._reader.size

    def iter_chain(self, index: int, hint: str | None = None) -> Iterator[tuple[str, int]]:
        """Yield (key, value offset) pairs of chain *index* in stored order.

        Values are left unresolved, callers only resolve the keys they use.
        """
        reader = self._reader
        position = self.chain_position(index)
        while True:
            reader.seek(position, hint)
            key = self.strings.read_next(hint=hint)
            if not key:
                return
            value_offset = reader.u16(hint)
            position += ATTRIBUTE_RECORD_SIZE
            yield key, value_offset

    def chain(self, index: int, hint: str | None = None) -> list[tuple[str, str]]:
        return [
            (key, self.strings.resolve(value_offset, hint=hint))
            for key, value_offset in self.iter_chain(index, hint)
        ]

    def journey_chain_index(self, journey: int) -> int | None:
        """Return the chain index of *journey*, or *None* if not present."""
        if self.attributes_position == 0:
            return None
        position = self.attributes_position + journey * 2
        if position >= self._reader.size:
            return None
        hint = f"Attributes Index for Journey {journey}"
        self._reader.seek(position, hint)
        return self._reader.u16(hint)

    def journey_id(self, journey: int) -> str | None:
        """Return the ``ConnectionId`` attribute of *journey* if present."""
        index = self.journey_chain_index(journey)
        if index is None:
            return None
        hint = f"Attributes for Journey {journey}"
        journey_id = None
        for key, value_offset in self.iter_chain(index, hint):
            if key == KEY_CONNECTION_ID:
                journey_id = self.strings.resolve(value_offset, hint=hint)
        return journey_id
