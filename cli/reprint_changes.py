from dataclasses import dataclass, field
from typing import Iterable, TypeAlias

from dataclasses_json import config, dataclass_json
from marshmallow import fields

from reprint_constants import TEXT_ENCODING
from reprint_errors import MalformedChange, OverlappingChanges
from reprint_types import ByteRange


@dataclass_json
@dataclass(frozen=True)
class Change:
    """Replace the bytes in `[start_byte, end_byte)` of the original content with `text`.

    Offsets always refer to the original content, never to the output,
    so a batch of changes can be computed against one snapshot of a file
    and applied together."""

    start_byte: int = field(metadata=config(mm_field=fields.Integer(strict=True, required=True)))
    end_byte: int = field(metadata=config(mm_field=fields.Integer(strict=True, required=True)))
    text: str

    @property
    def is_insertion(self) -> bool:
        return self.start_byte == self.end_byte

    @property
    def is_deletion(self) -> bool:
        return self.text == "" and self.end_byte > self.start_byte

    def byte_range(self) -> ByteRange:
        return (self.start_byte, self.end_byte)

    def sort_key(self) -> ByteRange:
        # Start alone is not a total order: (3, 3) and (3, 5) must not tie.
        return (self.start_byte, self.end_byte)

    def delta(self) -> int:
        """Signed change in content length caused by applying this change."""
        return len(self.text.encode(TEXT_ENCODING)) - (self.end_byte - self.start_byte)


ChangeSet: TypeAlias = list[Change]


def sort_and_verify(changes: Iterable[Change]) -> ChangeSet:
    """Return `changes` sorted by position, or raise if they can't be applied together.

    - Raises MalformedChange if a change ends before it starts, or has a negative offset.
    - Raises OverlappingChanges if two ranges intersect. Touching ranges are fine.
      Two insertions at the same offset also count as overlapping, because
      which text lands first would depend on the order the caller listed them.

    Performs no I/O."""
    ordered = sorted(changes, key=Change.sort_key)

    prev: Change | None = None
    for ch in ordered:
        if ch.start_byte < 0 or ch.end_byte < 0:
            raise MalformedChange(ch, "negative offset")
        if ch.end_byte < ch.start_byte:
            raise MalformedChange(ch)
        if prev is not None:
            if ch.start_byte < prev.end_byte:
                raise OverlappingChanges(prev, ch)
            if ch.is_insertion and prev.is_insertion and ch.start_byte == prev.start_byte:
                raise OverlappingChanges(prev, ch)
        prev = ch

    return ordered


def total_delta(changes: Iterable[Change]) -> int:
    return sum(ch.delta() for ch in changes)
