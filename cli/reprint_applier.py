from typing import Sequence

from reprint_changes import Change, ChangeSet, total_delta
from reprint_constants import TEXT_ENCODING
from reprint_errors import MalformedChange, OutOfRange


def expected_size(original: bytes, changes: Sequence[Change]) -> int:
    return len(original) + total_delta(changes)


def check_in_range(ch: Change, content_len: int) -> None:
    # A change may start or end exactly at the end of the content (appending).
    if ch.start_byte > content_len or ch.end_byte > content_len:
        raise OutOfRange(ch, content_len)


def apply_changes(original: bytes, changes: Sequence[Change]) -> bytes:
    """Splice `changes` into `original` in a single pass.

    Precondition: `changes` came from `reprint_changes.sort_and_verify`.
    Offsets are still re-checked against the actual content, since they
    are computed by the caller and may describe an older version of the file.
    """
    chunks: list[bytes] = []
    # Current position in the input.
    in_pos = 0
    for ch in changes:
        check_in_range(ch, len(original))
        chunks.append(original[in_pos : ch.start_byte])
        chunks.append(ch.text.encode(TEXT_ENCODING))
        in_pos = ch.end_byte

    # The rest of the input is carried over as-is.
    chunks.append(original[in_pos:])

    buf = b"".join(chunks)
    assert len(buf) == expected_size(original, changes), "Output size does not match deltas"
    return buf


def inverse_changes(original: bytes, changes: Sequence[Change]) -> ChangeSet:
    """Compute the changes that turn `apply_changes(original, changes)` back into `original`.

    The returned offsets are in output coordinates, and each change's text is the
    original span it replaced. Raises MalformedChange if a replaced span is not
    valid UTF-8, since it could not be expressed as replacement text.
    """
    inverse: ChangeSet = []
    shift = 0
    for ch in changes:
        check_in_range(ch, len(original))
        replaced = original[ch.start_byte : ch.end_byte]
        try:
            replaced_text = replaced.decode(TEXT_ENCODING)
        except UnicodeDecodeError as e:
            raise MalformedChange(ch, f"replaced bytes are not {TEXT_ENCODING}: {e.reason}") from e

        out_start = ch.start_byte + shift
        out_end = out_start + len(ch.text.encode(TEXT_ENCODING))
        undo = Change(out_start, out_end, replaced_text)
        # Adjacent deletions invert to insertions at one offset; keep them as one.
        if inverse and undo.is_insertion and inverse[-1].is_insertion:
            if inverse[-1].start_byte == out_start:
                undo = Change(out_start, out_start, inverse.pop().text + replaced_text)
        inverse.append(undo)
        shift += ch.delta()
    return inverse
