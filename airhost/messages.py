"""Text shown to the user: pin-code banners, track metadata and playback progress."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass
from typing import Iterator

_DIGIT_WIDTH = 10
_DIGIT_HEIGHT = 8

# Each digit is drawn from an 8-row, 10-column grid of pixel codes.
_DIGITS = (
    ("0821111380", "2114005113", "1110000111", "1110000111",
     "1110000111", "1110000111", "5113002114", "0751111470"),
    ("0002111000", "0021111000", "0000111000", "0000111000",
     "0000111000", "0000111000", "0000111000", "0011111110"),
    ("0811112800", "2114005113", "0000000111", "0000082114",
     "0862111470", "2114700000", "1117000000", "1111111111"),
    ("0821111380", "2114005113", "0000082114", "0000111170",
     "0000075130", "1110000111", "5113002114", "0751111470"),
    ("0000211110", "0001401110", "0021401110", "0214001110",
     "2110001110", "1111111111", "0000001110", "0000001110"),
    ("1111111110", "1110000000", "1110000000", "1112111380",
     "0000075113", "0000000111", "5113002114", "0711114700"),
    ("0821111380", "2114005113", "1110000000", "1112111380",
     "1114075113", "1110000111", "5113002114", "0751111470"),
    ("1111111111", "0000002114", "0000021140", "0000211400",
     "0002114000", "0021140000", "0211400000", "2114000000"),
    ("0831111280", "2114002114", "5113802114", "0751111170",
     "8214775138", "1110000111", "5113002114", "0751111470"),
    ("0821111380", "2114005113", "1110000111", "5113802111",
     "0751114111", "0000000111", "5113002114", "0751111470"),
)
_PIXELS = ' 8dbPYo".'

_PIN_PATTERN = re.compile(r"[0-9]*")

_STRING_TAGS = {
    "asaa": "Album artist",
    "asal": "Album",
    "asar": "Artist",
    "ascm": "Comment",
    "ascn": "Content description",
    "ascp": "Composer",
    "asct": "Category",
    "assa": "Sort Artist",
    "assc": "Sort Composer",
    "assl": "Sort Album artist",
    "assn": "Sort Name",
    "asss": "Sort Series",
    "assu": "Sort Album",
    "asdt": "Description",
    "asfm": "Format",
    "asgn": "Genre",
    "asky": "Keywords",
    "aslc": "Long Content Description",
    "minm": "Title",
}

_HEADER = struct.Struct(">4sI")
_LISTING_TAG = "mlit"
_SAMPLE_RATE = 44100


class MetadataError(ValueError):
    """DMAP metadata could not be parsed."""


@dataclass(frozen=True)
class DmapItem:
    """One tagged item of a DMAP listing; ``index`` counts from 1."""

    index: int
    tag: str
    data: bytes


def create_pin_display(pin: str, margin: int, gap: int) -> str:
    """Render a decimal pin code as large block-letter ASCII art."""
    if not _PIN_PATTERN.fullmatch(pin):
        raise ValueError(f"pin must be decimal digits: {pin!r}")
    digits = [_DIGITS[int(char)] for char in pin]
    rows = []
    for row in range(_DIGIT_HEIGHT):
        parts = [" " * margin]
        for digit in digits:
            parts.append("".join(_PIXELS[int(code)] for code in digit[row]))
            parts.append(" " * gap)
        rows.append("".join(parts) + "\n")
    return "\n" + "".join(rows) + "\n"


def parse_dmap_header(data: bytes) -> tuple[str, int]:
    """Read the 4-letter tag and big-endian 32-bit length at the start of ``data``."""
    if len(data) < _HEADER.size:
        raise MetadataError(f"DMAP header needs {_HEADER.size} bytes, got {len(data)}")
    raw_tag, length = _HEADER.unpack_from(data)
    tag = raw_tag.decode("latin-1")
    if not all(char.isascii() and char.isalpha() for char in tag) or length >= 1 << 31:
        raise MetadataError(f"invalid DMAP header: tag [{tag}] datalen {length}")
    return tag, length


def iter_dmap_listing(buffer: bytes) -> Iterator[DmapItem]:
    """Yield the items of an ``mlit`` DMAP listing item."""
    if len(buffer) < _HEADER.size:
        raise MetadataError(f"received invalid metadata, length {len(buffer)} < 8")
    tag, length = parse_dmap_header(buffer)
    body = memoryview(bytes(buffer))[_HEADER.size:]
    if tag != _LISTING_TAG or length != len(body):
        raise MetadataError(
            f"received metadata with tag {tag}, but is not a DMAP listingitem, "
            f"or datalen = {length} != buflen {len(body)}"
        )
    index = 0
    offset = 0
    while len(body) - offset >= _HEADER.size:
        index += 1
        tag, length = parse_dmap_header(body[offset:offset + _HEADER.size])
        offset += _HEADER.size
        if offset + length > len(body):
            raise MetadataError(
                f"DMAP item [{tag}] claims {length} bytes, only {len(body) - offset} remain"
            )
        yield DmapItem(index, tag, bytes(body[offset:offset + length]))
        offset += length
    if offset != len(body):
        raise MetadataError(f"{len(body) - offset} bytes of metadata were not processed")


def describe_tag(tag: str) -> str | None:
    """Return the display label of a string-valued DMAP tag, or None if unknown."""
    return _STRING_TAGS.get(tag)


def _hex_dump(data: bytes) -> str:
    lines = [
        "".join(f"{byte:02x} " for byte in data[start:start + 16])
        for start in range(0, len(data), 16)
    ]
    return "\n".join(lines)


def format_item(item: DmapItem, debug: bool = False) -> str:
    """Return the text printed for one metadata item."""
    text = f"{item.index}: dmap_tag [{item.tag}], {len(item.data)}\n" if debug else ""
    if not item.data:
        return text
    label = describe_tag(item.tag)
    if label is not None:
        value = item.data.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        text += f"{label}: {value}"
    elif debug:
        text += _hex_dump(item.data)
    return text + "\n"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def _min_sec(seconds: int) -> str:
    minutes = _trunc_div(seconds, 60)
    return "%d:%2.2d" % (minutes, seconds - minutes * 60)


def format_progress(start: int, curr: int, end: int) -> str:
    """Describe playback progress from RTP timestamps at 44.1 kHz."""
    duration = _trunc_div(_to_int32(end - start), _SAMPLE_RATE)
    position = _trunc_div(_to_int32(curr - start), _SAMPLE_RATE)
    remain = duration - position
    return (
        f"audio progress (min:sec): {_min_sec(position)}; "
        f"remaining: {_min_sec(remain)}; track length {_min_sec(duration)}"
    )