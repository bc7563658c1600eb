import struct

import pytest

from airhost.messages import (
    DmapItem,
    MetadataError,
    create_pin_display,
    describe_tag,
    format_item,
    format_progress,
    iter_dmap_listing,
    parse_dmap_header,
)


def _item(tag: str, data: bytes) -> bytes:
    return struct.pack(">4sI", tag.encode("ascii"), len(data)) + data


def _listing(*items: bytes) -> bytes:
    return _item("mlit", b"".join(items))


def test_pin_display_shape():
    image = create_pin_display("1234", 10, 3)
    assert image.startswith("\n")
    assert image.endswith("\n\n")
    rows = image[1:-1].splitlines()
    assert len(rows) == 8
    assert all(len(row) == 10 + 4 * (10 + 3) for row in rows)
    assert all(row.startswith(" " * 10) for row in rows)


def test_pin_display_uses_digit_table():
    image = create_pin_display("1", 0, 0)
    rows = image[1:-1].splitlines()
    assert rows[0] == "   d888   "
    assert rows[7] == "  8888888 "


def test_pin_display_repeats_identical_digits():
    rows = create_pin_display("00", 2, 1)[1:-1].splitlines()
    for row in rows:
        body = row[2:]
        assert body[:11] == body[11:]


def test_pin_display_rejects_non_digits():
    with pytest.raises(ValueError):
        create_pin_display("12a4", 10, 3)


def test_parse_dmap_header_reads_tag_and_length():
    assert parse_dmap_header(_item("minm", b"hello")) == ("minm", 5)


def test_parse_dmap_header_rejects_bad_tag():
    with pytest.raises(MetadataError):
        parse_dmap_header(_item("m1nm", b""))


def test_parse_dmap_header_rejects_short_data():
    with pytest.raises(MetadataError):
        parse_dmap_header(b"minm")


def test_parse_dmap_header_rejects_negative_length():
    with pytest.raises(MetadataError):
        parse_dmap_header(b"minm" + struct.pack(">I", 0x80000000))


def test_iter_listing_round_trip():
    buffer = _listing(_item("minm", b"Song"), _item("asar", b"Band"), _item("astm", b""))
    items = list(iter_dmap_listing(buffer))
    assert items == [
        DmapItem(1, "minm", b"Song"),
        DmapItem(2, "asar", b"Band"),
        DmapItem(3, "astm", b""),
    ]


def test_iter_listing_requires_mlit():
    with pytest.raises(MetadataError):
        list(iter_dmap_listing(_item("abcd", _item("minm", b"x"))))


def test_iter_listing_length_mismatch():
    buffer = _listing(_item("minm", b"x")) + b"extra"
    with pytest.raises(MetadataError):
        list(iter_dmap_listing(buffer))


def test_iter_listing_too_short():
    with pytest.raises(MetadataError):
        list(iter_dmap_listing(b"mlit"))


def test_iter_listing_trailing_bytes():
    buffer = _listing(_item("minm", b"x"), b"abc")
    gen = iter_dmap_listing(buffer)
    assert next(gen) == DmapItem(1, "minm", b"x")
    with pytest.raises(MetadataError):
        next(gen)


def test_iter_listing_truncated_item():
    inner = struct.pack(">4sI", b"minm", 50) + b"short"
    with pytest.raises(MetadataError):
        list(iter_dmap_listing(_listing(inner)))


def test_describe_tag_known_and_unknown():
    assert describe_tag("minm") == "Title"
    assert describe_tag("asgn") == "Genre"
    assert describe_tag("asal") == "Album"
    assert describe_tag("asxx") is None


def test_format_item_string():
    assert format_item(DmapItem(1, "minm", b"Song")) == "Title: Song\n"


def test_format_item_stops_at_nul():
    assert format_item(DmapItem(1, "asar", b"Band\0junk")) == "Artist: Band\n"


def test_format_item_empty_data():
    assert format_item(DmapItem(2, "minm", b"")) == ""
    assert format_item(DmapItem(2, "minm", b""), debug=True) == "2: dmap_tag [minm], 0\n"


def test_format_item_unknown_tag_without_debug():
    assert format_item(DmapItem(1, "astm", b"\x01\x02")) == "\n"


def test_format_item_unknown_tag_debug_hex():
    text = format_item(DmapItem(3, "astm", b"\xab\xcd"), debug=True)
    assert text == "3: dmap_tag [astm], 2\nab cd \n"


def test_format_item_hex_wraps_every_16_bytes():
    text = format_item(DmapItem(1, "astm", bytes(20)), debug=True)
    lines = text.splitlines()
    assert lines[1] == "00 " * 16
    assert lines[2] == "00 " * 4


def test_format_progress():
    rate = 44100
    text = format_progress(0, rate * 65, rate * 125)
    assert text == (
        "audio progress (min:sec): 1:05; remaining: 1:00; track length 2:05"
    )


def test_format_progress_at_start():
    rate = 44100
    text = format_progress(1000, 1000, 1000 + rate * 3)
    assert text.startswith("audio progress (min:sec): 0:00;")
    assert text.endswith("track length 0:03")