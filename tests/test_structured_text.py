import io

import pytest

from odbkit.structured_text import (
    InvalidKeyError,
    StructuredTextDataStore,
    StructuredTextParser,
    StructuredTextSyntaxError,
    parse_structured_text,
)

SAMPLE = """\
# matrix file
UNITS=INCH
VERSION = 7

STEP {
    COL=1
    NAME=PCB
}

LAYER {
    ROW=1
    NAME=TOP
    SUB {
        DEPTH=2
    }
}

LAYER {
    ROW=2
    NAME=BOTTOM
}
"""


def test_top_level_values():
    store = parse_structured_text(SAMPLE)
    assert store.get("UNITS") == "INCH"
    assert store.get("VERSION") == "7"


def test_blocks_are_in_file_order():
    store = parse_structured_text(SAMPLE)
    names = [block.get("NAME") for block in store.blocks("LAYER")]
    assert names == ["TOP", "BOTTOM"]


def test_nested_block_values():
    store = parse_structured_text(SAMPLE)
    top = store.blocks("LAYER")[0]
    assert top.blocks("SUB")[0].get("DEPTH") == "2"


def test_block_values_do_not_leak_to_parent():
    store = parse_structured_text(SAMPLE)
    with pytest.raises(InvalidKeyError):
        store.get("NAME")


def test_missing_block_key_gives_empty_list():
    assert parse_structured_text(SAMPLE).blocks("NOPE") == []


def test_values_sorted_by_key():
    store = parse_structured_text("B=2\nA=1\n")
    assert list(store.values().items()) == [("A", "1"), ("B", "2")]


def test_invalid_key_is_a_key_error():
    store = StructuredTextDataStore()
    with pytest.raises(KeyError):
        store.get("X")


def test_manual_building_matches_parsing():
    store = StructuredTextDataStore()
    store.new_element("OUTER")
    store.new_element("INNER")
    store.put("K", "v")
    assert store.commit_element() is True
    store.put("J", "w")
    assert store.commit_element() is True
    assert store.commit_element() is False
    outer = store.blocks("OUTER")[0]
    assert outer.get("J") == "w"
    assert outer.blocks("INNER")[0].get("K") == "v"


def test_dump_layout():
    store = parse_structured_text("A=1\nBLK {\nB=2\n}\n")
    out = io.StringIO()
    store.dump(out)
    assert out.getvalue() == "A = 1\nBLK {\n  B = 2\n}\n"


def test_unmatched_close_brace():
    with pytest.raises(StructuredTextSyntaxError):
        parse_structured_text("}\n")


def test_unterminated_block():
    with pytest.raises(StructuredTextSyntaxError):
        parse_structured_text("BLK {\nA=1\n")


def test_garbage_line():
    with pytest.raises(StructuredTextSyntaxError):
        parse_structured_text("just words\n")


def test_parser_reads_file(tmp_path):
    path = tmp_path / "attrlist"
    path.write_text(SAMPLE)
    store = StructuredTextParser(path).parse()
    assert store.values() == parse_structured_text(SAMPLE).values()


def test_parser_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        StructuredTextParser(tmp_path / "absent").parse()