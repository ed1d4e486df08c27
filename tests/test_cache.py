import pytest

from odbkit.cache import (
    CachedParser,
    parse_features,
    parse_font_file,
    parse_structured_text_file,
)


class _CountingParser:
    calls: list[str] = []

    def __init__(self, filename):
        self.filename = filename

    def parse(self):
        _CountingParser.calls.append(self.filename)
        return {"file": self.filename}


@pytest.fixture
def cached():
    _CountingParser.calls = []
    return CachedParser(_CountingParser)


def test_same_store_returned(cached):
    first = cached.parse("a")
    second = cached.parse("a")
    assert first is second
    assert _CountingParser.calls == ["a"]


def test_distinct_files_parsed_separately(cached):
    assert cached.parse("a") == {"file": "a"}
    assert cached.parse("b") == {"file": "b"}
    assert _CountingParser.calls == ["a", "b"]
    assert len(cached) == 2
    assert "a" in cached


def test_clear_forces_reparse(cached):
    first = cached.parse("a")
    cached.clear()
    assert len(cached) == 0
    second = cached.parse("a")
    assert first is not second
    assert _CountingParser.calls == ["a", "a"]


def test_errors_are_not_cached(tmp_path):
    cache = CachedParser(lambda name: open(name))
    with pytest.raises(OSError):
        cache.parse(tmp_path / "missing")
    assert len(cache) == 0


def test_parse_features_cached(tmp_path):
    path = tmp_path / "features"
    path.write_text("$0 r10\nL 0 0 1 1 0 P 0\n")
    ds = parse_features(path)
    assert ds.symbol_name_map == {0: "r10"}
    assert ds.pos_line_count_map == {"r10": 1}
    assert parse_features(path) is ds


def test_parse_font_file_cached(tmp_path):
    path = tmp_path / "standard"
    path.write_text(
        "XSIZE 0.3\nYSIZE 0.3\nOFFSET 0.1\n"
        "CHAR A\nLINE 0 0 1 1 P R 0.01\nECHAR\n"
    )
    font = parse_font_file(path)
    assert font.xsize == 0.3
    assert len(font.char_record("A").lines) == 1
    assert parse_font_file(path) is font


def test_parse_structured_text_file_cached(tmp_path):
    path = tmp_path / "attrlist"
    path.write_text(".customer=acme\n")
    store = parse_structured_text_file(path)
    assert store.get(".customer") == "acme"
    assert parse_structured_text_file(str(path)) is store