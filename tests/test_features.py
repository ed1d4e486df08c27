import io
from datetime import datetime

import pytest

from odbkit.features import FeaturesDataStore, FeaturesParser
from odbkit.records import (
    ArcRecord,
    LineRecord,
    PadRecord,
    Polarity,
    TextRecord,
    parse_line_record,
)
from odbkit.shapes import OpType, PolyType, SurfaceRecord

SAMPLE = """#
# features
#
$0 r10
$1 rect20x30
@0 .smd
@1 .comment
&0 hello

L 0 0 1 1 0 P 0 ;0
P 1 2 1 N 0 1 ;0,1=0
A 0 0 1 0 0.5 0 0 P 0 Y
T 1 2 standard P 0 0.1 0.1 1 'layer $$layer' 1
S P 0
OB 0 0 I
OS 1 0
OC 0 0 0.5 0 Y
OE
SE
"""


@pytest.fixture
def store():
    return FeaturesParser("features").parse_lines(io.StringIO(SAMPLE))


def test_symbol_and_attribute_tables(store):
    assert store.symbol_name_map == {0: "r10", 1: "rect20x30"}
    assert store.attrib_name_map == {0: ".smd", 1: ".comment"}
    assert store.attrib_text_map == {0: "hello"}


def test_record_order_and_types(store):
    kinds = [type(rec) for rec in store.records]
    assert kinds == [LineRecord, PadRecord, ArcRecord, TextRecord, SurfaceRecord]


def test_counts_by_symbol_and_polarity(store):
    assert store.pos_line_count_map == {"r10": 1}
    assert store.neg_pad_count_map == {"rect20x30": 1}
    assert store.pos_pad_count_map == {}
    assert store.pos_arc_count_map == {"r10": 1}
    assert store.pos_text_count == 1
    assert store.neg_text_count == 0
    assert store.pos_surface_count == 1


def test_attributes_resolved(store):
    line, pad = store.records[0], store.records[1]
    assert line.attrib == {".smd": "true"}
    assert pad.attrib == {".smd": "true", ".comment": "hello"}
    assert pad.sym_name == "rect20x30"
    assert pad.polarity is Polarity.N


def test_quoted_text_field(store):
    text = store.records[3]
    assert text.font == "standard"
    assert text.version == 1
    assert text.text == "layer "


def test_surface_polygon(store):
    surface = store.records[4]
    assert len(surface.polygons) == 1
    polygon = surface.polygons[0]
    assert polygon.poly_type is PolyType.I
    assert [op.type for op in polygon.operations] == [OpType.SEGMENT, OpType.CURVE]
    curve = polygon.operations[1]
    assert (curve.xe, curve.ye, curve.xc, curve.yc, curve.cw) == (0.0, 0.0, 0.5, 0.0, True)


def test_surface_operation_outside_polygon():
    parser = FeaturesParser("features")
    with pytest.raises(ValueError):
        parser.parse_lines(["S P 0\n", "OS 1 0\n", "SE\n"])


def test_parse_attributes_without_semicolon():
    params, attrib = FeaturesParser("features").parse_attributes("L 0 0 1 1 0 P 0")
    assert params == ["L", "0", "0", "1", "1", "0", "P", "0"]
    assert attrib == {}


def test_parse_attributes_keeps_quoted_spaces():
    params, _ = FeaturesParser("f").parse_attributes("T 1 2 f P 0 1 1 1 'a b  c' 0 ;")
    assert params[9] == "a b  c"
    assert params[-1] == "0"


def test_store_setters_upper_case():
    ds = FeaturesDataStore()
    ds.set_job_name("demo")
    ds.set_step_name("pcb")
    ds.set_layer_name("top")
    assert (ds.job_name, ds.step_name, ds.layer_name) == ("DEMO", "PCB", "TOP")


def test_attrlist_missing_is_empty():
    ds = FeaturesDataStore()
    ds.put_attrlist_item(".customer", "acme")
    assert ds.attrlist(".customer") == "acme"
    assert ds.attrlist(".absent") == ""


def test_put_line_counts_unknown_symbol_under_empty_name():
    ds = FeaturesDataStore()
    ds.put_line(parse_line_record(ds, "L 0 0 1 1 7 N 0".split()))
    assert ds.neg_line_count_map == {"": 1}
    assert len(ds.records) == 1


def test_dump(store):
    out = io.StringIO()
    store.dump(out)
    text = out.getvalue()
    assert text.startswith("=== Symbol names ===\n")
    assert '1 "rect20x30"' in text
    assert "=== Attrib text ===" in text


def test_parse_file_with_job_layout(tmp_path):
    layer_dir = tmp_path / "demo" / "steps" / "pcb" / "layers" / "top"
    layer_dir.mkdir(parents=True)
    (tmp_path / "demo" / "steps" / "pcb" / "attrlist").write_text(".customer=acme\n")
    (layer_dir / "attrlist").write_text(".side=front\n")
    features = layer_dir / "features"
    features.write_text(
        "T 0 0 standard P 0 1 1 1 '$$job $$.customer $$.side' 0\n"
        "T 0 0 standard P 0 1 1 1 '$$date' 0\n"
    )
    parser = FeaturesParser(features.as_posix())
    parser.now = datetime(2014, 3, 9, 8, 5)
    ds = parser.parse()
    assert (ds.job_name, ds.step_name, ds.layer_name) == ("DEMO", "PCB", "TOP")
    assert ds.attrlist(".customer") == "acme"
    assert ds.records[0].text == "DEMO ACME FRONT"
    assert ds.records[1].text == "03/09/14"


def test_parse_missing_file(tmp_path):
    with pytest.raises(OSError):
        FeaturesParser(tmp_path / "missing").parse()


def test_parse_lines_resets_store():
    parser = FeaturesParser("features")
    first = parser.parse_lines(["$0 r10\n"])
    second = parser.parse_lines(["$1 s20\n"])
    assert first.symbol_name_map == {0: "r10"}
    assert second.symbol_name_map == {1: "s20"}