# odbkit

`odbkit` reads the text files found inside an unpacked ODB++ job and turns
them into plain Python objects. It needs nothing beyond the standard library.

## What it reads

- **Layer features** (`steps/<step>/layers/<layer>/features`), in
  `odbkit.features`: lines, pads, arcs, text, barcodes and surfaces, with
  their attributes resolved and per-symbol counts of positive and negative
  features.
- **Structured text** files such as `attrlist`, in `odbkit.structured_text`:
  `KEY=VALUE` pairs and nested `NAME {` ... `}` blocks.
- **Stroke fonts**, in `odbkit.font`: character outlines built from line
  strokes, as vector paths (`odbkit.shapes.PainterPath`).
- **Notes** files, in `odbkit.notes`: time-stamped, positioned comments, one
  comma-separated line each.
- A small **INI settings** store, in `odbkit.settings`.
- A per-file **parse cache**, in `odbkit.cache`.

## Installation

```
pip install .
```

## Usage

### Layer features

When the path follows the `<job>/steps/<step>/layers/<layer>/features`
layout, the job, step and layer names are taken from it (upper-cased), and
the step and layer `attrlist` files next to it are read if present, so text
variables such as `$$job`, `$$layer` or `$$<attribute>` in text and barcode
features are expanded.

```python
from odbkit.features import FeaturesParser

parser = FeaturesParser("myjob/steps/pcb/layers/top/features")
ds = parser.parse()
print(ds.job_name, ds.step_name, ds.layer_name)
for record in ds.records:
    print(type(record).__name__, record.polarity)
print(ds.pos_pad_count_map, ds.neg_surface_count)
ds.dump()  # symbol and attribute tables
```

Set `parser.now` to a `datetime` to fix the values of `$$date` and `$$time`.
Feature lines can also be parsed without a file with
`FeaturesParser(name).parse_lines(lines)`.

Pads and text give their scene placement (position with the y axis pointing
down, mirroring and rotation) through `placement()`. Surface polygons give
their outline through `painter_path()`.

### Structured text

```python
from odbkit.structured_text import parse_structured_text

store = parse_structured_text("""
UNITS=INCH
LAYER {
    ROW=1
    NAME=TOP
}
""")
print(store.get("UNITS"))
for layer in store.blocks("LAYER"):
    print(layer.get("NAME"))
```

`get` raises `InvalidKeyError` for a key that is not present; malformed
input raises `StructuredTextSyntaxError`. `StructuredTextParser(filename)`
reads the same format from a file.

### Stroke fonts

```python
from odbkit.font import FontParser

font = FontParser("myjob/fonts/standard").parse()
char = font.char_record("A")  # None if the font lacks the character
if char is not None:
    path = char.painter_path(1.0)
    print(path.bounding_rect())
```

### Notes

```python
from odbkit.notes import NotesParser

for note in NotesParser("myjob/steps/pcb/layers/top/notes").parse().records:
    print(note.timestamp, note.user, note.position(), note.text)
```

### Caching

```python
from odbkit.cache import parse_features

ds = parse_features("myjob/steps/pcb/layers/top/features")
assert parse_features("myjob/steps/pcb/layers/top/features") is ds
```

`parse_font_file` and `parse_structured_text_file` do the same for fonts and
structured text; `CachedParser(parser_factory)` builds a cache for any parser.

### Settings

```python
from odbkit import settings

cfg = settings.load("odbkit.ini")
cfg.set("view", "zoom", 2)
print(cfg.get("view", "zoom"))  # "2"; None when not set
```

## What it does not do

`odbkit` only reads job data into objects and builds outline paths. It does
not render or display layers, has no viewer or command-line program, does
not unpack job archives, and does not turn barcode features into bar
patterns.

## Running the tests

```
pip install .[test]
pytest
```