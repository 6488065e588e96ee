from __future__ import annotations

import json
from pathlib import Path

from ggfig.io.manifest import (
    MANIFEST_NAME,
    FigureEntry,
    GalleryManifest,
    read_manifest,
    write_manifest,
)


def test_write_then_read_manifest(tmp_path: Path) -> None:
    manifest = GalleryManifest(format="html")
    manifest.add("mpg_scatter", FigureEntry(kind="panel", hash="abc", files=["mpg_scatter.html"]))

    path = write_manifest(tmp_path, manifest)

    assert path == tmp_path / MANIFEST_NAME
    assert not (tmp_path / (MANIFEST_NAME + ".tmp")).exists()
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["figures"]["mpg_scatter"]["files"] == ["mpg_scatter.html"]

    loaded = read_manifest(tmp_path)
    assert loaded is not None
    assert loaded.format == "html"
    assert loaded.figures["mpg_scatter"].hash == "abc"
    assert loaded.created_at == manifest.created_at


def test_read_manifest_absent(tmp_path: Path) -> None:
    assert read_manifest(tmp_path) is None
