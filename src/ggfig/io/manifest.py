"""
Gallery manifest: what the ``ggfig examples`` command wrote, and the artifact hashes.

Manifest layout (JSON at <out_dir>/manifest.json):
{
  "version": 1,
  "created_at": "ISO-8601",
  "format": "html",
  "figures": {
    "mpg_scatter": {
      "kind": "panel",
      "hash": "<sha256 of the canonical artifact JSON>",
      "files": ["mpg_scatter.html"]
    }
  }
}

Notes:
- File names are relative to the manifest directory so the output stays relocatable.
- Hashes come from ggfig.core.hashing over ``Panel.to_dict()`` / ``Layout.to_dict()``;
  identical inputs yield identical hashes across runs.
- Writes are atomic: serialize → write "<final>.tmp" → os.replace.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

__all__ = [
    "FigureEntry",
    "GalleryManifest",
    "MANIFEST_NAME",
    "write_manifest",
    "read_manifest",
]

MANIFEST_NAME = "manifest.json"
MANIFEST_VERSION = 1

FigureKind = Literal["panel", "layout"]


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True)
class FigureEntry:
    """
    Per-figure record.

    Attributes:
        kind (Literal["panel", "layout"]): Artifact type.
        hash (str): SHA-256 of the canonical artifact JSON.
        files (list[str]): Files written for the figure, relative to the manifest.
    """

    kind: FigureKind
    hash: str
    files: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GalleryManifest:
    format: str
    figures: dict[str, FigureEntry] = field(default_factory=dict)
    version: int = MANIFEST_VERSION
    created_at: str = field(default_factory=_utc_now_iso)

    def add(self, name: str, entry: FigureEntry) -> None:
        self.figures[name] = entry

    def to_json_obj(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "created_at": self.created_at,
            "format": self.format,
            "figures": {k: asdict(v) for k, v in self.figures.items()},
        }

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> GalleryManifest:
        figures = {
            name: FigureEntry(kind=v["kind"], hash=v["hash"], files=list(v.get("files", [])))
            for name, v in (obj.get("figures") or {}).items()
        }
        return cls(
            format=str(obj.get("format", "")),
            figures=figures,
            version=int(obj.get("version", MANIFEST_VERSION)),
            created_at=str(obj.get("created_at", "")),
        )


def write_manifest(out_dir: str | Path, manifest: GalleryManifest) -> Path:
    """
    Persist ``manifest.json`` atomically under ``out_dir``.

    Returns:
        Path: Final manifest path.
    """
    final_path = Path(out_dir) / MANIFEST_NAME
    final_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = final_path.with_name(final_path.name + ".tmp")
    payload = json.dumps(manifest.to_json_obj(), indent=2, sort_keys=False).encode("utf-8")
    with open(tmp_path, "wb") as fh:
        fh.write(payload)
        fh.flush()
        os.fsync(fh.fileno())
    os.replace(tmp_path, final_path)
    return final_path


def read_manifest(out_dir: str | Path) -> GalleryManifest | None:
    """Load ``manifest.json`` from ``out_dir``; None when absent."""
    path = Path(out_dir) / MANIFEST_NAME
    if not path.exists():
        return None
    return GalleryManifest.from_json_obj(json.loads(path.read_text(encoding="utf-8")))
