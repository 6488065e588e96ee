from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ggfig.cli import main
from ggfig.io.manifest import read_manifest
from ggfig.logging_config import setup_logging


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as ei:
        main(argv)
    return int(ei.value.code)


def test_datasets_lists_builtins(capsys) -> None:
    assert _run(["datasets"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert "mpg" in out
    assert out == sorted(out)


def test_datasets_schema(capsys) -> None:
    assert _run(["datasets", "--schema"]) == 0
    out = capsys.readouterr().out
    assert "scatter3 (3 rows) x:continuous, y:continuous" in out


def test_examples_list(capsys) -> None:
    assert _run(["examples", "--list"]) == 0
    assert capsys.readouterr().out.splitlines()[0] == "mpg_scatter"


def test_examples_writes_html_and_manifest(tmp_path: Path, capsys) -> None:
    code = _run(
        [
            "examples",
            "--out-dir",
            str(tmp_path),
            "--only",
            "mpg_scatter",
            "--only",
            "patchwork",
        ]
    )

    assert code == 0
    assert (tmp_path / "mpg_scatter.html").exists()
    assert (tmp_path / "patchwork.html").exists()
    manifest = read_manifest(tmp_path)
    assert manifest is not None
    assert manifest.format == "html"
    assert manifest.figures["patchwork"].kind == "layout"
    assert manifest.figures["mpg_scatter"].files == ["mpg_scatter.html"]
    assert len(manifest.figures["mpg_scatter"].hash) == 64
    assert "[INFO] Wrote manifest" in capsys.readouterr().out


def test_render_yaml_spec_to_json(tmp_path: Path) -> None:
    spec = tmp_path / "fig.yaml"
    spec.write_text(
        "plot:\n  dataset: scatter3\n  mapping: {x: x, y: y}\n  layers: [{geom: point}]\n",
        encoding="utf-8",
    )
    out = tmp_path / "fig.json"

    assert _run(["render", "--spec", str(spec), "--out", str(out)]) == 0
    assert "$schema" in json.loads(out.read_text(encoding="utf-8"))


def test_render_defaults_to_html_next_to_spec(tmp_path: Path) -> None:
    spec = tmp_path / "fig.yaml"
    spec.write_text(
        "plot:\n  dataset: categories3\n  mapping: {x: category}\n  layers: [{geom: bar}]\n",
        encoding="utf-8",
    )
    assert _run(["render", "--spec", str(spec)]) == 0
    assert (tmp_path / "fig.html").exists()


def test_render_unsupported_format(tmp_path: Path) -> None:
    spec = tmp_path / "fig.yaml"
    spec.write_text("plot: {dataset: scatter3, mapping: {x: x, y: y}, layers: [{geom: point}]}\n")
    assert _run(["render", "--spec", str(spec), "--out", str(tmp_path / "fig.pdf")]) == 2


def test_figure_errors_exit_with_one(tmp_path: Path, capsys) -> None:
    spec = tmp_path / "fig.yaml"
    spec.write_text("plot: {dataset: scatter3, mapping: {x: x}, layers: [{geom: point}]}\n")

    assert _run(["render", "--spec", str(spec)]) == 1
    assert "missing required channels" in capsys.readouterr().err


def test_unknown_example_exits_with_one(tmp_path: Path) -> None:
    assert _run(["examples", "--out-dir", str(tmp_path), "--only", "nope"]) == 1


def test_unknown_command_exits_with_two() -> None:
    assert _run(["plot"]) == 2


def test_setup_logging_replaces_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "ggfig.log"
    setup_logging("INFO")
    logger = setup_logging("DEBUG", log_file=str(log_file))

    assert logger.name == "ggfig"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    logging.getLogger("ggfig.viz").debug("hello")
    for h in logger.handlers:
        h.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")
