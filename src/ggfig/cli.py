from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ggfig.core.errors import FigureError
from ggfig.core.hashing import hash_mapping
from ggfig.io.config import Settings
from ggfig.io.manifest import FigureEntry, GalleryManifest, write_manifest
from ggfig.io.provider import DatasetProvider
from ggfig.logging_config import setup_logging

from .examples import Figure, build_example, list_examples
from .figspec import load_figure_spec
from .viz.charts import layout_to_chart, panel_to_chart
from .viz.compose import Layout
from .viz.save import save

logger = logging.getLogger(__name__)

FORMATS = ("html", "json", "png", "svg")


def _to_chart(figure: Figure, settings: Settings):
    if isinstance(figure, Layout):
        return layout_to_chart(figure, width=settings.chart_width, height=settings.chart_height)
    return panel_to_chart(figure, width=settings.chart_width, height=settings.chart_height)


def _write_figure(figure: Figure, path: Path, fmt: str, settings: Settings) -> list[Path]:
    """Write ``figure`` as ``fmt`` to ``path`` (suffix replaced to match the format)."""
    target = path.with_suffix(f".{fmt}")
    return save(_to_chart(figure, settings), **{f"out_{fmt}": target})


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.load(args.config) if getattr(args, "config", None) else Settings.load()
    level = "DEBUG" if getattr(args, "verbose", False) else settings.log_level
    setup_logging(level)
    return settings


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=str, default=None, help="Path to a ggfig.toml file.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")


def _cmd_datasets(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="ggfig datasets", description="List known datasets.")
    _add_common(p)
    p.add_argument("--schema", action="store_true", help="Also print each dataset's variable kinds.")
    args = p.parse_args(argv)

    settings = _load_settings(args)
    provider = DatasetProvider(settings)
    for name in provider.list_datasets():
        if not args.schema:
            print(name)
            continue
        ds = provider.load(name)
        kinds = ", ".join(f"{k}:{v.value}" for k, v in ds.schema.items())
        print(f"{name} ({ds.height} rows) {kinds}")
    return 0


def _cmd_examples(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="ggfig examples",
        description="Render the example gallery and write a manifest with artifact hashes.",
    )
    _add_common(p)
    p.add_argument("--out-dir", type=str, default="out/figures", help="Output directory.")
    p.add_argument("--format", choices=FORMATS, default="html", help="Output format.")
    p.add_argument(
        "--only",
        action="append",
        default=None,
        metavar="NAME",
        help="Render only this example (repeatable).",
    )
    p.add_argument("--list", action="store_true", help="List example names and exit.")
    args = p.parse_args(argv)

    if args.list:
        for name in list_examples():
            print(name)
        return 0

    settings = _load_settings(args)
    out_dir = Path(args.out_dir)
    names = args.only or list_examples()
    provider = DatasetProvider(settings)
    manifest = GalleryManifest(format=args.format)

    for name in names:
        figure = build_example(name, provider)
        written = _write_figure(figure, out_dir / name, args.format, settings)
        manifest.add(
            name,
            FigureEntry(
                kind="layout" if isinstance(figure, Layout) else "panel",
                hash=hash_mapping(figure.to_dict()),
                files=[str(p.relative_to(out_dir)) for p in written],
            ),
        )
        logger.info("rendered example %s", name)
        print(f"[INFO] Wrote {', '.join(str(p) for p in written)}")

    manifest_path = write_manifest(out_dir, manifest)
    print(f"[INFO] Wrote manifest to {manifest_path}")
    return 0


def _cmd_render(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="ggfig render", description="Render a YAML figure spec.")
    _add_common(p)
    p.add_argument("--spec", type=str, required=True, help="Path to the figure spec (YAML).")
    p.add_argument(
        "--out",
        type=str,
        default=None,
        help="Output file; the suffix picks the format (default: <spec name>.html).",
    )
    args = p.parse_args(argv)

    settings = _load_settings(args)
    spec_path = Path(args.spec)
    figure_spec = load_figure_spec(spec_path)
    figure = figure_spec.build(DatasetProvider(settings))

    out = Path(args.out) if args.out else spec_path.with_suffix(".html")
    fmt = out.suffix.lstrip(".").lower() or "html"
    if fmt not in FORMATS:
        print(f"Unsupported output format: {out.suffix!r} (use one of {FORMATS})", file=sys.stderr)
        return 2
    written = _write_figure(figure, out, fmt, settings)
    print(f"[INFO] Wrote {written[0]} (hash {hash_mapping(figure.to_dict())[:12]})")
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ggfig", description="Example-figure pipeline CLI.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("datasets", help="List known datasets.")
    sub.add_parser("examples", help="Render the example gallery.")
    sub.add_parser("render", help="Render a YAML figure spec.")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    commands = {
        "datasets": _cmd_datasets,
        "examples": _cmd_examples,
        "render": _cmd_render,
    }
    handler = commands.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        raise SystemExit(2)
    try:
        code = handler(rest)
    except FigureError as exc:
        print(f"error: {exc}", file=sys.stderr)
        code = 1
    except RuntimeError as exc:
        # image export without vl-convert-python
        print(f"error: {exc}", file=sys.stderr)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
