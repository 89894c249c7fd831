"""exepatch - Patch table conversion and listing."""
from __future__ import annotations

import json
from pathlib import Path

import click

from exepatch_core.patches import load_patch_set, patch_set_to_dict, write_patch_table
from exepatch_core.protocol import JSON_SUFFIX


def _load(src: Path):
    try:
        return load_patch_set(src)
    except ValueError as e:
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)


@click.group()
def main():
    pass


@main.command("export")
@click.argument("src", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
def export_cmd(src: Path, out: Path):
    """Write the patch set SRC to OUT (.parquet patch table, or .json)."""
    patch_set = _load(src)
    if out.suffix.lower() == JSON_SUFFIX:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(patch_set_to_dict(patch_set), indent=2) + "\n", encoding="utf-8")
    else:
        write_patch_table(patch_set, out)
    click.echo(f"PASS: Patch set written to {out}")
    click.echo(f"  Patches: {len(patch_set)}")


@main.command("show")
@click.argument("src", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show_cmd(src: Path):
    """List the patches in SRC."""
    patch_set = _load(src)
    click.echo(f"{patch_set.name}: expected size 0x{patch_set.expected_size:X} ({patch_set.expected_size} bytes)")
    for p in patch_set:
        click.echo(f"0x{p.offset:08X}  {len(p.payload):4d}  {p.description}")


if __name__ == "__main__":
    main()
