import json
from pathlib import Path
import click
from exepatch_core.patches import parse_int, resolve_patch_set
from .const import ERRORS
from .diff import diff_files
from .logic import check_applied, check_target

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}


def _emit(result: dict) -> None:
    click.echo(json.dumps(result, **CANONICAL_JSON_KW))
    if result.get("status") == "FAIL":
        raise SystemExit(1)


def _load(patches: Path | None, expected_size: str | None):
    try:
        size = parse_int(expected_size) if expected_size is not None else None
        return resolve_patch_set(patches, size)
    except ValueError as e:
        _emit({"status": "FAIL", "error_count": 1, "errors": [
            {"code": "E_PATCH_SET_INVALID", "message": ERRORS["E_PATCH_SET_INVALID"], "detail": str(e)}
        ]})


patches_option = click.option(
    "--patches", type=click.Path(dir_okay=False, path_type=Path), envvar="EXEPATCH_PATCHES",
    help="Patch set (.json or .parquet). Defaults to the bundled reference set.",
)


@click.group()
def main():
    pass


@main.command("target")
@click.argument("path", type=click.Path(path_type=Path))
@patches_option
@click.option("--expected-size", envvar="EXEPATCH_EXPECTED_SIZE", help="Override expected size (e.g. 0x757C00).")
def target_cmd(path: Path, patches: Path | None, expected_size: str | None):
    """Check that PATH is a valid patch target."""
    patch_set = _load(patches, expected_size)
    _emit(check_target(path, patch_set.expected_size))


@main.command("applied")
@click.argument("path", type=click.Path(path_type=Path))
@patches_option
def applied_cmd(path: Path, patches: Path | None):
    """Check that every patch of the set is present in PATH."""
    patch_set = _load(patches, None)
    _emit(check_applied(path, patch_set))


@main.command("diff")
@click.argument("original", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("patched", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def diff_cmd(original: Path, patched: Path):
    """List byte ranges that differ between ORIGINAL and PATCHED."""
    _emit(diff_files(original, patched))


if __name__ == "__main__":
    main()
