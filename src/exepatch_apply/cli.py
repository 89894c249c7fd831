"""exepatch - Validated, reversible patching of a known executable."""
from __future__ import annotations

from pathlib import Path

import click

from exepatch_core.patches import PatchSet, parse_int, resolve_patch_set
from exepatch_core.protocol import EXIT_FAILURE, EXIT_SUCCESS
from exepatch_verify.logic import validate_target
from exepatch_apply.applier import apply_patches
from exepatch_apply.backup import create_backup, restore_backup


def run_patcher(target: Path | None, patch_set: PatchSet) -> int:
    """Backup, validate, then patch `target`. Returns the process exit status.

    Stage failures abort the run. Individual patch failures are reported
    but the run still succeeds once the file has been closed.
    """
    # 1. Path check
    if target is None:
        click.echo("Executable path not provided!", err=True)
        return EXIT_FAILURE
    target = Path(target)
    if not target.is_file():
        click.echo(f"Executable not found at: {target}", err=True)
        return EXIT_FAILURE

    # 2. Safety copy before anything else touches the file
    if create_backup(target) is None:
        click.echo("Backup creation failed. Aborting.", err=True)
        return EXIT_FAILURE

    # 3. Size fingerprint
    if not validate_target(target, patch_set.expected_size):
        click.echo("Executable validation failed. Aborting.", err=True)
        return EXIT_FAILURE

    # 4. Open for read+write, 5. patch; the handle is released on every path
    try:
        f = open(target, "r+b")
    except OSError as e:
        click.echo(f"Failed to open executable for patching: {e}", err=True)
        return EXIT_FAILURE

    click.echo(f"Applying patch set '{patch_set.name}' ({len(patch_set)} patches)")
    with f:
        report = apply_patches(f, patch_set.patches)

    click.echo(f"Applied {report.applied} of {report.total} patches.")
    for p in report.failed:
        click.echo(f"  FAILED 0x{p.offset:X} ({len(p.payload)} bytes) {p.description}", err=True)
    click.echo("Patching completed successfully.")
    return EXIT_SUCCESS


def restore_target(target: Path | None) -> int:
    if target is None:
        click.echo("Executable path not provided!", err=True)
        return EXIT_FAILURE
    return EXIT_SUCCESS if restore_backup(Path(target)) else EXIT_FAILURE


@click.command()
@click.argument("target", required=False, type=click.Path(path_type=Path))
@click.option(
    "--patches",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="EXEPATCH_PATCHES",
    help="Patch set (.json or .parquet). Defaults to the bundled reference set.",
)
@click.option("--expected-size", envvar="EXEPATCH_EXPECTED_SIZE", help="Override the patch set's expected size.")
@click.option("--restore", is_flag=True, help="Restore TARGET from TARGET.backup instead of patching")
def main(target: Path | None, patches: Path | None, expected_size: str | None, restore: bool) -> None:
    """Patch the executable at TARGET in place, keeping TARGET.backup."""
    if restore:
        raise SystemExit(restore_target(target))

    try:
        size = parse_int(expected_size) if expected_size is not None else None
        patch_set = resolve_patch_set(patches, size)
    except ValueError as e:
        # Fail closed, with a single-line reason.
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(EXIT_FAILURE)

    raise SystemExit(run_patcher(target, patch_set))


if __name__ == "__main__":
    main()
