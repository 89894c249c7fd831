import os
from pathlib import Path

import click

from exepatch_core.patches import PatchSet
from .const import ERRORS


def _result(errors: list[dict], **extra) -> dict:
    status = "FAIL" if errors else "PASS"
    return {"status": status, "error_count": len(errors), "errors": errors, **extra}


def _error(code: str, **detail) -> dict:
    return {"code": code, "message": ERRORS[code], **detail}


def check_target(path: Path, expected_size: int) -> dict:
    """Pre-flight gate: the target exists, opens, and has the expected size.

    Only the gross size is inspected. For a known release the size is a
    reliable fingerprint, content is never read.
    """
    path = Path(path)
    if not path.exists():
        return _result([_error("E_FILE_NOT_FOUND", path=str(path))])

    try:
        with open(path, "rb") as f:
            actual = f.seek(0, os.SEEK_END)
    except OSError as e:
        return _result([_error("E_OPEN_FAILURE", path=str(path), detail=str(e))])

    if actual != expected_size:
        return _result([_error("E_SIZE_MISMATCH", path=str(path), expected=expected_size, actual=actual)])

    return _result([], size=actual)


def validate_target(path: Path, expected_size: int) -> bool:
    result = check_target(path, expected_size)
    if result["status"] == "PASS":
        click.echo("Executable validation passed.")
        return True

    err = result["errors"][0]
    code = err["code"]
    if code == "E_FILE_NOT_FOUND":
        click.echo("Executable not found.", err=True)
    elif code == "E_OPEN_FAILURE":
        click.echo(f"Failed to open executable for validation: {err['detail']}", err=True)
    else:
        click.echo(
            f"Validation failed: unexpected file size (expected {err['expected']} bytes, found {err['actual']}).",
            err=True,
        )
    return False


def check_applied(path: Path, patch_set: PatchSet) -> dict:
    """Report which patches of a set are present in the file at `path`."""
    path = Path(path)
    if not path.exists():
        return _result([_error("E_FILE_NOT_FOUND", path=str(path))])

    errors = []
    try:
        with open(path, "rb") as f:
            for p in patch_set:
                f.seek(p.offset)
                found = f.read(len(p.payload))
                if found != p.payload:
                    errors.append(
                        _error(
                            "E_PATCH_NOT_APPLIED",
                            offset=f"0x{p.offset:X}",
                            expected=p.payload.hex().upper(),
                            found=found.hex().upper(),
                            description=p.description,
                        )
                    )
    except OSError as e:
        return _result([_error("E_OPEN_FAILURE", path=str(path), detail=str(e))])

    return _result(errors, applied_count=len(patch_set) - len(errors), patch_count=len(patch_set))
