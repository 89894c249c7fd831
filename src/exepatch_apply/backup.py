from __future__ import annotations

import os
import shutil
from pathlib import Path

import click

from exepatch_core.protocol import BACKUP_SUFFIX


def backup_path_for(path: Path) -> Path:
    path = Path(path)
    return path.with_name(path.name + BACKUP_SUFFIX)


def create_backup(path: Path) -> Path | None:
    """Copy `path` to `path.backup`, replacing any earlier backup.

    Returns the backup path, or None if the copy failed. Nothing may be
    written to the target unless this succeeded.
    """
    backup = backup_path_for(path)
    try:
        shutil.copy2(path, backup)
    except OSError as e:
        click.echo(f"Failed to create backup: {e}", err=True)
        return None
    click.echo(f"Backup created at: {backup}")
    return backup


def restore_backup(path: Path) -> bool:
    """Replace `path` with its backup. Destroys the patched file and consumes the backup."""
    path = Path(path)
    backup = backup_path_for(path)
    if not backup.exists():
        click.echo("Backup not found.", err=True)
        return False

    try:
        if path.exists():
            path.unlink()
        os.rename(backup, path)
    except OSError as e:
        click.echo(f"Failed to restore backup: {e}", err=True)
        return False
    click.echo(f"Backup restored to: {path}")
    return True
