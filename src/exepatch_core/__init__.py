"""exepatch Core - Patch model and shared protocol constants."""
from .patches import Patch, PatchSet, load_patch_set, load_reference_patch_set, write_patch_table

__all__ = ["Patch", "PatchSet", "load_patch_set", "load_reference_patch_set", "write_patch_table"]
