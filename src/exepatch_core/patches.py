"""exepatch - Patch data model and patch-set loading."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .protocol import (
    JSON_SUFFIX,
    META_EXPECTED_SIZE,
    META_NAME,
    PARQUET_SUFFIX,
    REFERENCE_PATCH_SET,
)

TABLE_COLUMNS = ["offset", "payload", "description"]


@dataclass(frozen=True)
class Patch:
    """One (offset, payload) edit at an absolute file position."""

    offset: int
    payload: bytes
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.payload, (bytes, bytearray, memoryview, list, tuple)):
            raise ValueError(f"Patch payload must be bytes or a sequence of ints, got {type(self.payload).__name__}")
        if self.offset < 0:
            raise ValueError(f"Patch offset must be >= 0, got {self.offset}")
        if not self.payload:
            raise ValueError(f"Patch at 0x{self.offset:X} has an empty payload")
        try:
            object.__setattr__(self, "payload", bytes(self.payload))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid payload for patch at 0x{self.offset:X}: {e}") from None

    @property
    def end(self) -> int:
        return self.offset + len(self.payload)

    @classmethod
    def run(cls, offset: int, value: int, count: int, description: str = "") -> Patch:
        """Build a repeated-byte patch (e.g. a NOP sled)."""
        if count < 1:
            raise ValueError(f"Run length must be >= 1, got {count}")
        return cls(offset, bytes([value]) * count, description)


@dataclass(frozen=True)
class PatchSet:
    """A named, ordered list of patches for one known target size.

    Patches keep their file order. Overlapping patches are rejected here,
    out-of-range offsets can only be detected against a real file and are
    left to the writer.
    """

    name: str
    expected_size: int
    patches: tuple[Patch, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "patches", tuple(self.patches))
        if self.expected_size <= 0:
            raise ValueError(f"expected_size must be > 0, got {self.expected_size}")

        prev: Patch | None = None
        for p in sorted(self.patches, key=lambda p: p.offset):
            if prev is not None and p.offset < prev.end:
                raise ValueError(
                    f"Overlapping patches: 0x{prev.offset:X}-0x{prev.end:X} and 0x{p.offset:X}-0x{p.end:X}"
                )
            prev = p

    def __len__(self) -> int:
        return len(self.patches)

    def __iter__(self):
        return iter(self.patches)


def parse_int(value) -> int:
    """Accept ints or strings in any base int(x, 0) understands ("0x2A7", "679")."""
    if isinstance(value, bool):
        raise ValueError(f"Not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 0)
        except ValueError:
            raise ValueError(f"Not an integer: {value!r}") from None
    raise ValueError(f"Not an integer: {value!r}")


def parse_payload(value) -> bytes:
    """Hex string (spaces and ':' ignored) or a list of byte values."""
    if isinstance(value, str):
        hex_str = "".join(value.split()).replace(":", "")
        try:
            return bytes.fromhex(hex_str)
        except ValueError as e:
            raise ValueError(f"Invalid hex payload {value!r}: {e}") from None
    if isinstance(value, list):
        try:
            return bytes(parse_int(v) for v in value)
        except ValueError as e:
            raise ValueError(f"Invalid payload {value!r}: {e}") from None
    raise ValueError(f"Unsupported payload type: {type(value).__name__}")


def _patch_from_dict(d: dict) -> Patch:
    if not isinstance(d, dict):
        raise ValueError(f"Patch entry must be an object: {d!r}")
    if "offset" not in d:
        raise ValueError(f"Patch entry missing 'offset': {d!r}")
    offset = parse_int(d["offset"])
    description = str(d.get("description", ""))

    if "fill" in d:
        fill = parse_payload(d["fill"]) if isinstance(d["fill"], str) else bytes([parse_int(d["fill"])])
        if len(fill) != 1:
            raise ValueError(f"'fill' must be a single byte at 0x{offset:X}")
        return Patch.run(offset, fill[0], parse_int(d.get("count", 1)), description)

    if "payload" not in d:
        raise ValueError(f"Patch entry at 0x{offset:X} needs 'payload' or 'fill'")
    return Patch(offset, parse_payload(d["payload"]), description)


def patch_set_from_dict(obj: dict, default_name: str = "patches") -> PatchSet:
    if not isinstance(obj, dict):
        raise ValueError("Patch set must be a JSON object")
    if "expected_size" not in obj:
        raise ValueError("Patch set missing 'expected_size'")
    entries = obj.get("patches", [])
    if not isinstance(entries, list):
        raise ValueError("'patches' must be a list")

    return PatchSet(
        name=str(obj.get("name", default_name)),
        expected_size=parse_int(obj["expected_size"]),
        patches=tuple(_patch_from_dict(e) for e in entries),
    )


def patch_set_to_dict(patch_set: PatchSet) -> dict:
    return {
        "name": patch_set.name,
        "expected_size": f"0x{patch_set.expected_size:X}",
        "patches": [
            {"offset": f"0x{p.offset:X}", "payload": p.payload.hex().upper(), "description": p.description}
            for p in patch_set
        ],
    }


def _load_json(path: Path) -> PatchSet:
    try:
        obj = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Patch set {path} is not valid JSON: {e}") from None
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Cannot read patch set {path}: {e}") from None
    return patch_set_from_dict(obj, default_name=path.stem)


def _load_parquet(path: Path) -> PatchSet:
    table = pq.read_table(path)
    meta = table.schema.metadata or {}
    if META_EXPECTED_SIZE not in meta:
        raise ValueError(f"Patch table {path} has no expected size in its metadata")

    missing = [c for c in TABLE_COLUMNS if c not in table.column_names]
    if missing:
        raise ValueError(f"Patch table {path} missing columns: {', '.join(missing)}")

    df = table.to_pandas()
    patches = tuple(
        Patch(int(row.offset), bytes(row.payload), str(row.description or ""))
        for row in df.itertuples(index=False)
    )
    return PatchSet(
        name=meta.get(META_NAME, path.stem.encode("utf-8")).decode("utf-8"),
        expected_size=parse_int(meta[META_EXPECTED_SIZE].decode("ascii")),
        patches=patches,
    )


def load_patch_set(path: Path) -> PatchSet:
    """Load a patch set from a .json or .parquet file.

    Raises ValueError (with a one-line reason) for anything unusable.
    """
    path = Path(path)
    if not path.is_file():
        raise ValueError(f"Patch set not found: {path}")

    suffix = path.suffix.lower()
    if suffix == JSON_SUFFIX:
        return _load_json(path)
    if suffix == PARQUET_SUFFIX:
        try:
            return _load_parquet(path)
        except (pa.ArrowException, OSError) as e:
            raise ValueError(f"Patch table {path} is not valid Parquet: {e}") from None
    raise ValueError(f"Unsupported patch set format: {path.suffix or '(none)'}")


def load_reference_patch_set() -> PatchSet:
    """The bundled patch set for the reference executable."""
    res = resources.files("exepatch_core") / "data" / REFERENCE_PATCH_SET
    return patch_set_from_dict(json.loads(res.read_text(encoding="utf-8")), default_name="reference")


def resolve_patch_set(path: Path | None, expected_size: int | None = None) -> PatchSet:
    """Load `path` (or the bundled set), optionally overriding its expected size."""
    patch_set = load_reference_patch_set() if path is None else load_patch_set(path)
    if expected_size is not None:
        patch_set = PatchSet(patch_set.name, expected_size, patch_set.patches)
    return patch_set


def write_patch_table(patch_set: PatchSet, out: Path) -> None:
    """Write a patch set as a Parquet patch table, one row per patch."""
    rows = [{"offset": p.offset, "payload": p.payload, "description": p.description} for p in patch_set]
    # Row order is the apply order.
    df = pd.DataFrame(rows, columns=TABLE_COLUMNS)

    schema = pa.schema(
        [
            ("offset", pa.int64()),
            ("payload", pa.binary()),
            ("description", pa.string()),
        ]
    )
    table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
    meta = dict(table.schema.metadata or {})
    meta[META_NAME] = patch_set.name.encode("utf-8")
    meta[META_EXPECTED_SIZE] = f"0x{patch_set.expected_size:X}".encode("ascii")

    Path(out).parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(table.replace_schema_metadata(meta), out)
