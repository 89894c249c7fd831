from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Iterable

from exepatch_core.patches import Patch
from .writer import ByteWriter


@dataclass
class PatchReport:
    applied: int = 0
    failed: list[Patch] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.applied + len(self.failed)


def apply_patch(writer: ByteWriter, patch: Patch) -> bool:
    payload = patch.payload
    if len(payload) == 1:
        return writer.write_byte_at(patch.offset, payload[0])
    if payload.count(payload[0]) == len(payload):
        return writer.write_repeated_bytes_at(patch.offset, payload[0], len(payload))
    return writer.write_bytes_at(patch.offset, payload)


def apply_patches(f: BinaryIO, patches: Iterable[Patch]) -> PatchReport:
    """Apply `patches` to the open file `f` in list order.

    Offsets are not checked against the file here; a patch the writer
    refuses is recorded as failed and the run moves on. `f` stays open.
    """
    writer = ByteWriter(f)
    report = PatchReport()
    for p in patches:
        if apply_patch(writer, p):
            report.applied += 1
        else:
            report.failed.append(p)
    return report
