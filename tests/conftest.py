from pathlib import Path

import pytest

from exepatch_core.patches import Patch, PatchSet

TARGET_SIZE = 0x100


def image(size: int = TARGET_SIZE) -> bytes:
    return bytes(i & 0xFF for i in range(size))


@pytest.fixture
def target(tmp_path) -> Path:
    p = tmp_path / "game.exe"
    p.write_bytes(image())
    return p


@pytest.fixture
def scenario_set() -> PatchSet:
    return PatchSet(
        name="scenario",
        expected_size=TARGET_SIZE,
        patches=(
            Patch(0x10, bytes([0xAA]), "single byte"),
            Patch(0x20, bytes([0xBB, 0xCC]), "two bytes"),
        ),
    )
