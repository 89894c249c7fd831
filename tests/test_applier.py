from exepatch_apply.applier import apply_patch, apply_patches
from exepatch_apply.writer import ByteWriter
from exepatch_core.patches import Patch
from exepatch_verify.diff import changed_ranges
from conftest import image


def test_applies_in_order_and_leaves_rest(target):
    patches = [
        Patch(0x10, b"\xAA"),
        Patch(0x20, b"\xBB\xCC"),
        Patch(0x40, b"\x90" * 8),
    ]
    with open(target, "r+b") as f:
        report = apply_patches(f, patches)
        assert not f.closed

    assert report.applied == 3
    assert report.failed == []
    after = target.read_bytes()
    assert changed_ranges(image(), after) == [(0x10, 0x11), (0x20, 0x22), (0x40, 0x48)]
    assert after[0x40:0x48] == b"\x90" * 8


def test_out_of_range_patch_does_not_stop_others(target, capsys):
    bad = Patch(0x5000, b"\xEB", "beyond end")
    patches = [Patch(0x10, b"\xAA"), bad, Patch(0x20, b"\xBB\xCC")]
    with open(target, "r+b") as f:
        report = apply_patches(f, patches)

    assert report.applied == 2
    assert report.failed == [bad]
    assert report.total == 3
    assert "0x5000" in capsys.readouterr().err
    after = target.read_bytes()
    assert after[0x10] == 0xAA
    assert after[0x20:0x22] == b"\xBB\xCC"
    assert len(after) == len(image())


def test_uniform_run_uses_single_repeated_write(target, monkeypatch):
    calls = []
    orig = ByteWriter.write_repeated_bytes_at

    def spy(self, pos, value, n):
        calls.append((pos, value, n))
        return orig(self, pos, value, n)

    monkeypatch.setattr(ByteWriter, "write_repeated_bytes_at", spy)
    with open(target, "r+b") as f:
        assert apply_patch(ByteWriter(f), Patch.run(0x30, 0x90, 22))
    assert calls == [(0x30, 0x90, 22)]
    assert target.read_bytes()[0x30:0x30 + 22] == b"\x90" * 22


def test_empty_patch_list(target):
    with open(target, "r+b") as f:
        report = apply_patches(f, [])
    assert report.total == 0
    assert target.read_bytes() == image()
