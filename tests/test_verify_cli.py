import json

from click.testing import CliRunner

from exepatch_verify.cli import main
from exepatch_verify.diff import changed_ranges
from conftest import TARGET_SIZE, image


def invoke(*args, **kwargs):
    return CliRunner().invoke(main, [str(a) for a in args], **kwargs)


def test_changed_ranges_identical():
    assert changed_ranges(image(), image()) == []


def test_changed_ranges_across_chunks():
    a = bytes(10000)
    b = bytearray(a)
    b[4090:4100] = b"\xFF" * 10
    b[9999] = 1
    assert changed_ranges(a, bytes(b)) == [(4090, 4100), (9999, 10000)]


def test_changed_ranges_length_difference():
    assert changed_ranges(b"abc", b"abcde") == [(3, 5)]
    assert changed_ranges(b"abX", b"abcde") == [(2, 5)]


def test_target_pass(target):
    r = invoke("target", target, "--expected-size", hex(TARGET_SIZE))
    assert r.exit_code == 0
    assert json.loads(r.output)["status"] == "PASS"


def test_target_fail_reference_size(target):
    r = invoke("target", target)
    assert r.exit_code == 1
    result = json.loads(r.output)
    assert result["errors"][0]["code"] == "E_SIZE_MISMATCH"
    assert result["errors"][0]["expected"] == 0x757C00


def test_target_invalid_patch_set(target, tmp_path):
    bad = tmp_path / "x.yaml"
    bad.write_text("")
    r = invoke("target", target, "--patches", bad)
    assert r.exit_code == 1
    assert json.loads(r.output)["errors"][0]["code"] == "E_PATCH_SET_INVALID"


def test_applied(target, tmp_path):
    patches = tmp_path / "set.json"
    patches.write_text(json.dumps({"expected_size": TARGET_SIZE, "patches": [{"offset": 1, "payload": "01"}]}))
    # Byte 1 of the fixture image is already 0x01.
    r = invoke("applied", target, "--patches", patches)
    assert r.exit_code == 0
    assert json.loads(r.output)["applied_count"] == 1


def test_diff(target, tmp_path):
    other = tmp_path / "other.exe"
    data = bytearray(image())
    data[0x80:0x84] = b"\x90" * 4
    other.write_bytes(bytes(data))
    r = invoke("diff", target, other)
    assert r.exit_code == 0
    assert json.loads(r.output) == {"ranges": [[0x80, 0x84]], "size_a": TARGET_SIZE, "size_b": TARGET_SIZE}
