import json

from click.testing import CliRunner

from exepatch_apply.table import main
from exepatch_core.patches import load_patch_set


def test_export_parquet_and_show(tmp_path):
    src = tmp_path / "set.json"
    src.write_text(json.dumps({
        "name": "demo",
        "expected_size": "0x100",
        "patches": [
            {"offset": "0x20", "payload": "BBCC", "description": "second"},
            {"offset": "0x10", "payload": "AA", "description": "first"},
        ],
    }))
    out = tmp_path / "demo.parquet"

    r = CliRunner().invoke(main, ["export", str(src), str(out)])
    assert r.exit_code == 0, r.output
    loaded = load_patch_set(out)
    assert loaded.name == "demo"
    assert loaded.expected_size == 0x100
    assert [p.offset for p in loaded] == [0x20, 0x10]

    r = CliRunner().invoke(main, ["show", str(out)])
    assert r.exit_code == 0
    lines = r.output.splitlines()
    assert lines[0] == "demo: expected size 0x100 (256 bytes)"
    assert lines[1].startswith("0x00000020")
    assert lines[1].endswith("second")
    assert lines[2].endswith("first")


def test_export_json_round_trip(tmp_path):
    src = tmp_path / "set.json"
    src.write_text(json.dumps({"expected_size": 64, "patches": [{"offset": 3, "fill": 0, "count": 2}]}))
    out = tmp_path / "copy.json"
    r = CliRunner().invoke(main, ["export", str(src), str(out)])
    assert r.exit_code == 0, r.output
    assert load_patch_set(out) == load_patch_set(src)


def test_export_invalid_source(tmp_path):
    src = tmp_path / "set.json"
    src.write_text("[]")
    r = CliRunner().invoke(main, ["export", str(src), str(tmp_path / "out.parquet")])
    assert r.exit_code == 1
    assert "FATAL:" in r.output
