from pathlib import Path

CHUNK = 4096


def changed_ranges(a: bytes, b: bytes) -> list[tuple[int, int]]:
    """Half-open [start, end) ranges where `a` and `b` differ.

    Bytes past the end of the shorter image count as changed.
    """
    ranges: list[tuple[int, int]] = []
    start = None
    common = min(len(a), len(b))

    for base in range(0, common, CHUNK):
        ca = a[base:base + CHUNK]
        cb = b[base:base + CHUNK]
        if ca == cb:
            if start is not None:
                ranges.append((start, base))
                start = None
            continue
        for i, (x, y) in enumerate(zip(ca, cb)):
            if x != y:
                if start is None:
                    start = base + i
            elif start is not None:
                ranges.append((start, base + i))
                start = None

    if len(a) != len(b):
        if start is None:
            start = common
        ranges.append((start, max(len(a), len(b))))
    elif start is not None:
        ranges.append((start, common))
    return ranges


def diff_files(original: Path, patched: Path) -> dict:
    a = Path(original).read_bytes()
    b = Path(patched).read_bytes()
    return {
        "size_a": len(a),
        "size_b": len(b),
        "ranges": [[s, e] for s, e in changed_ranges(a, b)],
    }
