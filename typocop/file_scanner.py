"""ファイル走査ユーティリティ。

- ディレクトリは再帰的に、グロブパターン(src/**/*.ts など)は展開して列挙
- .git や node_modules などの定番ディレクトリは除外。--exclude で追加可
- バイナリらしいものはヒューリスティックで判定(デコード時に DecodeError 扱い)
"""
from __future__ import annotations
import fnmatch
import glob
import os
from pathlib import Path
from typing import Iterator, Iterable, Sequence

BINARY_BYTES = set(range(0, 9)) | {11, 12} | set(range(14, 32))
DEFAULT_EXCLUDE_DIRS = frozenset({".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv", "venv", ".tox", "dist", "build"})


def is_probably_text(data: bytes, threshold: float = 0.30) -> bool:
    if not data:
        return True
    sample = data[:8192]
    if b"\x00" in sample and not sample.startswith((b"\xff\xfe", b"\xfe\xff")):
        return False
    non_text = sum(b in BINARY_BYTES for b in sample)
    ratio = non_text / len(sample)
    return ratio < threshold


def read_bytes(path: str | os.PathLike[str]) -> bytes:
    return Path(path).read_bytes()


def _excluded(path: Path, patterns: Sequence[str]) -> bool:
    s = path.as_posix()
    return any(fnmatch.fnmatch(s, pat) or fnmatch.fnmatch(path.name, pat) for pat in patterns)


def iter_files(paths: Iterable[str | os.PathLike[str]], exclude: Sequence[str] = ()) -> Iterator[Path]:
    seen: set[Path] = set()

    def emit(p: Path) -> Iterator[Path]:
        if p not in seen and not _excluded(p, exclude):
            seen.add(p)
            yield p

    for p in paths:
        s = os.fspath(p)
        if glob.has_magic(s):
            for m in sorted(glob.glob(s, recursive=True)):
                if Path(m).is_file():
                    yield from emit(Path(m))
            continue
        path = Path(s)
        if path.is_file():
            yield from emit(path)
        elif path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(d for d in dirs if d not in DEFAULT_EXCLUDE_DIRS and not _excluded(Path(root) / d, exclude))
                for f in sorted(files):
                    yield from emit(Path(root) / f)


__all__ = ["iter_files", "read_bytes", "is_probably_text", "DEFAULT_EXCLUDE_DIRS"]
