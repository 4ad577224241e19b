"""ファイル単位の結果キャッシュ。

ファイルの指紋(mtime:size)と設定ダイジェストが前回と同じなら、保存済みの
Diagnostic を再利用してチェックを省く。
"""
from __future__ import annotations
import hashlib
import json
from pathlib import Path
from typing import Dict, Any, Iterable

from .checker import Diagnostic
from .engine import FileReport

DEFAULT_CACHE = ".typocop_cache.json"


def load_cache(root: str, filename: str = DEFAULT_CACHE) -> Dict[str, Any]:
    p = Path(root) / filename
    if not p.is_file():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        # 壊れたキャッシュは無視して作り直す
        return {}
    return data if isinstance(data, dict) else {}


def save_cache(root: str, data: Dict[str, Any], filename: str = DEFAULT_CACHE) -> None:
    p = Path(root) / filename
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def file_fingerprint(path: Path) -> str:
    stat = path.stat()
    return f"{stat.st_mtime_ns}:{stat.st_size}"


def settings_digest(parts: Iterable[str]) -> str:
    h = hashlib.sha1()
    for part in parts:
        h.update(part.encode("utf-8"))
        h.update(b"\0")
    return h.hexdigest()


def lookup(cache: Dict[str, Any], key: str, fingerprint: str, digest: str) -> FileReport | None:
    entry = cache.get(key)
    if not isinstance(entry, dict):
        return None
    if entry.get("fingerprint") != fingerprint or entry.get("settings") != digest:
        return None
    try:
        diagnostics = [Diagnostic.from_dict(d) for d in entry.get("diagnostics", [])]
    except (KeyError, TypeError):
        return None
    return FileReport(path=key, diagnostics=diagnostics, words=int(entry.get("words", 0)), cached=True)


def store(cache: Dict[str, Any], report: FileReport, fingerprint: str, digest: str) -> None:
    """エラーになったファイルは保存しない(次回も再チェックする)。"""
    if report.error is not None:
        cache.pop(report.path, None)
        return
    diagnostics = []
    for d in report.diagnostics:
        item = d.to_dict()
        item["span"]["index"] = d.span.start.index
        diagnostics.append(item)
    cache[report.path] = {
        "fingerprint": fingerprint,
        "settings": digest,
        "words": report.words,
        "diagnostics": diagnostics,
    }


def prune(cache: Dict[str, Any], keep: Iterable[str]) -> int:
    """keep に無いパスの項目(削除・改名されたファイル)を取り除き、その件数を返す。"""
    alive = set(keep)
    stale = [key for key in cache if key not in alive]
    for key in stale:
        del cache[key]
    return len(stale)


__all__ = [
    "load_cache",
    "save_cache",
    "file_fingerprint",
    "settings_digest",
    "lookup",
    "store",
    "prune",
    "DEFAULT_CACHE",
]
