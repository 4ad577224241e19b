"""既知語辞書と綴り候補の提示。

- 構築後は不変。複数スレッドからロックなしで共有してよい
- contains は frozenset による O(1) の所属判定
- suggest は rapidfuzz の Damerau-Levenshtein 距離で近傍語を探す。
  長さの差が max_distance を超える語は比較しない

辞書形式:
- プレーンテキスト: 1行1語（UTF-8）。コメント行は先頭#で無視。
- JSON: {"words": ["word", ...]} または ["word", ...]
- YAML: JSON と同じ構造
"""
from __future__ import annotations

import glob
import json
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

import yaml
from rapidfuzz import process
from rapidfuzz.distance import DamerauLevenshtein

from .errors import DictionaryLoadError

BUNDLED_WORDS = Path(__file__).parent / "data" / "words" / "programming.txt"
SYSTEM_WORD_LISTS = ("/usr/share/dict/words", "/usr/dict/words")
DEFAULT_MAX_DISTANCE = 2


def normalize(word: str) -> str:
    return word.strip().lower()


class Dictionary:
    """正規化済み単語の不変集合。"""

    __slots__ = ("_words", "_by_length")

    def __init__(self, words: Iterable[str] = ()):
        normalized = frozenset(w for w in (normalize(x) for x in words) if w)
        buckets: Dict[int, List[str]] = {}
        for w in normalized:
            buckets.setdefault(len(w), []).append(w)
        self._words = normalized
        self._by_length: Dict[int, Tuple[str, ...]] = {k: tuple(sorted(v)) for k, v in buckets.items()}

    def contains(self, word: str) -> bool:
        return word.lower() in self._words

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def __repr__(self) -> str:
        return f"Dictionary({len(self._words)} words)"

    def union(self, *others: "Dictionary") -> "Dictionary":
        words = set(self._words)
        for other in others:
            words.update(other._words)
        return Dictionary(words)

    __or__ = union

    def suggest(self, word: str, max_distance: int = DEFAULT_MAX_DISTANCE, limit: int | None = None) -> List[str]:
        """word から編集距離 max_distance 以内の語を (距離, 辞書順) で返す。

        重い処理なので、未知語と確定したものにだけ呼ぶこと。
        """
        query = word.lower()
        if max_distance < 0 or not query:
            return []
        found: List[Tuple[int, str]] = []
        lo = max(1, len(query) - max_distance)
        for length in range(lo, len(query) + max_distance + 1):
            bucket = self._by_length.get(length)
            if not bucket:
                continue
            for cand, dist, _idx in process.extract(
                query,
                bucket,
                scorer=DamerauLevenshtein.distance,
                score_cutoff=max_distance,
                limit=None,
            ):
                found.append((int(dist), cand))
        found.sort()
        words = [w for _d, w in found]
        return words if limit is None else words[:limit]


def _words_from_data(data, source: str) -> List[str]:
    if isinstance(data, dict):
        data = data.get("words", [])
    if not isinstance(data, list):
        raise DictionaryLoadError(source, "expected a list of words or {\"words\": [...]}")
    return [str(w) for w in data if w is not None]


def load_word_list(path: str | Path) -> List[str]:
    """単語リストファイルを1つ読む。読めなければ DictionaryLoadError。"""
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise DictionaryLoadError(str(p), e.strerror or str(e)) from e
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DictionaryLoadError(str(p), f"not valid UTF-8: {e.reason}") from e
    suffix = p.suffix.lower()
    if suffix == ".json":
        try:
            return _words_from_data(json.loads(text), str(p))
        except json.JSONDecodeError as e:
            raise DictionaryLoadError(str(p), f"invalid JSON: {e}") from e
    if suffix in {".yaml", ".yml"}:
        try:
            return _words_from_data(yaml.safe_load(text), str(p))
        except yaml.YAMLError as e:
            raise DictionaryLoadError(str(p), f"invalid YAML: {e}") from e
    # プレーンテキスト
    words: List[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        words.append(line)
    return words


def _expand(source: str | Path) -> List[Path]:
    s = str(source)
    if glob.has_magic(s):
        matches = [Path(m) for m in sorted(glob.glob(s, recursive=True)) if Path(m).is_file()]
        if not matches:
            raise DictionaryLoadError(s, "pattern matched no files")
        return matches
    return [Path(s)]


def build_dictionary(sources: Sequence[str | Path]) -> Dictionary:
    """単語リスト群(パスまたはグロブ)の和集合として Dictionary を作る。

    どれか1つでも読めない、または正規化後に空なら DictionaryLoadError。
    """
    if not sources:
        raise DictionaryLoadError("<none>", "no word-list sources given")
    words: set[str] = set()
    for source in sources:
        for path in _expand(source):
            chunk = {w for w in (normalize(x) for x in load_word_list(path)) if w}
            if not chunk:
                raise DictionaryLoadError(str(path), "empty after normalization")
            words.update(chunk)
    return Dictionary(words)


def default_sources() -> List[Path]:
    """--dict 未指定時の既定: 同梱のプログラミング語彙 + あればシステム辞書。"""
    sources = [BUNDLED_WORDS]
    for p in SYSTEM_WORD_LISTS:
        if Path(p).is_file():
            sources.append(Path(p))
            break
    return sources


__all__ = [
    "Dictionary",
    "build_dictionary",
    "default_sources",
    "load_word_list",
    "normalize",
    "BUNDLED_WORDS",
]
