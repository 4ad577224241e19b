"""言語ごとのコメント/文字列構文の記述子。

構文はコードではなくデータとして持つ。新しい言語は JSON/YAML を足すだけでよい。

フォーマット例 (YAML):
---
- name: python
  extensions: [".py", ".pyi"]
  line_comments: ["#"]
  block_comments: []
  strings:
    - {open: "'''", close: "'''", multiline: true}
    - {open: '"', close: '"'}

JSON: 上記と同じ構造の配列。単一オブジェクトも可。
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

import yaml

from .errors import ConfigError

_DATA_FILE = Path(__file__).parent / "data" / "languages.json"


@dataclass(frozen=True, slots=True)
class BlockComment:
    open: str
    close: str
    nested: bool = False


@dataclass(frozen=True, slots=True)
class StringDelimiter:
    open: str
    close: str
    escape: str | None = "\\"
    multiline: bool = False


@dataclass(frozen=True, slots=True)
class LanguageSyntax:
    name: str
    extensions: Tuple[str, ...] = ()
    line_comments: Tuple[str, ...] = ()
    block_comments: Tuple[BlockComment, ...] = ()
    strings: Tuple[StringDelimiter, ...] = ()
    filenames: Tuple[str, ...] = field(default=())

    def openers(self) -> List[Tuple[str, object]]:
        """(開始記号, 種別) を長い記号から順に返す。`\"\"\"` は `\"` より先に試す。"""
        items: List[Tuple[str, object]] = []
        items.extend((m, "line") for m in self.line_comments)
        items.extend((b.open, b) for b in self.block_comments)
        items.extend((s.open, s) for s in self.strings)
        items.sort(key=lambda it: -len(it[0]))
        return items


TEXT = LanguageSyntax(name="text")


def _as_str_tuple(value: Any, what: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"{what} は空でない文字列の配列である必要があります")
    return tuple(value)


def syntax_from_dict(item: Dict[str, Any]) -> LanguageSyntax:
    if not isinstance(item, dict) or not item.get("name"):
        raise ConfigError(f"言語定義には name が必要です: {item!r}")
    name = str(item["name"])
    blocks: List[BlockComment] = []
    for b in item.get("block_comments") or []:
        if isinstance(b, list):
            b = dict(zip(("open", "close", "nested"), b))
        if not isinstance(b, dict) or not b.get("open") or not b.get("close"):
            raise ConfigError(f"{name}: block_comments の要素が不正です: {b!r}")
        blocks.append(BlockComment(open=str(b["open"]), close=str(b["close"]), nested=bool(b.get("nested", False))))
    strings: List[StringDelimiter] = []
    for s in item.get("strings") or []:
        if isinstance(s, list):
            s = dict(zip(("open", "close", "escape", "multiline"), s))
        if not isinstance(s, dict) or not s.get("open"):
            raise ConfigError(f"{name}: strings の要素が不正です: {s!r}")
        escape = s.get("escape", "\\")
        strings.append(StringDelimiter(
            open=str(s["open"]),
            close=str(s.get("close") or s["open"]),
            escape=str(escape) if escape else None,
            multiline=bool(s.get("multiline", False)),
        ))
    extensions = tuple(e.lower() for e in _as_str_tuple(item.get("extensions"), f"{name}.extensions"))
    return LanguageSyntax(
        name=name,
        extensions=extensions,
        line_comments=_as_str_tuple(item.get("line_comments"), f"{name}.line_comments"),
        block_comments=tuple(blocks),
        strings=tuple(strings),
        filenames=_as_str_tuple(item.get("filenames"), f"{name}.filenames"),
    )


def _parse_definitions(data: Any, source: str) -> List[LanguageSyntax]:
    if isinstance(data, dict):
        data = data.get("languages", [data])
    if not isinstance(data, list):
        raise ConfigError(f"{source}: 言語定義は配列である必要があります")
    return [syntax_from_dict(item) for item in data]


def load_language_file(path: str | Path) -> List[LanguageSyntax]:
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"言語定義ファイルが見つかりません: {p}")
    text = p.read_text(encoding="utf-8-sig")
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"{p}: 解析に失敗しました: {e}") from e
    return _parse_definitions(data, str(p))


@lru_cache(maxsize=1)
def builtin_languages() -> Tuple[LanguageSyntax, ...]:
    data = json.loads(_DATA_FILE.read_text(encoding="utf-8"))
    return tuple(_parse_definitions(data, str(_DATA_FILE)))


class LanguageRegistry:
    """拡張子/ファイル名から LanguageSyntax を引く。後から登録したものが優先。"""

    def __init__(self, languages: Iterable[LanguageSyntax] = ()):
        self._by_name: Dict[str, LanguageSyntax] = {}
        self._by_ext: Dict[str, LanguageSyntax] = {}
        self._by_filename: Dict[str, LanguageSyntax] = {}
        for lang in languages:
            self.register(lang)

    @classmethod
    def default(cls) -> "LanguageRegistry":
        return cls(builtin_languages())

    def register(self, lang: LanguageSyntax) -> None:
        self._by_name[lang.name] = lang
        for ext in lang.extensions:
            self._by_ext[ext] = lang
        for fn in lang.filenames:
            self._by_filename[fn] = lang

    def get(self, name: str) -> LanguageSyntax:
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigError(f"未知の言語です: {name}") from None

    def names(self) -> List[str]:
        return sorted(self._by_name)

    def for_path(self, path: str | Path) -> LanguageSyntax:
        p = Path(path)
        if p.name in self._by_filename:
            return self._by_filename[p.name]
        return self._by_ext.get(p.suffix.lower(), self._by_name.get("text", TEXT))


def language_for_path(path: str | Path) -> LanguageSyntax:
    return _default_registry().for_path(path)


@lru_cache(maxsize=1)
def _default_registry() -> LanguageRegistry:
    return LanguageRegistry.default()


__all__ = [
    "BlockComment",
    "StringDelimiter",
    "LanguageSyntax",
    "LanguageRegistry",
    "TEXT",
    "builtin_languages",
    "language_for_path",
    "load_language_file",
    "syntax_from_dict",
]
