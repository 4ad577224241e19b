"""設定ファイル (TOML) と無視リストの読み込み。

pyproject.toml などの [tool.typocop] テーブルを読む。キーは camelCase:

[tool.typocop]
dict = ["dictionaries/*.txt"]     # 追加の単語リスト(グロブ可)
defaultDict = true                # 同梱語彙とシステム辞書を使うか
ignore = ["typocop"]              # 無視する単語
ignoreFiles = [".typocop-ignore"] # 無視リストファイル(txt/json/yaml)
languages = ["langs.yaml"]        # 追加の言語定義
exclude = ["*.min.js"]
suggest = true
maxSuggestions = 3
maxDistance = 2
minWordLength = 2
jobs = 4
encoding = "utf-8"
failOnIssue = false

相対パスは設定ファイルのあるディレクトリ基準で解決する。
"""
from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List

from .dictionary import load_word_list, normalize
from .errors import ConfigError, DictionaryLoadError

CONFIG_TABLE = "typocop"


@dataclass
class Settings:
    dict_files: List[str] = field(default_factory=list)
    default_dict: bool = True
    ignore: List[str] = field(default_factory=list)
    ignore_files: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    suggest: bool = False
    max_suggestions: int = 3
    max_distance: int = 2
    min_word_length: int = 2
    jobs: int = 1
    encoding: str = "utf-8"
    fail_on_issue: bool = False


# TOML キー -> (属性名, 型, パスとして解決するか)
_KEYS: Dict[str, tuple[str, type, bool]] = {
    "dict": ("dict_files", list, True),
    "defaultDict": ("default_dict", bool, False),
    "ignore": ("ignore", list, False),
    "ignoreFiles": ("ignore_files", list, True),
    "languages": ("languages", list, True),
    "exclude": ("exclude", list, False),
    "suggest": ("suggest", bool, False),
    "maxSuggestions": ("max_suggestions", int, False),
    "maxDistance": ("max_distance", int, False),
    "minWordLength": ("min_word_length", int, False),
    "jobs": ("jobs", int, False),
    "encoding": ("encoding", str, False),
    "failOnIssue": ("fail_on_issue", bool, False),
}


def read_table(path: str | Path) -> Dict[str, Any] | None:
    """TOML の [tool.typocop] を返す。テーブルが無ければ None。"""
    p = Path(path)
    try:
        with p.open("rb") as f:
            cfg = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"failed to read config {p}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"failed to parse config {p}: {e}") from e
    tool = cfg.get("tool", {})
    table = tool.get(CONFIG_TABLE) if isinstance(tool, dict) else None
    if table is None:
        return None
    if not isinstance(table, dict):
        raise ConfigError(f"{p}: [tool.{CONFIG_TABLE}] must be a table")
    return table


def settings_from_table(table: Dict[str, Any], base_dir: Path | None = None) -> Settings:
    settings = Settings()
    for key, value in table.items():
        if key not in _KEYS:
            raise ConfigError(f"unknown config key: {key}")
        attr, kind, is_path = _KEYS[key]
        if kind is list:
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{key} must be a list of strings")
            if is_path and base_dir is not None:
                value = [str(base_dir / v) for v in value]
        elif kind is bool:
            if not isinstance(value, bool):
                raise ConfigError(f"{key} must be true or false")
        elif kind is int:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{key} must be a non-negative integer")
        elif not isinstance(value, str):
            raise ConfigError(f"{key} must be a string")
        setattr(settings, attr, value)
    return settings


def load_settings(path: str | Path | None = None, cwd: str | Path = ".") -> Settings:
    """path 指定時はそのファイル、無ければ cwd の pyproject.toml を探す。"""
    if path is not None:
        p = Path(path)
        table = read_table(p)
        if table is None:
            raise ConfigError(f"{p}: no [tool.{CONFIG_TABLE}] table")
        return settings_from_table(table, p.resolve().parent)
    candidate = Path(cwd) / "pyproject.toml"
    if candidate.is_file():
        table = read_table(candidate)
        if table is not None:
            return settings_from_table(table, candidate.resolve().parent)
    return Settings()


def load_ignore_words(files: Iterable[str | Path] = (), words: Iterable[str] = ()) -> FrozenSet[str]:
    """無視リストファイルとインラインの単語をまとめて正規化した集合にする。"""
    out = {normalize(w) for w in words}
    for f in files:
        try:
            out.update(normalize(w) for w in load_word_list(f))
        except DictionaryLoadError as e:
            raise ConfigError(f"failed to load ignore list {e.source}: {e.reason}") from e
    out.discard("")
    return frozenset(out)


__all__ = [
    "Settings",
    "load_settings",
    "load_ignore_words",
    "read_table",
    "settings_from_table",
]
