"""高レベル API: 1ファイル(バッファ)に対する綴りチェック

Tokenizer -> Splitter -> Dictionary.contains を順に通し、未知語ごとに
Diagnostic を遅延生成する。

- 数字だけの語・短すぎる語・無視リストの語はチェックしない
- 識別子全体が辞書/無視リストにあればその識別子は分割しない (例: gitHub)
- 候補提示 (suggest) は重いので、オプション有効時に未知語にだけ計算する
"""
from __future__ import annotations

import codecs
import sys
from dataclasses import dataclass
from typing import AbstractSet, Any, Dict, Iterator, List, Tuple

from .dictionary import DEFAULT_MAX_DISTANCE, Dictionary
from .errors import ConfigError, DecodeError
from .file_scanner import is_probably_text
from .language import LanguageSyntax, language_for_path
from .spans import Position, Span
from .splitter import iter_words
from .tokenizer import TokenKind, tokenize


@dataclass(frozen=True)
class CheckOptions:
    suggest_unknown: bool = False
    max_suggestions: int = 3
    max_distance: int = DEFAULT_MAX_DISTANCE
    min_word_length: int = 2
    encoding: str = "utf-8"


@dataclass
class CheckStats:
    words: int = 0
    unknown: int = 0


@dataclass(frozen=True)
class Diagnostic:
    word: str
    normalized: str
    span: Span
    suggestions: Tuple[str, ...] = ()
    file: str | None = None

    @property
    def message(self) -> str:
        return f"unknown word {self.word!r}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "word": self.word,
            "normalized": self.normalized,
            "span": self.span.to_dict(),
            "suggestions": list(self.suggestions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Diagnostic":
        """to_dict の逆変換。キャッシュからの復元用。"""
        s = data["span"]
        word = data["word"]
        start = Position(offset=s["byteOffset"], index=s.get("index", 0), line=s["startLine"], column=s["startColumn"])
        end = Position(
            offset=s["byteOffset"] + s["byteLength"],
            index=start.index + len(word),
            line=s["endLine"],
            column=s["endColumn"],
        )
        return cls(
            word=word,
            normalized=data["normalized"],
            span=Span(start, end),
            suggestions=tuple(data.get("suggestions") or ()),
            file=data.get("file"),
        )

    def format(self) -> str:
        base = f"{self.span.format(self.file)}: {self.message}"
        if self.suggestions:
            base += " | suggest: " + ", ".join(self.suggestions)
        return base


_NATIVE = "le" if sys.byteorder == "little" else "be"
# BOM 付きで符号化する codec -> (BOM と明示エンディアン codec の組, BOM が無いときの codec)
_BOM_CODECS = {
    "utf-8-sig": (((codecs.BOM_UTF8, "utf-8"),), "utf-8"),
    "utf-16": (((codecs.BOM_UTF16_LE, "utf-16-le"), (codecs.BOM_UTF16_BE, "utf-16-be")), f"utf-16-{_NATIVE}"),
    "utf-32": (((codecs.BOM_UTF32_LE, "utf-32-le"), (codecs.BOM_UTF32_BE, "utf-32-be")), f"utf-32-{_NATIVE}"),
}


def _codec_name(encoding: str) -> str:
    try:
        return codecs.lookup(encoding).name
    except LookupError as e:
        raise ConfigError(f"unknown encoding: {encoding}") from e


def start_position(buffer: bytes | str, encoding: str = "utf-8") -> Position:
    """バッファ先頭の Position。

    offset は元バッファ上のバイト位置なので、デコード時に取り除かれる BOM の
    長さから始め、以降は BOM を付けない codec で数える。
    """
    name = _codec_name(encoding)
    if name not in _BOM_CODECS:
        return Position(offset=0, index=0, line=1, column=1, encoding=name)
    boms, fallback = _BOM_CODECS[name]
    if isinstance(buffer, bytes):
        for bom, codec in boms:
            if buffer.startswith(bom):
                return Position(offset=len(bom), index=0, line=1, column=1, encoding=codec)
    return Position(offset=0, index=0, line=1, column=1, encoding=fallback)


def decode_buffer(buffer: bytes | str, encoding: str = "utf-8", file: str | None = None) -> str:
    if isinstance(buffer, str):
        return buffer
    name = _codec_name(encoding)
    wide = name.startswith(("utf-16", "utf-32"))
    if not wide and not is_probably_text(buffer):
        raise DecodeError(file, encoding, "binary content")
    try:
        return buffer.decode(name)
    except UnicodeDecodeError as e:
        raise DecodeError(file, encoding, f"{e.reason} at byte {e.start}") from e


def _iter_diagnostics(
    text: str,
    syntax: LanguageSyntax,
    dictionary: Dictionary,
    ignore: AbstractSet[str],
    options: CheckOptions,
    file: str | None,
    stats: CheckStats | None,
    start: Position,
) -> Iterator[Diagnostic]:
    want_suggestions = options.suggest_unknown and options.max_suggestions > 0
    for token in tokenize(text, syntax, start):
        if not token.checkable:
            continue
        is_comment = token.kind is TokenKind.COMMENT
        if not is_comment:
            whole = token.text.lower()
            if whole in ignore:
                continue
            if dictionary.contains(whole):
                if stats is not None:
                    stats.words += 1
                continue
        for word in iter_words(token.text, token.span.start, comment=is_comment):
            if not word.checkable or len(word.normalized) < options.min_word_length:
                continue
            if word.normalized in ignore:
                continue
            if stats is not None:
                stats.words += 1
            if dictionary.contains(word.normalized):
                continue
            if stats is not None:
                stats.unknown += 1
            suggestions: Tuple[str, ...] = ()
            if want_suggestions:
                suggestions = tuple(dictionary.suggest(
                    word.normalized,
                    max_distance=options.max_distance,
                    limit=options.max_suggestions,
                ))
            yield Diagnostic(
                word=word.text,
                normalized=word.normalized,
                span=word.span,
                suggestions=suggestions,
                file=file,
            )


def check_file(
    buffer: bytes | str,
    syntax: LanguageSyntax | None,
    dictionary: Dictionary,
    ignore: AbstractSet[str] = frozenset(),
    options: CheckOptions | None = None,
    *,
    file: str | None = None,
    stats: CheckStats | None = None,
) -> Iterator[Diagnostic]:
    """buffer をチェックし Diagnostic のイテレータを返す。

    デコードは呼び出し時に行うので、DecodeError はイテレーション前に送出される。
    syntax が None なら file の拡張子から言語を推定する。
    """
    options = options or CheckOptions()
    text = decode_buffer(buffer, options.encoding, file)
    if syntax is None:
        syntax = language_for_path(file or "")
    start = start_position(buffer, options.encoding)
    return _iter_diagnostics(text, syntax, dictionary, ignore, options, file, stats, start)


def check_text(
    text: str,
    dictionary: Dictionary,
    syntax: LanguageSyntax | None = None,
    ignore: AbstractSet[str] = frozenset(),
    options: CheckOptions | None = None,
    file: str | None = None,
) -> List[Diagnostic]:
    return list(check_file(text, syntax, dictionary, ignore, options, file=file))


__all__ = [
    "CheckOptions",
    "CheckStats",
    "Diagnostic",
    "check_file",
    "check_text",
    "decode_buffer",
    "start_position",
]
