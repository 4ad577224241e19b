"""テキストバッファをトークン列に分解する単一パスの字句解析器。

状態は Default / 識別子 / 数値 / 行コメント / ブロックコメント / 文字列 の6つ。
コメント・文字列の開始記号は LanguageSyntax (データ) から与えられる。

- 出力トークンを順に連結すると入力バッファと完全に一致する(隙間・重なりなし)
- 閉じられていないコメント/文字列はバッファ末尾までを1トークンとする(エラーにしない)
- 改行を含むトークンでも行/桁の追跡は止めない
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Iterator, Tuple

from .language import TEXT, BlockComment, LanguageSyntax, StringDelimiter
from .spans import START, Position, Span


class TokenKind(str, Enum):
    IDENTIFIER = "identifier"
    COMMENT = "comment"
    STRING = "string"
    NUMBER = "number"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    span: Span

    @property
    def checkable(self) -> bool:
        return self.kind in (TokenKind.IDENTIFIER, TokenKind.COMMENT)

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.text!r}, {self.span.format()})"


# 先頭は文字かアンダースコア、以降は \w
_IDENT_RE = re.compile(r"[^\W\d]\w*")
# 0x1F, 1_000, 3.14, 1e10 などを1トークンに。小数点は直後が数字のときだけ含める
_NUMBER_RE = re.compile(r"\d(?:\w|\.(?=\d))*")


@lru_cache(maxsize=64)
def _openers(syntax: LanguageSyntax) -> Tuple[Tuple[Tuple[str, object], ...], frozenset]:
    items = tuple(syntax.openers())
    return items, frozenset(o[0] for o, _ in items)


def _scan_line_comment(text: str, k: int) -> int:
    end = text.find("\n", k)
    return len(text) if end < 0 else end


def _scan_block_comment(text: str, i: int, block: BlockComment) -> int:
    n = len(text)
    k = i + len(block.open)
    depth = 1
    while k < n:
        close = text.find(block.close, k)
        if close < 0:
            return n
        if block.nested:
            inner = text.find(block.open, k)
            if 0 <= inner < close:
                depth += 1
                k = inner + len(block.open)
                continue
        depth -= 1
        k = close + len(block.close)
        if depth == 0:
            return k
    return n


def _scan_string(text: str, i: int, delim: StringDelimiter) -> int:
    n = len(text)
    k = i + len(delim.open)
    esc = delim.escape
    close = delim.close
    while k < n:
        if esc == close:
            # SQL の 'it''s' のように閉じ記号の二重化がエスケープ
            if text.startswith(close + close, k):
                k += 2 * len(close)
                continue
        elif esc and text.startswith(esc, k):
            k += len(esc) + 1
            continue
        if text.startswith(close, k):
            return k + len(close)
        if not delim.multiline and text[k] == "\n":
            return k
        k += 1
    return n


def tokenize(text: str, syntax: LanguageSyntax = TEXT, start: Position = START) -> Iterator[Token]:
    """text を先頭から走査し Token を遅延生成する。

    ジェネレータなので、もう一度呼べば最初からやり直せる。
    start にはバッファ先頭の位置を渡す(BOM の長さや offset を数える codec を含む)。
    """
    openers, first_chars = _openers(syntax)
    n = len(text)
    pos: Position = start
    other_start = 0
    i = 0
    while i < n:
        ch = text[i]
        kind: TokenKind | None = None
        j = i
        if ch in first_chars:
            for opener, what in openers:
                if not text.startswith(opener, i):
                    continue
                if what == "line":
                    kind, j = TokenKind.COMMENT, _scan_line_comment(text, i + len(opener))
                elif isinstance(what, BlockComment):
                    kind, j = TokenKind.COMMENT, _scan_block_comment(text, i, what)
                else:
                    kind, j = TokenKind.STRING, _scan_string(text, i, what)  # type: ignore[arg-type]
                break
        if kind is None:
            m = None
            if ch.isdecimal():
                m = _NUMBER_RE.match(text, i)
                kind = TokenKind.NUMBER
            elif ch == "_" or ch.isalpha():
                m = _IDENT_RE.match(text, i)
                kind = TokenKind.IDENTIFIER
            if m is None:
                # どの状態にも入らない文字は Other として溜めておく
                i += 1
                continue
            j = m.end()
        j = min(j, n)

        if other_start < i:
            piece = text[other_start:i]
            end = pos.advance(piece)
            yield Token(TokenKind.OTHER, piece, Span(pos, end))
            pos = end

        piece = text[i:j]
        end = pos.advance(piece)
        yield Token(kind, piece, Span(pos, end))
        pos = end
        i = other_start = j

    if other_start < n:
        piece = text[other_start:]
        yield Token(TokenKind.OTHER, piece, Span(pos, pos.advance(piece)))


def checkable_tokens(text: str, syntax: LanguageSyntax = TEXT) -> Iterator[Token]:
    return (t for t in tokenize(text, syntax) if t.checkable)


__all__ = ["TokenKind", "Token", "tokenize", "checkable_tokens"]
