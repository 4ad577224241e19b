"""識別子/コメントを自然言語の単語に分割する。

境界規則 (文字 i と i+1 の間に境界を置く条件):
1. 小文字 → 大文字           camelCase   -> camel | Case
2. 大文字の連続 + 小文字      HTTPServer  -> HTTP | Server (連続の最後の大文字の直前)
3. 文字 ↔ 数字               abc123      -> abc | 123
4. 区切り文字 (_ - 空白 記号) は境界となり、単語としては出力しない

数字だけの単語と、数字に隣接した1文字の単語は checkable=False で出力する。
純粋関数: 同じトークンに対して何度呼んでも同じ結果を返す。
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .spans import START, Position, Span
from .tokenizer import Token, TokenKind

# 区切り以外の文字の塊。アンダースコアは \w に含まれるので除外する
_CHUNK_RE = re.compile(r"[^\W_]+")
# コメント中では don't のような語中のアポストロフィを許す
_COMMENT_CHUNK_RE = re.compile(r"[^\W_]+(?:['’][^\W_]+)*")

_UPPER, _LOWER, _DIGIT, _APOS = "U", "L", "D", "A"


@dataclass(frozen=True, slots=True)
class Word:
    text: str
    normalized: str
    span: Span
    checkable: bool = True


def _classify(ch: str) -> str:
    if ch.isnumeric():
        return _DIGIT
    if ch.isupper():
        return _UPPER
    if ch in "'’":
        return _APOS
    return _LOWER


def segment(chunk: str) -> List[Tuple[int, int]]:
    """区切り文字を含まない塊を (start, end) の列に分割する。"""
    if not chunk:
        return []
    classes = [_classify(c) for c in chunk]
    n = len(chunk)
    cuts = [0]
    for k in range(1, n):
        a, b = classes[k - 1], classes[k]
        if a == _LOWER and b == _UPPER:
            cuts.append(k)
        elif a == _UPPER and b == _UPPER and k + 1 < n and classes[k + 1] == _LOWER:
            cuts.append(k)
        elif (a == _DIGIT) != (b == _DIGIT) and _APOS not in (a, b):
            cuts.append(k)
    cuts.append(n)
    return [(cuts[x], cuts[x + 1]) for x in range(len(cuts) - 1)]


def _is_checkable(chunk: str, start: int, end: int) -> bool:
    piece = chunk[start:end]
    if piece.isnumeric():
        return False
    if end - start == 1:
        before = chunk[start - 1] if start > 0 else ""
        after = chunk[end] if end < len(chunk) else ""
        if before.isnumeric() or after.isnumeric():
            return False
    return True


def iter_words(text: str, start: Position = START, comment: bool = False) -> Iterator[Word]:
    """text (start から始まる) を分割し、元バッファ上の位置付きで Word を返す。"""
    chunk_re = _COMMENT_CHUNK_RE if comment else _CHUNK_RE
    pos = start
    consumed = 0
    for m in chunk_re.finditer(text):
        chunk = m.group(0)
        base = m.start()
        for s, e in segment(chunk):
            abs_s = base + s
            abs_e = base + e
            w_start = pos.advance(text[consumed:abs_s])
            w_end = w_start.advance(text[abs_s:abs_e])
            piece = text[abs_s:abs_e]
            yield Word(
                text=piece,
                normalized=piece.lower(),
                span=Span(w_start, w_end),
                checkable=_is_checkable(chunk, s, e),
            )
            pos, consumed = w_end, abs_e


def split_token(token: Token) -> List[Word]:
    return list(iter_words(token.text, token.span.start, comment=token.kind is TokenKind.COMMENT))


def split_text(text: str) -> List[str]:
    """位置情報なしで正規化済みの単語だけ欲しいとき用。"""
    return [w.normalized for w in iter_words(text)]


__all__ = ["Word", "segment", "iter_words", "split_token", "split_text"]
