"""ソース上の位置情報。

- offset: 元バッファ上のバイトオフセット(0始まり)。encoding で数える
- index: 文字(コードポイント)単位のインデックス。str のスライスに使う
- line/column: 1始まり。column はコードポイント単位
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


def encoded_length(text: str, encoding: str = "utf-8") -> int:
    """text を encoding で符号化したときのバイト数。BOM を付けない codec を渡すこと。"""
    try:
        return len(text.encode(encoding, "surrogatepass"))
    except UnicodeEncodeError:
        # 符号化できない文字は1文字分の置換として数える(str を直接渡された場合のみ起きる)
        return len(text.encode(encoding, "replace"))


@dataclass(frozen=True, slots=True)
class Position:
    offset: int
    index: int
    line: int
    column: int
    encoding: str = field(default="utf-8", compare=False, repr=False)

    def advance(self, text: str) -> "Position":
        """text を読み進めた後の位置を返す。改行で行を進め桁を戻す。"""
        if not text:
            return self
        nl = text.count("\n")
        if nl:
            column = len(text) - text.rfind("\n")
        else:
            column = self.column + len(text)
        return Position(
            offset=self.offset + encoded_length(text, self.encoding),
            index=self.index + len(text),
            line=self.line + nl,
            column=column,
            encoding=self.encoding,
        )


START = Position(offset=0, index=0, line=1, column=1)


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open span [start, end)."""

    start: Position
    end: Position

    @property
    def byte_length(self) -> int:
        return self.end.offset - self.start.offset

    def contains(self, other: "Span") -> bool:
        return self.start.index <= other.start.index and other.end.index <= self.end.index

    def slice(self, text: str) -> str:
        return text[self.start.index:self.end.index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startLine": self.start.line,
            "startColumn": self.start.column,
            "endLine": self.end.line,
            "endColumn": self.end.column,
            "byteOffset": self.start.offset,
            "byteLength": self.byte_length,
        }

    def format(self, file: str | None = None) -> str:
        return f"{file or '<memory>'}:{self.start.line}:{self.start.column}"


__all__ = ["Position", "Span", "START", "encoded_length"]
