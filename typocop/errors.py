from __future__ import annotations


class TypocopError(Exception):
    """typocop が送出する例外の基底クラス。"""


class DictionaryLoadError(TypocopError):
    """単語リストを読めない、または正規化後に空になった。辞書構築は中断される。"""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class DecodeError(TypocopError):
    """バッファが宣言されたエンコーディングのテキストとして読めない。ファイル単位のエラー。"""

    def __init__(self, file: str | None, encoding: str, reason: str):
        self.file = file
        self.encoding = encoding
        self.reason = reason
        super().__init__(f"{file or '<memory>'}: cannot decode as {encoding}: {reason}")


class ConfigError(TypocopError):
    pass


__all__ = ["TypocopError", "DictionaryLoadError", "DecodeError", "ConfigError"]
