"""typocop
ソースコード向けの綴りチェッカー。

主な提供機能:
- 言語ごとのコメント/文字列構文(データ定義)に基づく字句解析
- camelCase / snake_case / kebab-case / 頭字語 / 数字混在の識別子を単語に分割
- 単語の位置(バイトオフセット・行・桁)を元ファイル上で正確に保持
- 不変辞書による所属判定と編集距離(Damerau-Levenshtein)による修正候補
- 複数ファイルの並列チェックと CLI インターフェース
"""
from .checker import CheckOptions, Diagnostic, check_file, check_text
from .dictionary import Dictionary, build_dictionary
from .engine import Engine, FileReport, RunReport, SourceFile, check_files
from .errors import ConfigError, DecodeError, DictionaryLoadError, TypocopError
from .language import LanguageSyntax, language_for_path
from .splitter import Word, split_token
from .tokenizer import Token, TokenKind, tokenize

__all__ = [
    "CheckOptions",
    "ConfigError",
    "DecodeError",
    "Diagnostic",
    "Dictionary",
    "DictionaryLoadError",
    "Engine",
    "FileReport",
    "LanguageSyntax",
    "RunReport",
    "SourceFile",
    "Token",
    "TokenKind",
    "TypocopError",
    "Word",
    "build_dictionary",
    "check_file",
    "check_files",
    "check_text",
    "language_for_path",
    "split_token",
    "tokenize",
]

__version__ = "0.1.0"
