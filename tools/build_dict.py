"""
プロジェクト用許可リスト(無視リスト)のブートストラップ用スクリプト。
- リポジトリ内のソースを走査し、識別子/コメントから単語を集めて頻度を数える。
- --dict を指定すると、その辞書に無い単語だけを出力する(=プロジェクト固有語の候補)。
- 生成物は 1行1語 のプレーンテキスト(既定: .typocop-ignore)。

使い方(例):
  python tools/build_dict.py src --dict /usr/share/dict/words --min-freq 3 --out .typocop-ignore

注意:
- 頻度の高い未知語は固有名詞・略語であることが多いが、出力は必ず目視で確認すること。
- バイナリ/デコードできないファイルは自動でスキップされます。
"""
from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Iterable

# 自パッケージのユーティリティを利用
from typocop.checker import decode_buffer
from typocop.dictionary import Dictionary, build_dictionary
from typocop.errors import DecodeError
from typocop.file_scanner import iter_files, read_bytes
from typocop.language import language_for_path
from typocop.splitter import split_token
from typocop.tokenizer import checkable_tokens


def gather_words(paths: Iterable[str], min_length: int = 3) -> Counter:
    cnt: Counter = Counter()
    for p in iter_files(paths):
        try:
            text = decode_buffer(read_bytes(p), file=str(p))
        except (OSError, DecodeError):
            continue
        for token in checkable_tokens(text, language_for_path(p)):
            for word in split_token(token):
                if word.checkable and len(word.normalized) >= min_length:
                    cnt[word.normalized] += 1
    return cnt


def main(argv: list[str] | None = None):
    ap = argparse.ArgumentParser()
    ap.add_argument('paths', nargs='+', help='走査するファイル/ディレクトリ')
    ap.add_argument('--out', default='.typocop-ignore', help='出力ファイル(既定: .typocop-ignore)')
    ap.add_argument('--min-freq', type=int, default=2, help='採用する最小出現回数(既定:2)')
    ap.add_argument('--min-length', type=int, default=3, help='採用する最小の単語長(既定:3)')
    ap.add_argument('--dict', action='append', dest='dict_files', metavar='FILE', help='既知語の辞書。ここにある単語は出力しない')
    args = ap.parse_args(argv)

    known = build_dictionary(args.dict_files) if args.dict_files else Dictionary()
    cnt = gather_words(args.paths, min_length=args.min_length)
    words = sorted(w for w, c in cnt.items() if c >= args.min_freq and not known.contains(w))
    Path(args.out).write_text("\n".join(words) + ("\n" if words else ""), encoding='utf-8')
    print(f"Wrote {len(words)} words to {args.out}")
    return 0

if __name__ == '__main__':
    raise SystemExit(main())
