from __future__ import annotations
import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from .cache import DEFAULT_CACHE, file_fingerprint, load_cache, lookup, prune, save_cache, settings_digest, store
from .checker import CheckOptions
from .config import Settings, load_ignore_words, load_settings
from .dictionary import SYSTEM_WORD_LISTS, build_dictionary, default_sources
from .engine import Engine, FileReport, SourceFile
from .errors import ConfigError, DictionaryLoadError
from .file_scanner import iter_files, read_bytes
from .language import LanguageRegistry, LanguageSyntax, load_language_file


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="typocop",
        description="ソースコードの識別子とコメントを単語に分解し、辞書にない綴りを検出します"
    )
    p.add_argument("paths", nargs="+", help="走査するファイル/ディレクトリ/グロブ (例: 'src/**/*.ts')")
    p.add_argument("--json", action="store_true", help="JSONで出力")
    p.add_argument("--config", help="設定ファイル(TOML: pyproject.toml など)の [tool.typocop] を読み込み、既定値を上書き")
    p.add_argument("--fail-on-issue", action="store_true", default=None, help="問題が1件でもあれば終了コード1")
    p.add_argument("--dict", action="append", dest="dict_files", metavar="FILE", help="単語リスト(複数可・グロブ可): txt(1行1語)/json({words:[...]})/yaml")
    p.add_argument("--no-default-dict", action="store_true", help="同梱語彙とシステム辞書(/usr/share/dict/words)を読み込まない")
    p.add_argument("--ignore", action="append", metavar="WORD", help="無視する単語 (繰り返し指定可)")
    p.add_argument("--ignore-file", action="append", dest="ignore_files", metavar="FILE", help="無視リストファイル (辞書と同じ形式)")
    p.add_argument("--language-file", action="append", dest="language_files", metavar="FILE", help="追加の言語定義(JSON/YAML)")
    p.add_argument("--lang", help="言語を拡張子から推定せず固定する (例: python)")
    p.add_argument("--exclude", action="append", metavar="PATTERN", help="除外するパス/ファイル名のパターン")
    p.add_argument("--suggest", dest="suggest", action="store_true", default=None, help="未知語に修正候補を付ける(編集距離)")
    p.add_argument("--no-suggest", dest="suggest", action="store_false", help="修正候補を計算しない")
    p.add_argument("--max-suggestions", type=int, help="候補の最大数 (既定: 3)")
    p.add_argument("--max-distance", type=int, help="候補の最大編集距離 (既定: 2)")
    p.add_argument("--min-length", type=int, dest="min_word_length", help="この長さ未満の単語はチェックしない (既定: 2)")
    p.add_argument("--jobs", type=int, help="並列実行のワーカー数")
    p.add_argument("--encoding", help="ファイルのエンコーディング (既定: utf-8)")
    p.add_argument("--no-cache", action="store_true", help="キャッシュを使わず毎回フルスキャン")
    p.add_argument("--stats", action="store_true", help="処理ファイル数・単語数・所要時間を標準エラーに出力")
    return p


def _merge(args: argparse.Namespace, settings: Settings) -> Settings:
    """CLI 引数が最優先。未指定の項目は設定ファイルの値で補完。"""
    merged = Settings(**vars(settings))
    if args.dict_files:
        merged.dict_files = list(settings.dict_files) + list(args.dict_files)
    if args.no_default_dict:
        merged.default_dict = False
    if args.ignore:
        merged.ignore = list(settings.ignore) + list(args.ignore)
    if args.ignore_files:
        merged.ignore_files = list(settings.ignore_files) + list(args.ignore_files)
    if args.language_files:
        merged.languages = list(settings.languages) + list(args.language_files)
    if args.exclude:
        merged.exclude = list(settings.exclude) + list(args.exclude)
    for attr in ("suggest", "max_suggestions", "max_distance", "min_word_length", "jobs", "encoding", "fail_on_issue"):
        value = getattr(args, attr, None)
        if value is not None:
            setattr(merged, attr, value)
    return merged


def _sources_digest(sources: List[Any]) -> List[str]:
    parts = []
    for s in sources:
        p = Path(s)
        parts.append(f"{s}={file_fingerprint(p)}" if p.is_file() else str(s))
    return parts


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = _merge(args, load_settings(args.config))
        registry = LanguageRegistry.default()
        for lf in settings.languages:
            for lang in load_language_file(lf):
                registry.register(lang)
        forced: LanguageSyntax | None = registry.get(args.lang) if args.lang else None
        ignore = load_ignore_words(settings.ignore_files, settings.ignore)
    except ConfigError as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        return 2

    # 辞書ロード
    sources: List[Any] = []
    if settings.default_dict:
        sources.extend(default_sources())
        if not any(Path(p).is_file() for p in SYSTEM_WORD_LISTS):
            print("[warn] システム辞書(/usr/share/dict/words)が見つかりません。同梱語彙のみで検査します。--dict で英語辞書を指定してください。", file=sys.stderr)
    sources.extend(settings.dict_files)
    if not sources:
        print("No dictionary: --dict で単語リストを指定してください", file=sys.stderr)
        return 2
    try:
        dictionary = build_dictionary(sources)
    except DictionaryLoadError as e:
        print(f"Failed to load dictionary {e.source}: {e.reason}", file=sys.stderr)
        return 2

    options = CheckOptions(
        suggest_unknown=settings.suggest,
        max_suggestions=settings.max_suggestions,
        max_distance=settings.max_distance,
        min_word_length=settings.min_word_length,
        encoding=settings.encoding,
    )
    engine = Engine(dictionary, ignore=ignore, options=options, jobs=settings.jobs)

    files = list(iter_files(args.paths, [*settings.exclude, DEFAULT_CACHE]))
    if not files:
        print("[warn] 対象ファイルが見つかりません", file=sys.stderr)

    # キャッシュ読み込み
    use_cache = not args.no_cache
    cache = load_cache(str(Path.cwd())) if use_cache else {}
    digest = settings_digest(
        _sources_digest(sources)
        + sorted(ignore)
        + [repr(options), args.lang or ""]
        + sorted(settings.languages)
    )

    slots: List[FileReport | None] = []
    misses: Dict[str, Tuple[int, str, Path]] = {}  # path -> (slot, fingerprint, file)
    for f in files:
        key = str(f)
        try:
            fp = file_fingerprint(f)
        except OSError as e:
            print(f"[warn] failed to read {key}: {e}", file=sys.stderr)
            continue
        hit = lookup(cache, key, fp, digest) if use_cache else None
        if hit is not None:
            slots.append(hit)
            continue
        misses[key] = (len(slots), fp, f)
        slots.append(None)

    def sources() -> Iterator[SourceFile]:
        # 読み込みはエンジンが次のファイルを要求した時点で行う
        for key, (_slot, _fp, f) in misses.items():
            try:
                buffer = read_bytes(f)
            except OSError as e:
                print(f"[warn] failed to read {key}: {e}", file=sys.stderr)
                continue
            yield SourceFile(path=key, buffer=buffer, syntax=forced or registry.for_path(f))

    started = time.perf_counter()
    try:
        for report in engine.iter_reports(sources()):
            slot, fp, _f = misses[report.path]
            slots[slot] = report
            if use_cache:
                store(cache, report, fp, digest)
    except ConfigError as e:
        print(f"Failed to check files: {e}", file=sys.stderr)
        return 2
    elapsed = time.perf_counter() - started
    reports = [r for r in slots if r is not None]

    # キャッシュ保存。今回の走査に現れなかったファイルの項目は捨てる
    if use_cache:
        prune(cache, (str(f) for f in files))
        save_cache(str(Path.cwd()), cache)

    issues = [d for r in reports for d in r.diagnostics]
    errors = [r for r in reports if r.error is not None]
    if args.json:
        data: List[Dict[str, Any]] = []
        for r in reports:
            if r.error is not None:
                data.append({"file": r.path, "error": str(r.error)})
            data.extend(d.to_dict() for d in r.diagnostics)
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        for r in reports:
            if r.error is not None:
                print(f"{r.path}: [ERROR] {r.error.reason}")
            for d in r.diagnostics:
                # file:line:col 形式 (エディタでクリック可能)
                print(d.format())
        if not issues and not errors:
            print("No issues found.")
        else:
            print(f"Total: {len(issues)} issue(s)" + (f", {len(errors)} file error(s)" if errors else ""))
    if args.stats:
        words = sum(r.words for r in reports)
        print(f"[*] Done with {len(reports)} files in {elapsed:.2f}s", file=sys.stderr)
        print(f"[*] Found {len(issues)} unknown words in {words} words", file=sys.stderr)
    if settings.fail_on_issue and (issues or errors):
        return 1
    return 0

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
