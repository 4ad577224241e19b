"""複数ファイルに対する並列チェック。

- 1ファイル = 1タスク。ワーカー間で共有するのは不変の Dictionary と無視リストのみ
- 結果は入力順に返す。ファイル内の Diagnostic は発見順(トークン順 → 単語順)
- DecodeError はそのファイルのエラーとして記録し、他のファイルのチェックは続行
- jobs > 1 でも入力は jobs * PREFETCH_FACTOR 件ずつしか先読みしない
- iter_reports を途中で閉じると、未着手のファイルはキャンセルされる
"""
from __future__ import annotations

import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import AbstractSet, Deque, Iterable, Iterator, List

from .checker import CheckOptions, CheckStats, Diagnostic, check_file
from .dictionary import Dictionary
from .errors import DecodeError
from .language import LanguageSyntax

PREFETCH_FACTOR = 2


@dataclass(frozen=True)
class SourceFile:
    path: str
    buffer: bytes | str
    syntax: LanguageSyntax | None = None


@dataclass
class FileReport:
    path: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    error: DecodeError | None = None
    words: int = 0
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunReport:
    files: List[FileReport] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [d for f in self.files for d in f.diagnostics]

    @property
    def errors(self) -> List[DecodeError]:
        return [f.error for f in self.files if f.error is not None]

    @property
    def words(self) -> int:
        return sum(f.words for f in self.files)

    @property
    def unknown(self) -> int:
        return sum(len(f.diagnostics) for f in self.files)


class Engine:
    def __init__(
        self,
        dictionary: Dictionary,
        ignore: AbstractSet[str] = frozenset(),
        options: CheckOptions | None = None,
        jobs: int = 1,
    ):
        self.dictionary = dictionary
        self.ignore = frozenset(ignore)
        self.options = options or CheckOptions()
        self.jobs = max(1, int(jobs or 1))

    def check_one(self, source: SourceFile) -> FileReport:
        stats = CheckStats()
        try:
            diagnostics = list(check_file(
                source.buffer,
                source.syntax,
                self.dictionary,
                self.ignore,
                self.options,
                file=source.path,
                stats=stats,
            ))
        except DecodeError as e:
            return FileReport(path=source.path, error=e)
        return FileReport(path=source.path, diagnostics=diagnostics, words=stats.words)

    def iter_reports(self, files: Iterable[SourceFile]) -> Iterator[FileReport]:
        if self.jobs == 1:
            for source in files:
                yield self.check_one(source)
            return
        # 先読みは window 件まで。入力は結果を1件返すごとに補充する
        window = self.jobs * PREFETCH_FACTOR
        ex = ThreadPoolExecutor(max_workers=self.jobs)
        futs: Deque[Future[FileReport]] = deque()
        try:
            for source in files:
                futs.append(ex.submit(self.check_one, source))
                if len(futs) >= window:
                    yield futs.popleft().result()
            while futs:
                yield futs.popleft().result()
        finally:
            # 途中で打ち切られた場合、未着手のタスクは捨てる
            for fut in futs:
                fut.cancel()
            ex.shutdown(wait=True, cancel_futures=True)

    def run(self, files: Iterable[SourceFile]) -> RunReport:
        started = time.perf_counter()
        reports = list(self.iter_reports(files))
        return RunReport(files=reports, elapsed=time.perf_counter() - started)


def check_files(
    files: Iterable[SourceFile],
    dictionary: Dictionary,
    ignore: AbstractSet[str] = frozenset(),
    options: CheckOptions | None = None,
    jobs: int = 1,
) -> RunReport:
    return Engine(dictionary, ignore=ignore, options=options, jobs=jobs).run(files)


__all__ = ["SourceFile", "FileReport", "RunReport", "Engine", "check_files"]
