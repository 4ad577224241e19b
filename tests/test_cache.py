from pathlib import Path

from typocop import Dictionary, Engine, SourceFile
from typocop.cache import file_fingerprint, load_cache, lookup, prune, save_cache, settings_digest, store

DICT = Dictionary(["let"])


def _report(text, path="a.js"):
    return Engine(DICT).check_one(SourceFile(path=path, buffer=text))


def test_round_trip_through_disk(tmp_path):
    report = _report("let tset\n// zzqx")
    digest = settings_digest(["dict.txt", "opts"])
    cache = {}
    store(cache, report, "1:10", digest)
    save_cache(str(tmp_path), cache)

    loaded = load_cache(str(tmp_path))
    hit = lookup(loaded, "a.js", "1:10", digest)
    assert hit is not None and hit.cached
    assert hit.words == report.words
    assert [d.format() for d in hit.diagnostics] == [d.format() for d in report.diagnostics]
    assert [d.span.start.index for d in hit.diagnostics] == [4, 12]


def test_stale_fingerprint_or_settings_miss():
    report = _report("let tset")
    digest = settings_digest(["a"])
    cache = {}
    store(cache, report, "1:10", digest)
    assert lookup(cache, "a.js", "2:10", digest) is None
    assert lookup(cache, "a.js", "1:10", settings_digest(["b"])) is None
    assert lookup(cache, "other.js", "1:10", digest) is None


def test_error_reports_are_not_stored():
    bad = _report(b"let \xff oops", path="bad.js")
    assert bad.error is not None
    cache = {"bad.js": {"fingerprint": "x"}}
    store(cache, bad, "1:1", "d")
    assert "bad.js" not in cache


def test_corrupt_cache_file_is_ignored(tmp_path):
    (tmp_path / ".typocop_cache.json").write_text("{not json", encoding="utf-8")
    assert load_cache(str(tmp_path)) == {}


def test_fingerprint_tracks_size(tmp_path):
    p = tmp_path / "f.txt"
    p.write_text("a", encoding="utf-8")
    first = file_fingerprint(Path(p))
    p.write_text("abc", encoding="utf-8")
    assert file_fingerprint(Path(p)) != first


def test_prune_drops_entries_for_files_no_longer_scanned():
    cache = {"a.js": {}, "gone.js": {}, "renamed_from.js": {}}
    removed = prune(cache, ["a.js", "new.js"])
    assert removed == 2
    assert list(cache) == ["a.js"]
