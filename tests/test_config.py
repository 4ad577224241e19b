import json

import pytest

from typocop.config import Settings, load_ignore_words, load_settings
from typocop.errors import ConfigError


def test_pyproject_table_is_picked_up(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        '[tool.typocop]\n'
        'dict = ["words/*.txt"]\n'
        'ignore = ["Frobnicate"]\n'
        'suggest = true\n'
        'maxSuggestions = 5\n'
        'jobs = 4\n',
        encoding="utf-8",
    )
    s = load_settings(cwd=tmp_path)
    assert s.suggest is True
    assert s.max_suggestions == 5
    assert s.jobs == 4
    assert s.ignore == ["Frobnicate"]
    # 相対パスは設定ファイルの場所から解決
    assert s.dict_files == [str(tmp_path.resolve() / "words/*.txt")]


def test_pyproject_without_table_gives_defaults(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
    assert load_settings(cwd=tmp_path) == Settings()


def test_no_config_file_gives_defaults(tmp_path):
    assert load_settings(cwd=tmp_path) == Settings()


def test_explicit_config_without_table_is_error(tmp_path):
    p = tmp_path / "cfg.toml"
    p.write_text('[tool.other]\nx = 1\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(p)


def test_unknown_key_is_error(tmp_path):
    p = tmp_path / "cfg.toml"
    p.write_text('[tool.typocop]\nsugest = true\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(p)


def test_wrong_type_is_error(tmp_path):
    p = tmp_path / "cfg.toml"
    p.write_text('[tool.typocop]\njobs = "four"\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(p)


def test_broken_toml_is_error(tmp_path):
    p = tmp_path / "cfg.toml"
    p.write_text('[tool.typocop\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(p)


def test_ignore_words_from_files_and_inline(tmp_path):
    txt = tmp_path / "ignore.txt"
    txt.write_text("# project words\nTypocop\n", encoding="utf-8")
    yml = tmp_path / "ignore.yaml"
    yml.write_text("words:\n  - rapidfuzz\n", encoding="utf-8")
    js = tmp_path / "ignore.json"
    js.write_text(json.dumps(["Hypothesis"]), encoding="utf-8")
    words = load_ignore_words([txt, yml, js], ["  Extra "])
    assert words == frozenset({"typocop", "rapidfuzz", "hypothesis", "extra"})


def test_missing_ignore_file_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_ignore_words([tmp_path / "missing.txt"])
