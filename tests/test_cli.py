import json
import os
import subprocess
import sys
from pathlib import Path

from typocop.cli import main

PKG = 'typocop'
ROOT = Path(__file__).resolve().parents[1]


def _setup(tmp_path):
    (tmp_path / 'words.txt').write_text('# test words\nlet\nvalue\n', encoding='utf-8')
    (tmp_path / 'code.js').write_text('let value = 1\nlet tset = 2\n', encoding='utf-8')


def _run(tmp_path, monkeypatch, capsys, *args):
    monkeypatch.chdir(tmp_path)
    code = main(['--no-default-dict', '--dict', 'words.txt', *args])
    out, err = capsys.readouterr()
    return code, out, err


def test_smoke_cli_subprocess(tmp_path):
    _setup(tmp_path)
    env = dict(os.environ, PYTHONPATH=str(ROOT))
    exe = [sys.executable, '-m', PKG + '.cli']
    cp = subprocess.run(
        exe + ['code.js', '--no-default-dict', '--dict', 'words.txt', '--no-cache'],
        cwd=str(tmp_path), env=env, capture_output=True, text=True,
    )
    assert cp.returncode == 0
    assert "code.js:2:5: unknown word 'tset'" in cp.stdout
    assert 'Total: 1 issue(s)' in cp.stdout


def test_text_output(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    code, out, _ = _run(tmp_path, monkeypatch, capsys, 'code.js', '--no-cache')
    assert code == 0
    assert out.splitlines() == ["code.js:2:5: unknown word 'tset'", 'Total: 1 issue(s)']


def test_no_issues(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    code, out, _ = _run(tmp_path, monkeypatch, capsys, 'code.js', '--no-cache', '--ignore', 'tset')
    assert code == 0
    assert out.strip() == 'No issues found.'


def test_json_output_with_suggestions(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    (tmp_path / 'words.txt').write_text('let\nvalue\ntest\n', encoding='utf-8')
    code, out, _ = _run(tmp_path, monkeypatch, capsys, 'code.js', '--json', '--suggest', '--max-distance', '1', '--no-cache')
    assert code == 0
    data = json.loads(out)
    assert len(data) == 1
    item = data[0]
    assert item['file'] == 'code.js'
    assert item['word'] == 'tset'
    assert item['suggestions'] == ['test']
    assert item['span']['startLine'] == 2 and item['span']['byteOffset'] == 18


def test_fail_on_issue(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    code, _, _ = _run(tmp_path, monkeypatch, capsys, 'code.js', '--no-cache', '--fail-on-issue')
    assert code == 1


def test_missing_dictionary_is_exit_2(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    monkeypatch.chdir(tmp_path)
    code = main(['--no-default-dict', '--dict', 'missing.txt', 'code.js'])
    _, err = capsys.readouterr()
    assert code == 2
    assert 'Failed to load dictionary' in err


def test_bad_config_is_exit_2(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    (tmp_path / 'pyproject.toml').write_text('[tool.typocop]\nbogus = 1\n', encoding='utf-8')
    code, _, err = _run(tmp_path, monkeypatch, capsys, 'code.js')
    assert code == 2
    assert 'Failed to load config' in err


def test_config_file_supplies_defaults(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    (tmp_path / 'pyproject.toml').write_text(
        '[tool.typocop]\nignore = ["tset"]\nfailOnIssue = true\n', encoding='utf-8'
    )
    code, out, _ = _run(tmp_path, monkeypatch, capsys, 'code.js', '--no-cache')
    assert code == 0
    assert out.strip() == 'No issues found.'


def test_decode_error_is_reported_and_others_continue(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    (tmp_path / 'bad.js').write_bytes(b'let \xff\xfe broken\n')
    code, out, _ = _run(tmp_path, monkeypatch, capsys, 'bad.js', 'code.js', '--no-cache', '--fail-on-issue')
    assert code == 1
    lines = out.splitlines()
    assert lines[0].startswith('bad.js: [ERROR] ')
    assert "code.js:2:5: unknown word 'tset'" in lines
    assert lines[-1] == 'Total: 1 issue(s), 1 file error(s)'


def test_cache_rerun_gives_same_output(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    code1, out1, _ = _run(tmp_path, monkeypatch, capsys, '.')
    cache = json.loads((tmp_path / '.typocop_cache.json').read_text(encoding='utf-8'))
    assert 'code.js' in cache
    code2, out2, _ = _run(tmp_path, monkeypatch, capsys, '.')
    assert (code1, out1) == (code2, out2)
    assert "code.js:2:5: unknown word 'tset'" in out2


def test_stats_go_to_stderr(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    _, out, err = _run(tmp_path, monkeypatch, capsys, 'code.js', '--no-cache', '--stats')
    assert '[*] Done with 1 files' in err
    assert '[*] Found 1 unknown words in 4 words' in err
    assert '[*]' not in out


def test_forced_language(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    (tmp_path / 'notes.txt').write_text('let x # zzqx\n', encoding='utf-8')
    _, out, _ = _run(tmp_path, monkeypatch, capsys, 'notes.txt', '--no-cache', '--lang', 'python')
    assert "notes.txt:1:9: unknown word 'zzqx'" in out


def test_cache_forgets_deleted_files(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    (tmp_path / 'old.js').write_text('let oldz = 1\n', encoding='utf-8')
    _run(tmp_path, monkeypatch, capsys, '.')
    cache_file = tmp_path / '.typocop_cache.json'
    assert 'old.js' in json.loads(cache_file.read_text(encoding='utf-8'))
    (tmp_path / 'old.js').unlink()
    _, out, _ = _run(tmp_path, monkeypatch, capsys, '.')
    assert 'old.js' not in out
    cache = json.loads(cache_file.read_text(encoding='utf-8'))
    assert 'old.js' not in cache
    assert 'code.js' in cache


def test_parallel_jobs_keep_file_order(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    for i in range(7):
        (tmp_path / f'm{i}.js').write_text(f'let tsetz{i}\n', encoding='utf-8')
    names = [f'm{i}.js' for i in range(7)]
    _, out, _ = _run(tmp_path, monkeypatch, capsys, *names, '--no-cache', '--jobs', '2')
    assert [line.split(':')[0] for line in out.splitlines()[:-1]] == names


def test_latin1_byte_offset_in_json(tmp_path, monkeypatch, capsys):
    _setup(tmp_path)
    (tmp_path / 'legacy.txt').write_bytes('café tset\n'.encode('latin-1'))
    (tmp_path / 'words.txt').write_text('café\n', encoding='utf-8')
    _, out, _ = _run(tmp_path, monkeypatch, capsys, 'legacy.txt', '--json', '--encoding', 'latin-1', '--no-cache')
    item = json.loads(out)[0]
    assert item['word'] == 'tset'
    assert item['span']['byteOffset'] == 5
