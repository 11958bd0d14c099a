import json

from pagekit.config import configure_dependencies


def _write_deps(tmp_path, value):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    deps = config_dir / "dependencies.json"
    deps.write_text(json.dumps({"poppler_path": value}), encoding="utf-8")
    return str(deps)


def test_env_var_wins(tmp_path, monkeypatch):
    monkeypatch.setenv("POPPLER_PATH", str(tmp_path))
    deps = _write_deps(tmp_path, "elsewhere")
    assert configure_dependencies(deps) == str(tmp_path)


def test_relative_path_from_config(tmp_path, monkeypatch):
    monkeypatch.delenv("POPPLER_PATH", raising=False)
    (tmp_path / "poppler" / "bin").mkdir(parents=True)
    deps = _write_deps(tmp_path, "poppler/bin")
    assert configure_dependencies(deps) == str(tmp_path / "poppler" / "bin")


def test_missing_or_empty_config(tmp_path, monkeypatch):
    monkeypatch.delenv("POPPLER_PATH", raising=False)
    assert configure_dependencies(str(tmp_path / "nope.json")) is None
    assert configure_dependencies(_write_deps(tmp_path, None)) is None


def test_nonexistent_configured_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("POPPLER_PATH", str(tmp_path / "missing"))
    assert configure_dependencies(_write_deps(tmp_path, "also/missing")) is None
