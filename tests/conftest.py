import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point every test at its own configuration file instead of ~/.prompt-gen.toml."""
    path = tmp_path / "prompt-gen-test.toml"
    monkeypatch.setenv("PROMPT_GEN_CONFIG", str(path))
    monkeypatch.delenv("PROMPT_GEN_CONFIG_SUFFIX", raising=False)
    return path


@pytest.fixture
def write_tree(tmp_path):
    """Create files from a {relative_path: text} mapping under tmp_path/'proj'."""
    def _write(files):
        root = tmp_path / "proj"
        root.mkdir(exist_ok=True)
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(text, bytes):
                path.write_bytes(text)
            else:
                path.write_text(text, encoding="utf-8")
        return root
    return _write
