import pytest

from promptgen.config import (
    ConfigStore,
    ProjectConfig,
    ScriptedProvider,
    default_config_path,
    split_list,
)
from promptgen.errors import ConfigReadError, ConfigWriteError


def answers(name="Test Project", output="/path/to/output", intro="Test intro prompt",
            extensions="rs,toml", deny="target,node_modules"):
    return ScriptedProvider([name, output, intro, extensions, deny])


def test_default_path_uses_home_and_suffix(tmp_path, monkeypatch):
    monkeypatch.delenv("PROMPT_GEN_CONFIG")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_config_path() == tmp_path / ".prompt-gen.toml"
    monkeypatch.setenv("PROMPT_GEN_CONFIG_SUFFIX", "-test")
    assert default_config_path() == tmp_path / ".prompt-gen-test.toml"


def test_env_override_is_used_by_default(isolated_config):
    assert ConfigStore().path == isolated_config


def test_missing_file_loads_empty_store(isolated_config):
    store = ConfigStore().load()
    assert store.projects == {}
    assert not isolated_config.exists()


def test_load_or_create_persists_new_entry(tmp_path, isolated_config):
    project = tmp_path / "project"
    project.mkdir()
    provider = answers()

    config = ConfigStore().load().load_or_create(project, provider)

    assert config == ProjectConfig(
        project_name="Test Project",
        output_path="/path/to/output",
        intro_prompt="Test intro prompt",
        allowed_extensions=["rs", "toml"],
        deny_dirs=["target", "node_modules"],
        history=[],
    )
    assert provider.questions[0] == "Enter the project name"
    reloaded = ConfigStore().load()
    assert list(reloaded.projects) == [str(project.resolve())]
    assert reloaded.get(project) == config


def test_blank_answers_fall_back_to_defaults(tmp_path):
    project = tmp_path / "widget"
    project.mkdir()
    config = ConfigStore().load().load_or_create(project, ScriptedProvider(["", "", "intro", ".rs, .toml,", ""]))
    assert config.project_name == "widget"
    assert config.output_path == str(project.resolve())
    assert config.allowed_extensions == ["rs", "toml"]
    assert config.deny_dirs == []


def test_existing_entry_is_reused_without_asking(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    ConfigStore().load().load_or_create(project, answers())

    provider = ScriptedProvider([])
    config = ConfigStore().load().load_or_create(project, provider)
    assert config.project_name == "Test Project"
    assert provider.questions == []


def test_multiple_projects_share_one_file(tmp_path):
    one, two = tmp_path / "one", tmp_path / "two"
    one.mkdir()
    two.mkdir()
    store = ConfigStore().load()
    store.load_or_create(one, answers(name="Project 1", extensions="rs", deny="target"))
    store.load_or_create(two, answers(name="Project 2", extensions="rs,md", deny="dist,build"))

    reloaded = ConfigStore().load()
    assert reloaded.get(one).project_name == "Project 1"
    assert reloaded.get(one).deny_dirs == ["target"]
    assert reloaded.get(two).allowed_extensions == ["rs", "md"]
    assert reloaded.get(two).deny_dirs == ["dist", "build"]
    assert reloaded.get(tmp_path / "three") is None


def test_append_history_keeps_order(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    store = ConfigStore().load()
    store.load_or_create(project, answers())
    for goal in ["first", "second", "third"]:
        store.append_history(project, goal)

    assert ConfigStore().load().history(project) == ["first", "second", "third"]


def test_append_history_without_entry_fails(tmp_path):
    with pytest.raises(ConfigReadError):
        ConfigStore().load().append_history(tmp_path, "goal")


def test_invalid_toml_raises_read_error(isolated_config):
    isolated_config.write_text("this is = = not toml", encoding="utf-8")
    with pytest.raises(ConfigReadError) as excinfo:
        ConfigStore().load()
    assert str(isolated_config) in str(excinfo.value)


def test_badly_typed_entry_raises_read_error(isolated_config):
    isolated_config.write_text(
        '["/some/project"]\nproject_name = 3\noutput_path = "o"\nintro_prompt = "i"\n',
        encoding="utf-8",
    )
    with pytest.raises(ConfigReadError) as excinfo:
        ConfigStore().load()
    assert "project_name" in str(excinfo.value)


def test_unwritable_location_raises_write_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = ConfigStore(blocker / "config.toml")
    store.put(tmp_path, ProjectConfig("p", "o", "i"))
    with pytest.raises(ConfigWriteError):
        store.save()


def test_split_list():
    assert split_list(" a, b ,,a ") == ["a", "b"]
    assert split_list("") == []


def test_non_utf8_file_raises_read_error(isolated_config):
    isolated_config.write_bytes(b'["/p"]\nproject_name = "\xff"\n')
    with pytest.raises(ConfigReadError) as excinfo:
        ConfigStore().load()
    assert str(isolated_config) in str(excinfo.value)


def test_failed_save_keeps_previous_file(tmp_path, isolated_config):
    project = tmp_path / "project"
    project.mkdir()
    store = ConfigStore().load()
    store.load_or_create(project, answers())
    store.append_history(project, "ok")
    before = isolated_config.read_bytes()

    with pytest.raises(ConfigWriteError):
        store.append_history(project, "bad \udcff")

    assert isolated_config.read_bytes() == before
    assert store.history(project) == ["ok"]
    assert ConfigStore().load().history(project) == ["ok"]
    assert list(tmp_path.glob("*.tmp")) == []
