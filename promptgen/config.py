"""
Configuration management for prompt-gen.

Settings live in a single TOML file in the user's home directory,
`~/.prompt-gen.toml`.  Each top-level table is keyed by the absolute path
of a project directory and holds that project's `ProjectConfig`::

    ["/home/me/src/widget"]
    project_name = "widget"
    output_path = "/home/me/prompts"
    intro_prompt = "You are helping with a Rust CLI."
    allowed_extensions = ["rs", "toml"]
    deny_dirs = ["target", ".git"]
    history = ["add a --verbose flag"]

The whole file is read at startup and rewritten after every change.  No
locking is done; concurrent runs against the same file are not supported.

When a project has no entry yet, one is created from answers supplied by a
`ConfigProvider`.  The console provider asks on stdin; tests pass a
`ScriptedProvider` with fixed answers instead.
"""

from __future__ import annotations

import logging
import os
import tempfile
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

import tomli_w

from .errors import ConfigReadError, ConfigWriteError
from .tree_walker import normalize_extensions

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".prompt-gen{suffix}.toml"
CONFIG_PATH_ENV = "PROMPT_GEN_CONFIG"
CONFIG_SUFFIX_ENV = "PROMPT_GEN_CONFIG_SUFFIX"


@dataclass
class ProjectConfig:
    """Persisted settings describing how to build a prompt for one project.

    Attributes
    ----------
    project_name: str
        Used as the stem of the generated file name.

    output_path: str
        Directory the generated prompt files are written to.

    intro_prompt: str
        Text placed at the top of every generated prompt.

    allowed_extensions: List[str]
        Extensions (without the dot) of the files to include.

    deny_dirs: List[str]
        Directory names excluded, with their whole subtree, at any depth.

    history: List[str]
        Goals of previous runs, oldest first.
    """

    project_name: str
    output_path: str
    intro_prompt: str
    allowed_extensions: List[str] = field(default_factory=list)
    deny_dirs: List[str] = field(default_factory=list)
    history: List[str] = field(default_factory=list)

    @staticmethod
    def from_dict(data: object) -> "ProjectConfig":
        """Validate one TOML table and build a `ProjectConfig` from it."""
        if not isinstance(data, dict):
            raise ValueError("entry is not a table")
        values = {}
        for name in ("project_name", "output_path", "intro_prompt"):
            value = data.get(name)
            if not isinstance(value, str):
                raise ValueError(f"'{name}' must be a string")
            values[name] = value
        for name in ("allowed_extensions", "deny_dirs", "history"):
            value = data.get(name, [])
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"'{name}' must be a list of strings")
            values[name] = list(value)
        return ProjectConfig(**values)


class ConfigProvider(Protocol):
    """Source of answers for interactive questions."""

    def ask(self, question: str, default: Optional[str] = None) -> str:
        ...


class ConsoleProvider:
    """Asks questions on the terminal."""

    def ask(self, question: str, default: Optional[str] = None) -> str:
        suffix = f" (default: {default})" if default else ""
        answer = input(f"{question}{suffix}: ").strip()
        return answer or (default or "")


class ScriptedProvider:
    """Returns pre-recorded answers in order; used by tests and scripted runs."""

    def __init__(self, answers: Iterable[str]) -> None:
        self.answers = list(answers)
        self.questions: List[str] = []

    def ask(self, question: str, default: Optional[str] = None) -> str:
        self.questions.append(question)
        if not self.answers:
            raise EOFError(f"No scripted answer left for: {question}")
        answer = self.answers.pop(0).strip()
        return answer or (default or "")


def split_list(answer: str) -> List[str]:
    """Split a comma-separated answer, dropping blanks and duplicates."""
    items: List[str] = []
    for item in answer.split(","):
        item = item.strip()
        if item and item not in items:
            items.append(item)
    return items


def default_config_path() -> Path:
    """Resolve the configuration file location.

    `PROMPT_GEN_CONFIG` overrides the full path.  Otherwise the file is
    `~/.prompt-gen{suffix}.toml`, where the optional suffix comes from
    `PROMPT_GEN_CONFIG_SUFFIX`.
    """
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    suffix = os.environ.get(CONFIG_SUFFIX_ENV, "")
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigReadError("Home directory not found", cause=exc) from exc
    return home / CONFIG_FILENAME.format(suffix=suffix)


def create_project_config(project_path: Path, provider: ConfigProvider) -> ProjectConfig:
    """Collect the settings for a new project from `provider`."""
    project_path = Path(project_path)
    project_name = provider.ask("Enter the project name", default=project_path.name or str(project_path))
    output_path = provider.ask("Enter the output path", default=str(project_path))
    intro_prompt = provider.ask("Enter the introductory prompt")
    allowed_extensions = normalize_extensions(split_list(provider.ask("Enter the allowed file extensions (comma-separated)")))
    deny_dirs = split_list(provider.ask("Enter the directories to ignore (comma-separated)"))
    return ProjectConfig(
        project_name=project_name,
        output_path=output_path,
        intro_prompt=intro_prompt,
        allowed_extensions=allowed_extensions,
        deny_dirs=deny_dirs,
        history=[],
    )


class ConfigStore:
    """All project configurations, keyed by absolute project path."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_config_path()
        self.projects: Dict[str, ProjectConfig] = {}

    @staticmethod
    def key_for(project_path: Path) -> str:
        return str(Path(project_path).resolve())

    def load(self) -> "ConfigStore":
        """Read the whole file.  A missing file yields an empty store."""
        if not self.path.exists():
            logger.info("No configuration file at %s yet", self.path)
            self.projects = {}
            return self
        try:
            with self.path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            raise ConfigReadError("Failed to read configuration", self.path, exc) from exc

        projects: Dict[str, ProjectConfig] = {}
        for key, table in data.items():
            try:
                projects[key] = ProjectConfig.from_dict(table)
            except ValueError as exc:
                raise ConfigReadError(f"Invalid entry for project '{key}'", self.path, exc) from exc
        self.projects = projects
        logger.debug("Loaded %d project(s) from %s", len(projects), self.path)
        return self

    def save(self) -> None:
        """Write the whole mapping back to disk.

        The document is serialised first and then swapped in through a
        temporary sibling file, so a failed save leaves the previous file
        intact.
        """
        data = {key: asdict(config) for key, config in self.projects.items()}
        tmp_name: Optional[str] = None
        try:
            payload = tomli_w.dumps(data).encode("utf-8")
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, UnicodeError) as exc:
            raise ConfigWriteError("Failed to write configuration", self.path, exc) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug("Saved %d project(s) to %s", len(self.projects), self.path)

    def get(self, project_path: Path) -> Optional[ProjectConfig]:
        return self.projects.get(self.key_for(project_path))

    def put(self, project_path: Path, config: ProjectConfig) -> None:
        self.projects[self.key_for(project_path)] = config

    def load_or_create(self, project_path: Path, provider: ConfigProvider) -> ProjectConfig:
        """Return the project's entry, creating and persisting it if absent."""
        config = self.get(project_path)
        if config is not None:
            logger.info("Using configuration for %s", self.key_for(project_path))
            return config
        print("Configuration not found for the current directory.")
        print("Let's create a new configuration.")
        config = create_project_config(Path(self.key_for(project_path)), provider)
        self.put(project_path, config)
        self.save()
        logger.info("Created configuration for %s in %s", self.key_for(project_path), self.path)
        return config

    def append_history(self, project_path: Path, goal: str) -> None:
        """Record `goal` in the project's history and persist the store."""
        config = self.get(project_path)
        if config is None:
            raise ConfigReadError(f"No configuration for project {self.key_for(project_path)}", self.path)
        config.history.append(goal)
        try:
            self.save()
        except ConfigWriteError:
            config.history.pop()
            raise

    def history(self, project_path: Path) -> Sequence[str]:
        config = self.get(project_path)
        return list(config.history) if config is not None else []
