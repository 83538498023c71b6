"""Configuration management for better-mutation.

Rule options come from the project (JSON rc file, pyproject.toml or
package.json) and can be overridden from the command line. Environment
variables, optionally loaded from a ``.env`` file, select the config file and
turn on debug tracing.
"""
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
import tomllib
from dotenv import load_dotenv

from .analyzer.exemptions import THIS_PATTERN, ExceptionPattern

__version__ = "1.0.0"

DEFAULT_REDUCERS: Tuple[str, ...] = ('reduce',)

RC_FILE = '.bettermutationrc.json'
PYPROJECT_SECTION = 'better-mutation'
PACKAGE_JSON_KEY = 'betterMutation'


def _flag(raw: Mapping[str, Any], key: str) -> bool:
    value = raw.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"Option '{key}' must be a boolean, got {value!r}")
    return value


def _names(raw: Mapping[str, Any], key: str, default: Tuple[str, ...] = ()) -> Tuple[str, ...]:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Option '{key}' must be a list of strings, got {value!r}")
    return tuple(value)


def _exceptions(raw: Mapping[str, Any]) -> Tuple[ExceptionPattern, ...]:
    value = raw.get('exceptions') or []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Option 'exceptions' must be a list, got {value!r}")

    patterns = []
    for item in value:
        if not isinstance(item, Mapping):
            raise ValueError(f"Exception entries must be objects, got {item!r}")
        obj, prop = item.get('object'), item.get('property')
        for part in (obj, prop):
            if part is not None and not isinstance(part, str):
                raise ValueError(f"Exception 'object'/'property' must be strings, got {item!r}")
        patterns.append(ExceptionPattern(object=obj, property=prop))
    return tuple(patterns)


@dataclass(frozen=True)
class RuleOptions:
    """Options of one rule activation, immutable once resolved."""

    commonjs: bool = False
    prototypes: bool = False
    allow_this: bool = False
    function_props: bool = False
    exceptions: Tuple[ExceptionPattern, ...] = ()
    reducers: Tuple[str, ...] = DEFAULT_REDUCERS
    use_lodash_function_imports: bool = False
    ignored_methods: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]] = None) -> 'RuleOptions':
        """Build options from an ESLint-style camelCase mapping.

        Unknown keys are ignored.

        Raises:
            ValueError: If an option has the wrong type
        """
        raw = raw or {}
        return cls(
            commonjs=_flag(raw, 'commonjs'),
            prototypes=_flag(raw, 'prototypes'),
            allow_this=_flag(raw, 'allowThis'),
            function_props=_flag(raw, 'functionProps'),
            exceptions=_exceptions(raw),
            reducers=_names(raw, 'reducers', DEFAULT_REDUCERS),
            use_lodash_function_imports=_flag(raw, 'useLodashFunctionImports'),
            ignored_methods=_names(raw, 'ignoredMethods'),
        )

    def exception_patterns(self) -> Tuple[ExceptionPattern, ...]:
        """User exceptions plus ``this.*`` when ``allowThis`` is on."""
        if self.allow_this:
            return self.exceptions + (THIS_PATTERN,)
        return self.exceptions


@dataclass
class ProjectConfig:
    """Raw option mappings found in a project.

    ``options`` apply to every rule; ``rules`` holds per-rule overrides or
    ``False`` to disable a rule.
    """

    options: Dict[str, Any] = field(default_factory=dict)
    rules: Dict[str, Any] = field(default_factory=dict)
    source: Optional[Path] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source: Optional[Path] = None) -> 'ProjectConfig':
        if not isinstance(raw, Mapping):
            raise ValueError(f"Configuration in {source} must be an object")
        options = {k: v for k, v in raw.items() if k != 'rules'}
        rules = raw.get('rules') or {}
        if not isinstance(rules, Mapping):
            raise ValueError(f"'rules' in {source} must be an object")
        return cls(options=options, rules=dict(rules), source=source)

    def is_enabled(self, rule_name: str) -> bool:
        return self.rules.get(rule_name, True) is not False

    def options_for(self, rule_name: str, overrides: Optional[Mapping[str, Any]] = None) -> RuleOptions:
        """Shared options, then per-rule options, then ``overrides``.

        Raises:
            ValueError: If a merged option has the wrong type
        """
        merged = dict(self.options)
        per_rule = self.rules.get(rule_name)
        if isinstance(per_rule, Mapping):
            merged.update(per_rule)
        if overrides:
            merged.update(overrides)
        return RuleOptions.from_dict(merged)


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_file: Optional[Path] = None):
        """Initialize config by loading a .env file from the working directory."""
        load_dotenv(env_file or Path.cwd() / ".env")

    @property
    def config_path(self) -> Optional[Path]:
        """Explicit config file from BETTER_MUTATION_CONFIG, if set."""
        value = os.getenv("BETTER_MUTATION_CONFIG")
        return Path(value) if value else None

    def load_project_config(self, project_root: str | Path = ".",
                            config_path: Optional[Path] = None) -> ProjectConfig:
        """Find and read the project's rule configuration.

        Priority:
        1. ``config_path`` argument, then BETTER_MUTATION_CONFIG (JSON)
        2. .bettermutationrc.json in the project root
        3. [tool.better-mutation] in pyproject.toml
        4. "betterMutation" in package.json

        Returns:
            ProjectConfig, empty when nothing is configured

        Raises:
            ValueError: If a config file is missing or malformed
        """
        project_root = Path(project_root)

        explicit = config_path or self.config_path
        if explicit is not None:
            if not explicit.exists():
                raise ValueError(f"Config file not found: {explicit}")
            return ProjectConfig.from_mapping(self._read_json(explicit), explicit)

        rc_file = project_root / RC_FILE
        if rc_file.exists():
            return ProjectConfig.from_mapping(self._read_json(rc_file), rc_file)

        pyproject = project_root / "pyproject.toml"
        if pyproject.exists():
            try:
                with open(pyproject, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {pyproject}: {e}")
            section = data.get("tool", {}).get(PYPROJECT_SECTION)
            if section is not None:
                return ProjectConfig.from_mapping(section, pyproject)

        package_json = project_root / "package.json"
        if package_json.exists():
            data = self._read_json(package_json)
            section = data.get(PACKAGE_JSON_KEY) if isinstance(data, dict) else None
            if section is not None:
                return ProjectConfig.from_mapping(section, package_json)

        return ProjectConfig()

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}")


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
