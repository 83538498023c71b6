"""Tests for rule options and project configuration discovery."""
import json
import pytest

from better_mutation.analyzer.exemptions import THIS_PATTERN, ExceptionPattern
from better_mutation.config import DEFAULT_REDUCERS, Config, ProjectConfig, RuleOptions


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config isolated from the caller's environment."""
    monkeypatch.delenv("BETTER_MUTATION_CONFIG", raising=False)
    return Config(env_file=tmp_path / ".env")


class TestRuleOptions:
    def test_defaults(self):
        options = RuleOptions.from_dict(None)
        assert options == RuleOptions()
        assert options.reducers == DEFAULT_REDUCERS
        assert options.exception_patterns() == ()

    def test_camel_case_keys(self):
        options = RuleOptions.from_dict({
            'commonjs': True,
            'allowThis': True,
            'functionProps': True,
            'useLodashFunctionImports': True,
            'ignoredMethods': ['Object.assign'],
            'reducers': ['fold'],
            'exceptions': [{'object': 'foo', 'property': 'bar'}, {'property': 'propTypes'}],
        })
        assert options.commonjs and options.allow_this and options.function_props
        assert options.use_lodash_function_imports
        assert options.ignored_methods == ('Object.assign',)
        assert options.reducers == ('fold',)
        assert options.exceptions == (
            ExceptionPattern(object='foo', property='bar'),
            ExceptionPattern(property='propTypes'),
        )

    def test_empty_reducers_disable_exemption(self):
        assert RuleOptions.from_dict({'reducers': []}).reducers == ()

    def test_allow_this_pattern(self):
        options = RuleOptions.from_dict({'allowThis': True, 'exceptions': [{'object': 'a'}]})
        assert options.exception_patterns() == (ExceptionPattern(object='a'), THIS_PATTERN)

    def test_unknown_keys_are_ignored(self):
        assert RuleOptions.from_dict({'somethingElse': 1}) == RuleOptions()

    @pytest.mark.parametrize('raw', [
        {'commonjs': 'yes'},
        {'reducers': 'reduce'},
        {'ignoredMethods': [1]},
        {'exceptions': {'object': 'a'}},
        {'exceptions': ['a.b']},
        {'exceptions': [{'object': 1}]},
    ])
    def test_invalid_types(self, raw):
        with pytest.raises(ValueError):
            RuleOptions.from_dict(raw)


class TestProjectConfig:
    def test_options_for_merges_in_order(self):
        project = ProjectConfig.from_mapping({
            'commonjs': True,
            'reducers': ['fold'],
            'rules': {'no-mutation': {'allowThis': True, 'reducers': []}},
        })
        options = project.options_for('no-mutation', {'prototypes': True})
        assert options.commonjs and options.allow_this and options.prototypes
        assert options.reducers == ()

        other = project.options_for('no-mutating-functions')
        assert other.reducers == ('fold',)
        assert not other.allow_this

    def test_disabled_rule(self):
        project = ProjectConfig.from_mapping({'rules': {'no-mutating-functions': False}})
        assert not project.is_enabled('no-mutating-functions')
        assert project.is_enabled('no-mutation')

    def test_rules_must_be_an_object(self):
        with pytest.raises(ValueError):
            ProjectConfig.from_mapping({'rules': ['no-mutation']})


class TestDiscovery:
    """Where project configuration is read from, in priority order."""

    def test_nothing_configured(self, config, tmp_path):
        project = config.load_project_config(tmp_path)
        assert project.source is None
        assert project.options == {}

    def test_rc_file_wins(self, config, tmp_path):
        (tmp_path / ".bettermutationrc.json").write_text(json.dumps({'commonjs': True}))
        (tmp_path / "package.json").write_text(json.dumps({'betterMutation': {'allowThis': True}}))
        project = config.load_project_config(tmp_path)
        assert project.source == tmp_path / ".bettermutationrc.json"
        assert project.options == {'commonjs': True}

    def test_pyproject_section(self, config, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            '[tool.better-mutation]\n'
            'allowThis = true\n'
            '\n'
            '[tool.better-mutation.rules]\n'
            '"no-mutating-functions" = false\n'
        )
        project = config.load_project_config(tmp_path)
        assert project.options == {'allowThis': True}
        assert not project.is_enabled('no-mutating-functions')

    def test_pyproject_without_section_falls_through(self, config, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        (tmp_path / "package.json").write_text(json.dumps({'betterMutation': {'prototypes': True}}))
        project = config.load_project_config(tmp_path)
        assert project.source == tmp_path / "package.json"
        assert project.options == {'prototypes': True}

    def test_package_json_without_key(self, config, tmp_path):
        (tmp_path / "package.json").write_text(json.dumps({'name': 'app'}))
        assert config.load_project_config(tmp_path).source is None

    def test_explicit_path(self, config, tmp_path):
        explicit = tmp_path / "custom.json"
        explicit.write_text(json.dumps({'functionProps': True}))
        (tmp_path / ".bettermutationrc.json").write_text(json.dumps({'commonjs': True}))
        project = config.load_project_config(tmp_path, explicit)
        assert project.options == {'functionProps': True}

    def test_environment_variable(self, config, tmp_path, monkeypatch):
        explicit = tmp_path / "env.json"
        explicit.write_text(json.dumps({'allowThis': True}))
        monkeypatch.setenv("BETTER_MUTATION_CONFIG", str(explicit))
        assert config.load_project_config(tmp_path).source == explicit

    def test_missing_explicit_file(self, config, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            config.load_project_config(tmp_path, tmp_path / "missing.json")

    def test_malformed_json(self, config, tmp_path):
        (tmp_path / ".bettermutationrc.json").write_text('{not json')
        with pytest.raises(ValueError, match="Invalid JSON"):
            config.load_project_config(tmp_path)

    def test_malformed_toml(self, config, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[tool.better-mutation\n')
        with pytest.raises(ValueError, match="Invalid TOML"):
            config.load_project_config(tmp_path)

    def test_env_file_sets_config_path(self, tmp_path, monkeypatch):
        # Registers the variable with monkeypatch so the value load_dotenv sets is undone
        monkeypatch.setenv("BETTER_MUTATION_CONFIG", "unset")
        monkeypatch.delenv("BETTER_MUTATION_CONFIG")
        explicit = tmp_path / "from-dotenv.json"
        explicit.write_text(json.dumps({'commonjs': True}))
        env_file = tmp_path / ".env"
        env_file.write_text(f"BETTER_MUTATION_CONFIG={explicit}\n")

        config = Config(env_file=env_file)
        assert config.config_path == explicit
        assert config.load_project_config(tmp_path).options == {'commonjs': True}
