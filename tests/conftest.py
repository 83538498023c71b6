"""Shared fixtures for the better-mutation test suite."""
import pytest

from better_mutation.analyzer.builder import ESTreeBuilder
from better_mutation.analyzer.parser import LanguageParser
from better_mutation.config import RuleOptions
from better_mutation.linter import Linter


@pytest.fixture
def parse():
    """Parse source into a linked ESTree Program."""
    builders = {}

    def _parse(code: str, language: str = 'javascript'):
        if language not in builders:
            builders[language] = LanguageParser(language)
        return ESTreeBuilder().build(builders[language].parse_source(code))

    return _parse


@pytest.fixture
def lint():
    """Run one rule over a snippet with ESLint-style options."""

    def _lint(code: str, rule: str, options: dict = None, language: str = 'javascript'):
        linter = Linter(RuleOptions.from_dict(options), rules=[rule])
        return linter.lint_source(code, language)

    return _lint


def find_first(node, node_type: str):
    """First node of ``node_type`` in document order, or None."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == node_type:
            return current
        stack.extend(reversed(list(current.child_nodes())))
    return None


def find_all(node, node_type: str):
    found = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == node_type:
            found.append(current)
        stack.extend(reversed(list(current.child_nodes())))
    return found
