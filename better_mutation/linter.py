"""Run the mutation rules over source text and files."""
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Type, Union

from .analyzer.builder import ESTreeBuilder
from .analyzer.parser import LanguageParser
from .analyzer.walker import walk
from .config import RuleOptions
from .rules.base import Finding, Rule, RuleContext, SourceCode
from .rules.no_mutating_functions import NoMutatingFunctionsRule
from .rules.no_mutation import NoMutationRule

RULES: Dict[str, Type[Rule]] = {
    NoMutationRule.name: NoMutationRule,
    NoMutatingFunctionsRule.name: NoMutatingFunctionsRule,
}

EXCLUDED_DIRS = {
    'node_modules', 'bower_components', 'vendor', 'third_party',
    'dist', 'build', 'coverage', '.git', '.next', '.nuxt', '.cache',
}


def discover_files(paths: Iterable[str | Path]) -> Iterator[Path]:
    """Expand files and directories into lintable source files, skipping vendored code."""
    for path in paths:
        path = Path(path)
        if path.is_file():
            yield path
            continue

        for file_path in sorted(path.rglob('*')):
            if LanguageParser.language_for(file_path) is None:
                continue
            if any(part in EXCLUDED_DIRS for part in file_path.relative_to(path).parts):
                continue
            if file_path.is_file():
                yield file_path


class Linter:
    """Parse once, walk once, dispatch every node to each enabled rule."""

    def __init__(self, options: Union[RuleOptions, Mapping[str, RuleOptions], None] = None,
                 rules: Optional[Iterable[str]] = None):
        """
        Args:
            options: Options shared by all rules, or a rule name -> options mapping
            rules: Rule names to run (default: all)

        Raises:
            ValueError: If a rule name is unknown
        """
        self.rule_names = list(rules) if rules is not None else list(RULES)
        unknown = [name for name in self.rule_names if name not in RULES]
        if unknown:
            raise ValueError(f"Unknown rule(s): {', '.join(unknown)}")

        if isinstance(options, Mapping):
            self.options = {name: options.get(name, RuleOptions()) for name in self.rule_names}
        else:
            shared = options or RuleOptions()
            self.options = {name: shared for name in self.rule_names}

        self.builder = ESTreeBuilder()
        self._parsers: Dict[str, LanguageParser] = {}

    def _parser(self, language: str) -> LanguageParser:
        if language not in self._parsers:
            self._parsers[language] = LanguageParser(language)
        return self._parsers[language]

    def lint_source(self, source: str | bytes, language: str = 'javascript',
                    file_path: Optional[str] = None) -> List[Finding]:
        """Lint in-memory source and return findings in source order."""
        source_code = SourceCode(source)
        tree = self._parser(language).parse_source(source_code.source)
        program = self.builder.build(tree)

        handlers = defaultdict(list)
        contexts = []
        for name in self.rule_names:
            context = RuleContext(name, self.options[name], source_code, file_path)
            contexts.append(context)
            for node_type, handler in RULES[name](context).handlers().items():
                handlers[node_type].append(handler)

        walk(program, handlers)

        findings = [finding for context in contexts for finding in context.findings]
        return sorted(findings, key=lambda f: (f.line, f.column, f.rule))

    def lint_file(self, file_path: str | Path) -> Optional[List[Finding]]:
        """Lint a file, picking the grammar from its extension.

        Returns:
            Findings, or None if the file type is unsupported or unreadable
        """
        file_path = Path(file_path)
        language = LanguageParser.language_for(file_path)
        if language is None:
            return None

        source = LanguageParser.read_source(file_path)
        if source is None:
            return None
        return self.lint_source(source, language, str(file_path))
