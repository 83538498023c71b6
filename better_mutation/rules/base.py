"""Rule plumbing: findings, source text access and the per-file rule context."""
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, List, Optional

from ..analyzer.nodes import Node
from ..config import RuleOptions


@dataclass
class Finding:
    """One reported mutation."""

    rule: str
    category: str
    message: str
    line: int
    column: int
    assignee: Optional[str] = None
    file_path: Optional[str] = None
    node: Optional[Node] = field(default=None, repr=False, compare=False)


class SourceCode:
    """Source text of the file being linted, sliced by node range."""

    def __init__(self, source: str | bytes):
        if isinstance(source, str):
            source = source.encode('utf-8')
        self.source = source

    def get_text(self, node: Optional[Node]) -> str:
        if node is None:
            return ''
        start, end = node.range
        return self.source[start:end].decode('utf-8')


class RuleContext:
    """What a rule sees while one file is linted."""

    def __init__(self, rule_name: str, options: RuleOptions, source_code: SourceCode,
                 file_path: Optional[str] = None):
        self.rule_name = rule_name
        self.options = options
        self.source_code = source_code
        self.file_path = file_path
        self.findings: List[Finding] = []

    def report(self, node: Node, category: str, messages: Dict[str, str], **data) -> Finding:
        """Record a finding, rendering ``messages[category]`` with ``data``."""
        line, column = node.loc
        finding = Finding(
            rule=self.rule_name,
            category=category,
            message=messages[category].format(**data),
            line=line,
            column=column,
            assignee=data.get('assignee'),
            file_path=self.file_path,
            node=node,
        )
        self.findings.append(finding)
        return finding


class Rule:
    """Base class for mutation rules.

    Subclasses set ``name``, ``description`` and ``messages`` and return their
    node handlers from ``handlers()``.
    """

    name: ClassVar[str] = ''
    description: ClassVar[str] = ''
    messages: ClassVar[Dict[str, str]] = {}

    def __init__(self, context: RuleContext):
        self.context = context
        self.options = context.options

    def handlers(self) -> Dict[str, Callable[[Node], None]]:
        raise NotImplementedError

    def report(self, node: Node, category: str, **data) -> Finding:
        return self.context.report(node, category, self.messages, **data)
