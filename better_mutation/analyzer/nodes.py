"""ESTree-shaped node model for JavaScript/TypeScript analysis.

Every node kind is a small dataclass with a ``type`` discriminant matching the
ESTree name, a ``parent`` back-reference (navigation only) and the byte range
and position of the source it was built from. Nodes compare by identity.
"""
from dataclasses import dataclass, field, fields
from typing import ClassVar, Iterator, List, Optional, Tuple


@dataclass(eq=False)
class Node:
    """Base class for all node kinds."""

    type: ClassVar[str] = 'Node'

    parent: Optional['Node'] = field(default=None, repr=False, compare=False, kw_only=True)
    range: Tuple[int, int] = field(default=(0, 0), repr=False, compare=False, kw_only=True)
    loc: Tuple[int, int] = field(default=(1, 0), repr=False, compare=False, kw_only=True)

    def child_nodes(self) -> Iterator['Node']:
        """Yield direct children in source order of their fields."""
        for f in fields(self):
            if f.name in ('parent', 'range', 'loc'):
                continue
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        yield item


# --- Program and statements -------------------------------------------------

@dataclass(eq=False)
class Program(Node):
    type: ClassVar[str] = 'Program'
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class ExpressionStatement(Node):
    type: ClassVar[str] = 'ExpressionStatement'
    expression: Optional[Node] = None


@dataclass(eq=False)
class BlockStatement(Node):
    type: ClassVar[str] = 'BlockStatement'
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class EmptyStatement(Node):
    type: ClassVar[str] = 'EmptyStatement'


@dataclass(eq=False)
class ReturnStatement(Node):
    type: ClassVar[str] = 'ReturnStatement'
    argument: Optional[Node] = None


@dataclass(eq=False)
class ForStatement(Node):
    type: ClassVar[str] = 'ForStatement'
    init: Optional[Node] = None
    test: Optional[Node] = None
    update: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False)
class VariableDeclaration(Node):
    type: ClassVar[str] = 'VariableDeclaration'
    kind: str = 'var'
    declarations: List['VariableDeclarator'] = field(default_factory=list)


@dataclass(eq=False)
class VariableDeclarator(Node):
    type: ClassVar[str] = 'VariableDeclarator'
    id: Optional[Node] = None
    init: Optional[Node] = None


@dataclass(eq=False)
class ExportNamedDeclaration(Node):
    type: ClassVar[str] = 'ExportNamedDeclaration'
    declaration: Optional[Node] = None


@dataclass(eq=False)
class ExportDefaultDeclaration(Node):
    type: ClassVar[str] = 'ExportDefaultDeclaration'
    declaration: Optional[Node] = None


# --- Functions and classes --------------------------------------------------

@dataclass(eq=False)
class FunctionDeclaration(Node):
    type: ClassVar[str] = 'FunctionDeclaration'
    id: Optional['Identifier'] = None
    params: List[Node] = field(default_factory=list)
    body: Optional[Node] = None
    generator: bool = False
    is_async: bool = False


@dataclass(eq=False)
class FunctionExpression(Node):
    type: ClassVar[str] = 'FunctionExpression'
    id: Optional['Identifier'] = None
    params: List[Node] = field(default_factory=list)
    body: Optional[Node] = None
    generator: bool = False
    is_async: bool = False


@dataclass(eq=False)
class ArrowFunctionExpression(Node):
    type: ClassVar[str] = 'ArrowFunctionExpression'
    params: List[Node] = field(default_factory=list)
    body: Optional[Node] = None
    expression: bool = False
    is_async: bool = False


@dataclass(eq=False)
class ClassDeclaration(Node):
    type: ClassVar[str] = 'ClassDeclaration'
    id: Optional['Identifier'] = None
    superclass: Optional[Node] = None
    body: Optional['ClassBody'] = None


@dataclass(eq=False)
class ClassExpression(Node):
    type: ClassVar[str] = 'ClassExpression'
    id: Optional['Identifier'] = None
    superclass: Optional[Node] = None
    body: Optional['ClassBody'] = None


@dataclass(eq=False)
class ClassBody(Node):
    type: ClassVar[str] = 'ClassBody'
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class MethodDefinition(Node):
    type: ClassVar[str] = 'MethodDefinition'
    key: Optional[Node] = None
    value: Optional[FunctionExpression] = None
    kind: str = 'method'
    static: bool = False


# --- Expressions ------------------------------------------------------------

@dataclass(eq=False)
class Identifier(Node):
    type: ClassVar[str] = 'Identifier'
    name: str = ''


@dataclass(eq=False)
class Literal(Node):
    type: ClassVar[str] = 'Literal'
    raw: str = ''


@dataclass(eq=False)
class TemplateLiteral(Node):
    type: ClassVar[str] = 'TemplateLiteral'
    expressions: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class ThisExpression(Node):
    type: ClassVar[str] = 'ThisExpression'


@dataclass(eq=False)
class Super(Node):
    type: ClassVar[str] = 'Super'


@dataclass(eq=False)
class MemberExpression(Node):
    type: ClassVar[str] = 'MemberExpression'
    object: Optional[Node] = None
    property: Optional[Node] = None
    computed: bool = False
    optional: bool = False


@dataclass(eq=False)
class CallExpression(Node):
    type: ClassVar[str] = 'CallExpression'
    callee: Optional[Node] = None
    arguments: List[Node] = field(default_factory=list)
    optional: bool = False


@dataclass(eq=False)
class NewExpression(Node):
    type: ClassVar[str] = 'NewExpression'
    callee: Optional[Node] = None
    arguments: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class AssignmentExpression(Node):
    type: ClassVar[str] = 'AssignmentExpression'
    operator: str = '='
    left: Optional[Node] = None
    right: Optional[Node] = None


@dataclass(eq=False)
class UpdateExpression(Node):
    type: ClassVar[str] = 'UpdateExpression'
    operator: str = '++'
    argument: Optional[Node] = None
    prefix: bool = False


@dataclass(eq=False)
class ConditionalExpression(Node):
    type: ClassVar[str] = 'ConditionalExpression'
    test: Optional[Node] = None
    consequent: Optional[Node] = None
    alternate: Optional[Node] = None


@dataclass(eq=False)
class ObjectExpression(Node):
    type: ClassVar[str] = 'ObjectExpression'
    properties: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class ArrayExpression(Node):
    type: ClassVar[str] = 'ArrayExpression'
    elements: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class Property(Node):
    type: ClassVar[str] = 'Property'
    key: Optional[Node] = None
    value: Optional[Node] = None
    computed: bool = False
    shorthand: bool = False


@dataclass(eq=False)
class SpreadElement(Node):
    type: ClassVar[str] = 'SpreadElement'
    argument: Optional[Node] = None


@dataclass(eq=False)
class TSAsExpression(Node):
    type: ClassVar[str] = 'TSAsExpression'
    expression: Optional[Node] = None


# --- Patterns ---------------------------------------------------------------

@dataclass(eq=False)
class ObjectPattern(Node):
    type: ClassVar[str] = 'ObjectPattern'
    properties: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class ArrayPattern(Node):
    type: ClassVar[str] = 'ArrayPattern'
    elements: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class RestElement(Node):
    type: ClassVar[str] = 'RestElement'
    argument: Optional[Node] = None


@dataclass(eq=False)
class AssignmentPattern(Node):
    type: ClassVar[str] = 'AssignmentPattern'
    left: Optional[Node] = None
    right: Optional[Node] = None


# --- Everything else --------------------------------------------------------

@dataclass(eq=False)
class OpaqueNode(Node):
    """Syntax the analysis never inspects (if/while/binary/JSX ...).

    ``syntax`` keeps the tree-sitter node type; children are kept so that
    parent links and traversal still reach nested expressions.
    """

    type: ClassVar[str] = 'OpaqueNode'
    syntax: str = ''
    children: List[Node] = field(default_factory=list)


def link_parents(root: Node) -> Node:
    """Set ``parent`` on every node below ``root`` and return ``root``."""
    stack = [root]
    while stack:
        node = stack.pop()
        for child in node.child_nodes():
            child.parent = node
            stack.append(child)
    return root
