"""Build ESTree-shaped nodes from a tree-sitter concrete syntax tree.

Tree-sitter gives a concrete tree with grammar-specific node types and field
names. The mutation rules reason about ESTree shapes (``left``/``right``,
``object``/``property``, ``declarations``/``init``), so the tree is converted
once per file. Syntax the rules never inspect becomes an ``OpaqueNode`` that
still carries its children, so parent links stay intact.
"""
from typing import Callable, Dict, List, Optional, Tuple
import tree_sitter

from . import nodes as n


# Never part of the node model
SKIPPED_TYPES = {'comment', 'hash_bang_line', 'html_comment'}

IDENTIFIER_TYPES = {
    'identifier',
    'property_identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
    'private_property_identifier',
    'statement_identifier',
    'type_identifier',
    'undefined',
}

LITERAL_TYPES = {'string', 'number', 'true', 'false', 'null', 'regex'}

UPDATE_OPERATORS = {'++', '--'}


def _text(ts_node: tree_sitter.Node) -> str:
    return ts_node.text.decode('utf-8')


def _named(ts_node: tree_sitter.Node) -> List[tree_sitter.Node]:
    """Named children without comments."""
    return [c for c in ts_node.named_children if c.type not in SKIPPED_TYPES]


def _has_token(ts_node: tree_sitter.Node, token: str) -> bool:
    return any(c.type == token for c in ts_node.children)


class ESTreeBuilder:
    """Convert a tree-sitter JavaScript/TypeScript tree into ``nodes.Node`` objects."""

    def __init__(self):
        self._builders: Dict[str, Callable[[tree_sitter.Node], Optional[n.Node]]] = {
            'program': self._program,
            'expression_statement': self._expression_statement,
            'statement_block': self._block,
            'empty_statement': lambda ts: n.EmptyStatement(),
            'return_statement': self._return,
            'lexical_declaration': self._variable_declaration,
            'variable_declaration': self._variable_declaration,
            'variable_declarator': self._variable_declarator,
            'for_statement': self._for,
            'export_statement': self._export,
            'function_declaration': self._function_declaration,
            'generator_function_declaration': self._function_declaration,
            'function_expression': self._function_expression,
            'function': self._function_expression,
            'generator_function': self._function_expression,
            'arrow_function': self._arrow_function,
            'class_declaration': self._class_declaration,
            'abstract_class_declaration': self._class_declaration,
            'class': self._class_expression,
            'class_body': self._class_body,
            'method_definition': self._method_definition,
            'this': lambda ts: n.ThisExpression(),
            'super': lambda ts: n.Super(),
            'template_string': self._template,
            'member_expression': self._member,
            'subscript_expression': self._subscript,
            'call_expression': self._call,
            'new_expression': self._new,
            'assignment_expression': self._assignment,
            'augmented_assignment_expression': self._assignment,
            'update_expression': self._update,
            'ternary_expression': self._ternary,
            'object': self._object,
            'array': self._array,
            'pair': self._pair,
            'shorthand_property_identifier': self._shorthand,
            'spread_element': self._spread,
            'object_pattern': self._object_pattern,
            'array_pattern': self._array_pattern,
            'pair_pattern': self._pair,
            'shorthand_property_identifier_pattern': self._shorthand,
            'object_assignment_pattern': self._object_assignment_pattern,
            'rest_pattern': self._rest,
            'assignment_pattern': self._assignment_pattern,
            'required_parameter': self._ts_parameter,
            'optional_parameter': self._ts_parameter,
            'as_expression': self._as_expression,
        }
        # Shorthand properties keep their Property builders above
        for identifier_type in IDENTIFIER_TYPES:
            self._builders.setdefault(identifier_type, self._identifier)
        for literal_type in LITERAL_TYPES:
            self._builders[literal_type] = self._literal

    def build(self, tree: tree_sitter.Tree) -> n.Program:
        """Convert a parsed tree and link every node to its parent."""
        program = self._build(tree.root_node)
        if not isinstance(program, n.Program):
            program = n.Program(body=[program] if program else [])
        return n.link_parents(program)

    # --- dispatch -----------------------------------------------------------

    def _build(self, ts_node: Optional[tree_sitter.Node]) -> Optional[n.Node]:
        if ts_node is None or ts_node.type in SKIPPED_TYPES:
            return None

        # ESTree has no parenthesized expressions, ranges stay on the inner node
        if ts_node.type == 'parenthesized_expression':
            inner = _named(ts_node)
            return self._build(inner[0]) if inner else None

        builder = self._builders.get(ts_node.type, self._opaque)
        node = builder(ts_node)
        if node is not None:
            self._locate(node, ts_node)
        return node

    def _build_all(self, ts_nodes: List[tree_sitter.Node]) -> List[n.Node]:
        built = (self._build(c) for c in ts_nodes)
        return [node for node in built if node is not None]

    def _field(self, ts_node: tree_sitter.Node, name: str) -> Optional[n.Node]:
        return self._build(ts_node.child_by_field_name(name))

    @staticmethod
    def _locate(node: n.Node, ts_node: tree_sitter.Node) -> None:
        node.range = (ts_node.start_byte, ts_node.end_byte)
        node.loc = (ts_node.start_point[0] + 1, ts_node.start_point[1])

    def _opaque(self, ts_node: tree_sitter.Node) -> n.OpaqueNode:
        return n.OpaqueNode(syntax=ts_node.type, children=self._build_all(_named(ts_node)))

    # --- statements ---------------------------------------------------------

    def _program(self, ts_node):
        return n.Program(body=self._build_all(_named(ts_node)))

    def _expression_statement(self, ts_node):
        children = _named(ts_node)
        return n.ExpressionStatement(expression=self._build(children[0]) if children else None)

    def _block(self, ts_node):
        return n.BlockStatement(body=self._build_all(_named(ts_node)))

    def _return(self, ts_node):
        children = _named(ts_node)
        return n.ReturnStatement(argument=self._build(children[0]) if children else None)

    def _variable_declaration(self, ts_node):
        kind_node = ts_node.child_by_field_name('kind')
        kind = kind_node.type if kind_node is not None else ts_node.children[0].type
        declarators = [c for c in _named(ts_node) if c.type == 'variable_declarator']
        return n.VariableDeclaration(kind=kind, declarations=self._build_all(declarators))

    def _variable_declarator(self, ts_node):
        return n.VariableDeclarator(
            id=self._field(ts_node, 'name'),
            init=self._field(ts_node, 'value'),
        )

    def _for(self, ts_node):
        return n.ForStatement(
            init=self._for_clause(ts_node.child_by_field_name('initializer')),
            test=self._for_clause(ts_node.child_by_field_name('condition')),
            update=self._for_clause(ts_node.child_by_field_name('increment')),
            body=self._field(ts_node, 'body'),
        )

    def _for_clause(self, ts_node):
        # Older grammars wrap header clauses in expression/empty statements
        if ts_node is None or ts_node.type == 'empty_statement':
            return None
        if ts_node.type == 'expression_statement':
            children = _named(ts_node)
            return self._build(children[0]) if children else None
        return self._build(ts_node)

    def _export(self, ts_node):
        is_default = _has_token(ts_node, 'default')
        declaration = ts_node.child_by_field_name('declaration')
        value = ts_node.child_by_field_name('value')

        if declaration is None and value is None:
            for child in _named(ts_node):
                if child.type.endswith('_declaration'):
                    declaration = child
                    break

        if declaration is not None:
            built = self._build(declaration)
            if is_default:
                return n.ExportDefaultDeclaration(declaration=built)
            return n.ExportNamedDeclaration(declaration=built)

        if value is not None:
            return n.ExportDefaultDeclaration(declaration=self._as_declaration(self._build(value)))

        # export { a, b } / export * from 'mod'
        return n.ExportNamedDeclaration(declaration=None)

    @staticmethod
    def _as_declaration(node: Optional[n.Node]) -> Optional[n.Node]:
        """``export default class Foo {}`` may parse as a named class expression."""
        if isinstance(node, n.ClassExpression) and node.id is not None:
            converted = n.ClassDeclaration(id=node.id, superclass=node.superclass, body=node.body)
        elif isinstance(node, n.FunctionExpression) and node.id is not None:
            converted = n.FunctionDeclaration(
                id=node.id, params=node.params, body=node.body,
                generator=node.generator, is_async=node.is_async,
            )
        else:
            return node
        converted.range, converted.loc = node.range, node.loc
        return converted

    # --- functions and classes ----------------------------------------------

    def _params(self, ts_node) -> List[n.Node]:
        if ts_node is None:
            return []
        return self._build_all(_named(ts_node))

    def _function_parts(self, ts_node) -> dict:
        return {
            'id': self._field(ts_node, 'name'),
            'params': self._params(ts_node.child_by_field_name('parameters')),
            'body': self._field(ts_node, 'body'),
            'generator': _has_token(ts_node, '*'),
            'is_async': _has_token(ts_node, 'async'),
        }

    def _function_declaration(self, ts_node):
        return n.FunctionDeclaration(**self._function_parts(ts_node))

    def _function_expression(self, ts_node):
        return n.FunctionExpression(**self._function_parts(ts_node))

    def _arrow_function(self, ts_node):
        single = ts_node.child_by_field_name('parameter')
        if single is not None:
            params = self._build_all([single])
        else:
            params = self._params(ts_node.child_by_field_name('parameters'))
        body = ts_node.child_by_field_name('body')
        return n.ArrowFunctionExpression(
            params=params,
            body=self._build(body),
            expression=body is not None and body.type != 'statement_block',
            is_async=_has_token(ts_node, 'async'),
        )

    def _superclass(self, ts_node) -> Optional[n.Node]:
        for child in _named(ts_node):
            if child.type == 'class_heritage':
                heritage = _named(child)
                return self._build(heritage[0]) if heritage else None
        return None

    def _class_declaration(self, ts_node):
        return n.ClassDeclaration(
            id=self._field(ts_node, 'name'),
            superclass=self._superclass(ts_node),
            body=self._field(ts_node, 'body'),
        )

    def _class_expression(self, ts_node):
        return n.ClassExpression(
            id=self._field(ts_node, 'name'),
            superclass=self._superclass(ts_node),
            body=self._field(ts_node, 'body'),
        )

    def _class_body(self, ts_node):
        return n.ClassBody(body=self._build_all(_named(ts_node)))

    def _method_definition(self, ts_node):
        key, _ = self._property_key(ts_node.child_by_field_name('name'))
        value = n.FunctionExpression(
            params=self._params(ts_node.child_by_field_name('parameters')),
            body=self._field(ts_node, 'body'),
            generator=_has_token(ts_node, '*'),
            is_async=_has_token(ts_node, 'async'),
        )
        self._locate(value, ts_node)

        kind = 'method'
        if _has_token(ts_node, 'get'):
            kind = 'get'
        elif _has_token(ts_node, 'set'):
            kind = 'set'
        elif isinstance(key, n.Identifier) and key.name == 'constructor':
            kind = 'constructor'

        return n.MethodDefinition(key=key, value=value, kind=kind, static=_has_token(ts_node, 'static'))

    # --- expressions --------------------------------------------------------

    def _identifier(self, ts_node):
        return n.Identifier(name=_text(ts_node))

    def _literal(self, ts_node):
        return n.Literal(raw=_text(ts_node))

    def _template(self, ts_node):
        expressions = []
        for child in _named(ts_node):
            if child.type == 'template_substitution':
                expressions.extend(self._build_all(_named(child)))
        return n.TemplateLiteral(expressions=expressions)

    def _member(self, ts_node):
        return n.MemberExpression(
            object=self._field(ts_node, 'object'),
            property=self._field(ts_node, 'property'),
            computed=False,
            optional=_has_token(ts_node, 'optional_chain'),
        )

    def _subscript(self, ts_node):
        return n.MemberExpression(
            object=self._field(ts_node, 'object'),
            property=self._field(ts_node, 'index'),
            computed=True,
            optional=_has_token(ts_node, 'optional_chain'),
        )

    def _arguments(self, ts_node) -> List[n.Node]:
        if ts_node is None:
            return []
        # Tagged templates pass the template itself as the only argument
        if ts_node.type != 'arguments':
            return self._build_all([ts_node])
        return self._build_all(_named(ts_node))

    def _call(self, ts_node):
        return n.CallExpression(
            callee=self._field(ts_node, 'function'),
            arguments=self._arguments(ts_node.child_by_field_name('arguments')),
            optional=_has_token(ts_node, 'optional_chain'),
        )

    def _new(self, ts_node):
        return n.NewExpression(
            callee=self._field(ts_node, 'constructor'),
            arguments=self._arguments(ts_node.child_by_field_name('arguments')),
        )

    def _assignment(self, ts_node):
        operator_node = ts_node.child_by_field_name('operator')
        return n.AssignmentExpression(
            operator=operator_node.type if operator_node is not None else '=',
            left=self._field(ts_node, 'left'),
            right=self._field(ts_node, 'right'),
        )

    def _update(self, ts_node):
        operator = next((c.type for c in ts_node.children if c.type in UPDATE_OPERATORS), '++')
        argument = ts_node.child_by_field_name('argument')
        if argument is None:
            children = _named(ts_node)
            argument = children[0] if children else None
        return n.UpdateExpression(
            operator=operator,
            argument=self._build(argument),
            prefix=bool(ts_node.children) and ts_node.children[0].type in UPDATE_OPERATORS,
        )

    def _ternary(self, ts_node):
        return n.ConditionalExpression(
            test=self._field(ts_node, 'condition'),
            consequent=self._field(ts_node, 'consequence'),
            alternate=self._field(ts_node, 'alternative'),
        )

    def _object(self, ts_node):
        return n.ObjectExpression(properties=self._build_all(_named(ts_node)))

    def _array(self, ts_node):
        return n.ArrayExpression(elements=self._build_all(_named(ts_node)))

    def _property_key(self, ts_node) -> Tuple[Optional[n.Node], bool]:
        if ts_node is not None and ts_node.type == 'computed_property_name':
            inner = _named(ts_node)
            return (self._build(inner[0]) if inner else None), True
        return self._build(ts_node), False

    def _pair(self, ts_node):
        key, computed = self._property_key(ts_node.child_by_field_name('key'))
        return n.Property(key=key, value=self._field(ts_node, 'value'), computed=computed)

    def _shorthand(self, ts_node):
        # Key and value are distinct nodes so each has exactly one parent
        key = self._identifier(ts_node)
        value = self._identifier(ts_node)
        self._locate(key, ts_node)
        self._locate(value, ts_node)
        return n.Property(key=key, value=value, shorthand=True)

    def _spread(self, ts_node):
        children = _named(ts_node)
        return n.SpreadElement(argument=self._build(children[0]) if children else None)

    def _as_expression(self, ts_node):
        children = _named(ts_node)
        return n.TSAsExpression(expression=self._build(children[0]) if children else None)

    # --- patterns -----------------------------------------------------------

    def _object_pattern(self, ts_node):
        return n.ObjectPattern(properties=self._build_all(_named(ts_node)))

    def _array_pattern(self, ts_node):
        return n.ArrayPattern(elements=self._build_all(_named(ts_node)))

    def _object_assignment_pattern(self, ts_node):
        left = ts_node.child_by_field_name('left')
        if left is not None and left.type in IDENTIFIER_TYPES:
            key, target = self._identifier(left), self._identifier(left)
            self._locate(key, left)
            self._locate(target, left)
        else:
            key, target = None, self._build(left)
        value = n.AssignmentPattern(left=target, right=self._field(ts_node, 'right'))
        self._locate(value, ts_node)
        return n.Property(key=key, value=value, shorthand=True)

    def _rest(self, ts_node):
        children = _named(ts_node)
        return n.RestElement(argument=self._build(children[0]) if children else None)

    def _assignment_pattern(self, ts_node):
        return n.AssignmentPattern(
            left=self._field(ts_node, 'left'),
            right=self._field(ts_node, 'right'),
        )

    def _ts_parameter(self, ts_node):
        pattern = self._field(ts_node, 'pattern')
        value = self._field(ts_node, 'value')
        if value is None:
            return pattern
        return n.AssignmentPattern(left=pattern, right=value)
