"""Shared structural predicates over the ESTree node model.

All helpers accept ``None`` and answer False, so a missing field anywhere in
a lookup path collapses to "no match".
"""
from typing import List, Optional

from . import nodes as n


FRESH_CONTAINERS = (n.ObjectExpression, n.ArrayExpression)
FUNCTION_EXPRESSIONS = (n.FunctionExpression, n.ArrowFunctionExpression)
EXPORT_DECLARATIONS = (n.ExportDefaultDeclaration, n.ExportNamedDeclaration)
CLASS_OR_FUNCTION_DECLARATIONS = (n.ClassDeclaration, n.FunctionDeclaration)

# `let`/`var` lookups stop here
VARIABLE_SCOPE_BOUNDARIES = (n.Program, n.FunctionDeclaration, n.ClassDeclaration)
# Function-name and reducer lookups stop here
BLOCK_BOUNDARIES = VARIABLE_SCOPE_BOUNDARIES + FUNCTION_EXPRESSIONS


def is_reference(node: Optional[n.Node]) -> bool:
    return isinstance(node, (n.MemberExpression, n.Identifier))


def is_object_expression(node: Optional[n.Node]) -> bool:
    """Object or array literal."""
    return isinstance(node, FRESH_CONTAINERS)


def is_literal_expression(node: Optional[n.Node]) -> bool:
    return isinstance(node, n.Literal)


def is_function_expression(node: Optional[n.Node]) -> bool:
    return isinstance(node, FUNCTION_EXPRESSIONS)


def is_conditional_expression(node: Optional[n.Node]) -> bool:
    return isinstance(node, n.ConditionalExpression)


def is_end_of_variable_scope(node: Optional[n.Node]) -> bool:
    return isinstance(node, VARIABLE_SCOPE_BOUNDARIES)


def is_end_of_block(node: Optional[n.Node]) -> bool:
    return isinstance(node, BLOCK_BOUNDARIES)


def identifier_name(node: Optional[n.Node]) -> Optional[str]:
    """Static name of an identifier, looking through a TypeScript ``as`` cast."""
    if isinstance(node, n.TSAsExpression):
        node = node.expression
    if isinstance(node, n.Identifier):
        return node.name
    return None


def left_most_object(node: Optional[n.Node]) -> Optional[n.Node]:
    """``a.b[c].d`` -> ``a``."""
    while isinstance(node, n.MemberExpression) and node.object is not None:
        node = node.object
    return node


def get_reference(node: Optional[n.Node]) -> Optional[n.Node]:
    """Object of a member access, or the identifier itself."""
    if isinstance(node, n.MemberExpression):
        return node.object
    if isinstance(node, n.Identifier):
        return node
    return None


def statements(node: Optional[n.Node]) -> List[n.Node]:
    """Direct statement list of a Program or block; empty for everything else."""
    if isinstance(node, (n.Program, n.BlockStatement)):
        return node.body
    return []


def block_ancestor(node: Optional[n.Node]) -> Optional[n.Node]:
    """Nearest node (inclusive) that ends a block: program, function or class."""
    while node is not None and not is_end_of_block(node):
        node = node.parent
    return node
