"""Structural and user-configured exemptions for mutations.

A mutation that the scope lookup would reject can still be allowed because of
where it writes (CommonJS exports, prototypes, ``this``), because the user
listed the target in ``exceptions``, or because it happens inside a reducer
callback. Each check is independent; any one of them grants the exemption.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from . import nodes as n
from .predicates import block_ancestor
from .scope import is_scoped_function


class ErrorType(str, Enum):
    """Why a non-exempt assignment is reported, used to pick a message."""

    COMMON_JS = 'COMMON_JS'
    PROTOTYPE = 'PROTOTYPE'
    REGULAR = 'REGULAR'


def _named(node: Optional[n.Node], name: str) -> bool:
    return isinstance(node, n.Identifier) and node.name == name


# --- CommonJS -----------------------------------------------------------------

def is_exports(node: Optional[n.Node]) -> bool:
    return _named(node, 'exports')


def is_module_exports(node: Optional[n.Node]) -> bool:
    return (isinstance(node, n.MemberExpression)
            and _named(node.object, 'module')
            and _named(node.property, 'exports'))


def is_module_exports_member_expression(node: Optional[n.Node]) -> bool:
    """``exports``, ``module.exports`` or any member chain rooted at either."""
    while node is not None:
        if is_exports(node) or is_module_exports(node):
            return True
        if not isinstance(node, n.MemberExpression):
            return False
        node = node.object
    return False


def is_common_js_export(assignment: n.AssignmentExpression) -> bool:
    return is_module_exports_member_expression(assignment.left)


# --- prototypes ---------------------------------------------------------------

def is_prototype(node: Optional[n.Node]) -> bool:
    """``<Identifier>.prototype.<anything>``."""
    if not isinstance(node, n.MemberExpression):
        return False
    base = node.object
    return (isinstance(base, n.MemberExpression)
            and isinstance(base.object, n.Identifier)
            and _named(base.property, 'prototype'))


def is_prototype_assignment(assignment: n.AssignmentExpression) -> bool:
    """Prototype write on a function or class declared in the enclosing block."""
    return is_prototype(assignment.left) and is_scoped_function(assignment.left, assignment.parent)


# --- user exceptions ----------------------------------------------------------

def _object_name(node: Optional[n.Node]) -> Optional[str]:
    """Name an exception's ``object`` is compared to: ``a`` for ``a``, ``b`` for ``a.b``."""
    if isinstance(node, n.Identifier):
        return node.name
    if isinstance(node, n.MemberExpression) and not node.computed and isinstance(node.property, n.Identifier):
        return node.property.name
    return None


@dataclass(frozen=True)
class ExceptionPattern:
    """``{object?, property?}`` pattern matched against a member access."""

    object: Optional[str] = None
    property: Optional[str] = None
    this: bool = False

    def matches(self, node: Optional[n.Node]) -> bool:
        if not isinstance(node, n.MemberExpression):
            return False
        if self.this:
            return isinstance(node.object, n.ThisExpression)
        if self.object is None and self.property is None:
            return False
        if self.object is not None and _object_name(node.object) != self.object:
            return False
        if self.property is not None and not _named(node.property, self.property):
            return False
        return True


THIS_PATTERN = ExceptionPattern(this=True)


def is_exempted_identifier(patterns: Sequence[ExceptionPattern], node: Optional[n.Node]) -> bool:
    """Some pattern matches ``node`` or one of the member accesses it is built on."""
    while isinstance(node, n.MemberExpression):
        if any(pattern.matches(node) for pattern in patterns):
            return True
        node = node.object
    return False


# --- reducers -----------------------------------------------------------------

def callee_name(callee: Optional[n.Node]) -> Optional[str]:
    """Trailing property name of a callee, or its bare name."""
    if isinstance(callee, n.MemberExpression):
        prop = callee.property
        if isinstance(prop, n.Identifier):
            return prop.name
        return None
    if isinstance(callee, n.Identifier):
        return callee.name
    return None


def is_exempted_reducer(reducers: Iterable[str], node: Optional[n.Node]) -> bool:
    """``node`` sits in a callback passed to one of the ``reducers`` callees."""
    block = block_ancestor(node)
    if block is None or block.parent is None:
        return False
    call = block.parent
    if not isinstance(call, (n.CallExpression, n.NewExpression)):
        return False
    name = callee_name(call.callee)
    return name is not None and name in reducers


def is_reducer_result(reducers: Iterable[str], node: n.Node) -> bool:
    """``node`` is what a reducer callback returns: its expression body or a ``return`` argument."""
    parent = node.parent
    if isinstance(parent, n.ReturnStatement) and parent.argument is node:
        callback = block_ancestor(parent)
    elif isinstance(parent, n.ArrowFunctionExpression) and parent.expression and parent.body is node:
        callback = parent
    else:
        return False
    return is_exempted_reducer(reducers, callback)


# --- composition --------------------------------------------------------------

def error_type(assignment: n.AssignmentExpression) -> ErrorType:
    """Classify a reported assignment, whether or not the matching option is on."""
    if is_common_js_export(assignment):
        return ErrorType.COMMON_JS
    if is_prototype_assignment(assignment):
        return ErrorType.PROTOTYPE
    return ErrorType.REGULAR


def is_exempt(assignment: n.AssignmentExpression, options) -> bool:
    """Any structural, user or reducer exemption applies to ``assignment``.

    Args:
        assignment: The assignment being checked
        options: ``RuleOptions`` of the active rule
    """
    if options.commonjs and is_common_js_export(assignment):
        return True
    if options.prototypes and is_prototype_assignment(assignment):
        return True
    if is_exempted_identifier(options.exception_patterns(), assignment.left):
        return True
    return is_exempted_reducer(options.reducers, assignment.parent)
