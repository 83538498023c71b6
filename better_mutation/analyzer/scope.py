"""Scope resolution for mutation targets.

Answers one question for the mutation rules: was the variable behind an
assignment target declared in the current function/program/class scope, and
is the value it holds a fresh one that nothing outside this scope can see?

Two lookups exist:

* the *let* lookup accepts any ``let`` binding (``let a; a = 1`` is fine) or
  the control variable of a ``for (var ...)`` header, and is what allows plain
  reassignment and ``++``/``--`` of a bare name;
* the *variable* lookup accepts ``var``/``let``/``const`` bindings whose
  initializer is fresh (literal, object/array literal, or a reference to
  another fresh local) and is what allows mutating properties of a local.

A ``var``/``const`` name is never rebindable outside a loop header, and a
``let`` holding a non-fresh value never allows property writes.

Both walk parent links outward and stop at the first scope that declares the
name, or at the nearest variable-scope boundary.
"""
from typing import FrozenSet, Iterator, Optional, Tuple

from . import nodes as n
from .predicates import (
    CLASS_OR_FUNCTION_DECLARATIONS,
    EXPORT_DECLARATIONS,
    get_reference,
    identifier_name,
    is_conditional_expression,
    is_end_of_block,
    is_end_of_variable_scope,
    is_literal_expression,
    is_object_expression,
    is_reference,
    left_most_object,
    statements,
)

# (identifier, id(declarator)) pairs whose freshness is being resolved
Resolving = FrozenSet[Tuple[str, int]]

_NOTHING: Resolving = frozenset()


def target_identifier(target: Optional[n.Node]) -> Optional[str]:
    """Name of the base variable of an assignment target (``a`` in ``a.b[0]``)."""
    return identifier_name(left_most_object(target))


# --- declarations -------------------------------------------------------------

def _destructures(identifier: str, prop: n.Node) -> bool:
    if isinstance(prop, n.RestElement):
        return False
    value = getattr(prop, 'value', None)
    return isinstance(value, n.Identifier) and value.name == identifier


def get_declaration(identifier: str, node: Optional[n.Node]) -> Optional[n.VariableDeclarator]:
    """Declarator of ``identifier`` in a VariableDeclaration, plain or destructured."""
    if not isinstance(node, n.VariableDeclaration):
        return None

    for declarator in node.declarations:
        if isinstance(declarator.id, n.ObjectPattern):
            if any(_destructures(identifier, p) for p in declarator.id.properties):
                return declarator
        elif isinstance(declarator.id, n.Identifier) and declarator.id.name == identifier:
            return declarator
    return None


def _declarations_in(node: n.Node) -> Iterator[n.VariableDeclaration]:
    """Variable statements owned by ``node``: its statement list or a for-loop header."""
    for statement in statements(node):
        if isinstance(statement, n.VariableDeclaration):
            yield statement
    if isinstance(node, n.ForStatement) and isinstance(node.init, n.VariableDeclaration):
        yield node.init


def is_valid_init(rhs: Optional[n.Node], declaration: n.VariableDeclaration,
                  resolving: Resolving = _NOTHING) -> bool:
    """Whether an initializer is a fresh value.

    References are fresh when they resolve to a fresh local of the scope
    holding ``declaration``; a conditional is fresh when both branches are.
    """
    if is_object_expression(rhs) or is_literal_expression(rhs):
        return True
    if is_reference(rhs):
        return _is_scoped_variable_identifier(
            target_identifier(get_reference(rhs)), declaration.parent, False, resolving
        )
    if is_conditional_expression(rhs):
        return (is_valid_init(rhs.alternate, declaration, resolving)
                and is_valid_init(rhs.consequent, declaration, resolving))
    return False


def _has_valid_init(identifier: str, declaration: n.VariableDeclaration,
                    declarator: n.VariableDeclarator, resolving: Resolving) -> bool:
    key = (identifier, id(declarator))
    if key in resolving:
        # var a = b, b = a;
        return False
    return is_valid_init(declarator.init, declaration, resolving | {key})


def is_variable_declaration(identifier: str, node: Optional[n.Node],
                            resolving: Resolving = _NOTHING) -> bool:
    """``node`` declares ``identifier`` (any kind) with a fresh initializer."""
    declarator = get_declaration(identifier, node)
    if declarator is None:
        return False
    return _has_valid_init(identifier, node, declarator, resolving)


def is_let_declaration(identifier: str, node: Optional[n.Node],
                       resolving: Resolving = _NOTHING) -> bool:
    """``node`` is a ``let`` statement binding ``identifier``.

    A plain binding needs no initializer; a destructured one must come from a
    fresh value.
    """
    if not isinstance(node, n.VariableDeclaration) or node.kind != 'let':
        return False

    declarator = get_declaration(identifier, node)
    if declarator is None:
        return False

    if isinstance(declarator.id, n.ObjectPattern):
        return _has_valid_init(identifier, node, declarator, resolving)
    return True


def is_loop_header_declaration(identifier: str, node: Optional[n.Node]) -> bool:
    """``node`` is the ``var``/``let`` init clause of a for loop binding ``identifier``."""
    if not isinstance(node, n.VariableDeclaration) or node.kind == 'const':
        return False
    loop = node.parent
    return (isinstance(loop, n.ForStatement) and loop.init is node
            and get_declaration(identifier, node) is not None)


def is_rebindable_declaration(identifier: str, node: Optional[n.Node],
                              resolving: Resolving = _NOTHING) -> bool:
    """Bindings a plain assignment may target: ``let``, or a loop control variable."""
    return (is_let_declaration(identifier, node, resolving)
            or is_loop_header_declaration(identifier, node))


# --- scope walks --------------------------------------------------------------

def _verdict(identifier: str, node: n.Node, accepts, resolving: Resolving) -> Optional[bool]:
    """True/False when ``node`` declares ``identifier``, None when it does not."""
    declared = False
    for declaration in _declarations_in(node):
        if get_declaration(identifier, declaration) is None:
            continue
        if accepts(identifier, declaration, resolving):
            return True
        declared = True
    return False if declared else None


def _is_scoped_variable_identifier(identifier: Optional[str], node: Optional[n.Node],
                                   allow_function_props: bool, resolving: Resolving) -> bool:
    if identifier is None:
        return False

    if allow_function_props and is_scoped_function_identifier(identifier, node):
        return True

    while node is not None:
        verdict = _verdict(identifier, node, is_variable_declaration, resolving)
        if verdict is not None:
            return verdict
        if is_end_of_variable_scope(node):
            return False
        node = node.parent
    return False


def _is_scoped_let_identifier(identifier: Optional[str], node: Optional[n.Node]) -> bool:
    if identifier is None:
        return False

    while node is not None:
        verdict = _verdict(identifier, node, is_rebindable_declaration, _NOTHING)
        if verdict is not None:
            return verdict
        if is_end_of_variable_scope(node):
            return False
        node = node.parent
    return False


def is_scoped_variable(target: Optional[n.Node], node: Optional[n.Node],
                       allow_function_props: bool = False) -> bool:
    """The base variable of ``target`` is a fresh local of the scope around ``node``.

    Args:
        target: Assignment target, update argument or call argument
        node: Where the lookup starts (usually the parent of the mutation)
        allow_function_props: Also accept functions/classes declared in scope
    """
    return _is_scoped_variable_identifier(
        target_identifier(target), node, allow_function_props, _NOTHING
    )


def is_scoped_let_variable(target: Optional[n.Node], node: Optional[n.Node]) -> bool:
    """The base variable of ``target`` is a rebindable (``let`` or loop) binding around ``node``."""
    return _is_scoped_let_identifier(target_identifier(target), node)


def is_scoped_let_variable_assignment(node: n.AssignmentExpression) -> bool:
    return is_scoped_let_variable(node.left, node.parent)


# --- functions and classes ----------------------------------------------------

def _declares_function(identifier: str, node: n.Node) -> bool:
    if isinstance(node, EXPORT_DECLARATIONS):
        node = node.declaration
    if not isinstance(node, CLASS_OR_FUNCTION_DECLARATIONS):
        return False
    return node.id is not None and identifier_name(node.id) == identifier


def is_scoped_function_identifier(identifier: Optional[str], node: Optional[n.Node]) -> bool:
    """A function or class named ``identifier`` is declared in the enclosing block."""
    if identifier is None:
        return False

    while node is not None:
        if any(_declares_function(identifier, s) for s in statements(node)):
            return True
        if is_end_of_block(node):
            return False
        node = node.parent
    return False


def is_scoped_function(target: Optional[n.Node], node: Optional[n.Node]) -> bool:
    return is_scoped_function_identifier(target_identifier(target), node)
