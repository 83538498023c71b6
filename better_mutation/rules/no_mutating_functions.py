"""no-mutating-functions: forbid library functions that mutate their first argument."""
from typing import Optional

from ..analyzer import nodes as n
from ..analyzer.exemptions import is_reducer_result
from ..analyzer.predicates import is_function_expression, is_object_expression
from ..analyzer.scope import is_scoped_variable
from ..utils.logger import debug
from .base import Rule

trace = debug('no-mutating-functions')

OBJECT_MUTATING_FUNCTIONS = frozenset({
    'Object.assign',
    'Object.defineProperty',
    'Object.defineProperties',
    'Object.setPrototypeOf',
})

# Called as `_.name(...)`, or as a bare `name(...)` with useLodashFunctionImports
LODASH_MUTATING_FUNCTIONS = frozenset({
    'assign',
    'assignIn',
    'assignWith',
    'assignInWith',
    'defaults',
    'defaultsDeep',
    'extend',
    'merge',
    'mergeWith',
})


def qualified_name(callee: Optional[n.Node]) -> Optional[str]:
    """``Object.assign`` for a static member callee, ``assign`` for an identifier."""
    if isinstance(callee, n.Identifier):
        return callee.name
    if (isinstance(callee, n.MemberExpression) and not callee.computed
            and isinstance(callee.object, n.Identifier)
            and isinstance(callee.property, n.Identifier)):
        return f"{callee.object.name}.{callee.property.name}"
    return None


def is_mutating_function(name: Optional[str], use_lodash_function_imports: bool) -> bool:
    if name is None:
        return False
    if name in OBJECT_MUTATING_FUNCTIONS:
        return True
    namespace, _, function = name.rpartition('.')
    if namespace:
        return namespace == '_' and function in LODASH_MUTATING_FUNCTIONS
    return use_lodash_function_imports and function in LODASH_MUTATING_FUNCTIONS


class NoMutatingFunctionsRule(Rule):
    name = 'no-mutating-functions'
    description = 'Forbid the use of mutating functions such as Object.assign.'
    messages = {
        'mutatingFunctionError': "Unallowed use of mutating function '{name}'",
    }

    def handlers(self):
        return {'CallExpression': self.check_call}

    def _is_fresh_target(self, node: n.CallExpression) -> bool:
        if not node.arguments:
            return False
        target = node.arguments[0]
        return (is_object_expression(target)
                or is_function_expression(target)
                or is_scoped_variable(target, node, self.options.function_props))

    def check_call(self, node: n.CallExpression) -> None:
        name = qualified_name(node.callee)
        if not is_mutating_function(name, self.options.use_lodash_function_imports):
            return

        # A call without a target is reported even when the method is ignored
        if node.arguments and name in self.options.ignored_methods:
            trace('ignored: %s', name)
            return
        if self._is_fresh_target(node):
            return
        if is_reducer_result(self.options.reducers, node):
            return

        self.report(node, 'mutatingFunctionError', name=name)
