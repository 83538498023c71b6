"""no-mutation: forbid reassignment and ``++``/``--`` outside local scope."""
from ..analyzer import nodes as n
from ..analyzer.exemptions import ErrorType, error_type, is_exempt
from ..analyzer.scope import is_scoped_let_variable, is_scoped_variable
from ..utils.logger import debug
from .base import Rule

trace = debug('no-mutation')

MESSAGE_IDS = {
    ErrorType.COMMON_JS: 'commonJsError',
    ErrorType.PROTOTYPE: 'prototypesError',
    '++': 'incrementError',
    '--': 'decrementError',
}


def get_message_id(error) -> str:
    return MESSAGE_IDS.get(error, 'reassignmentError')


class NoMutationRule(Rule):
    name = 'no-mutation'
    description = 'Forbid the use of mutating operators.'
    messages = {
        'reassignmentError': 'Unallowed reassignment to `{assignee}`',
        'incrementError': 'Unallowed use of `++` operator',
        'decrementError': 'Unallowed use of `--` operator',
        'commonJsError': 'Unallowed reassignment to `{assignee}`. '
                         'You may want to activate the `commonjs` option for this rule',
        'prototypesError': 'Unallowed reassignment to `{assignee}`. '
                           'You may want to activate the `prototypes` option for this rule',
    }

    def handlers(self):
        return {
            'AssignmentExpression': self.check_assignment,
            'UpdateExpression': self.check_update,
        }

    def _is_local_target(self, target, start) -> bool:
        """Bare names need a rebindable binding; property writes need a fresh value."""
        if isinstance(target, n.Identifier):
            return is_scoped_let_variable(target, start)
        return is_scoped_variable(target, start, self.options.function_props)

    def check_assignment(self, node: n.AssignmentExpression) -> None:
        if is_exempt(node, self.options):
            trace('exempt: %s', self.context.source_code.get_text(node.left))
            return
        if self._is_local_target(node.left, node.parent):
            return

        self.report(
            node,
            get_message_id(error_type(node)),
            assignee=self.context.source_code.get_text(node.left),
        )

    def check_update(self, node: n.UpdateExpression) -> None:
        if self._is_local_target(node.argument, node):
            return

        self.report(node, get_message_id(node.operator))
