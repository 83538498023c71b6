"""Scope resolution on real parse trees."""
from better_mutation.analyzer import nodes as n
from better_mutation.analyzer.scope import (
    get_declaration,
    is_let_declaration,
    is_scoped_function,
    is_scoped_let_variable,
    is_scoped_let_variable_assignment,
    is_scoped_variable,
    is_valid_init,
    is_variable_declaration,
    target_identifier,
)

from conftest import find_all, find_first


def last_assignment(program):
    return find_all(program, 'AssignmentExpression')[-1]


class TestTargetIdentifier:
    """Reducing a target to the variable it mutates."""

    def test_member_chain(self, parse):
        assignment = last_assignment(parse('a.b[c].d = 1;'))
        assert target_identifier(assignment.left) == 'a'

    def test_this_has_no_name(self, parse):
        assignment = last_assignment(parse('this.a = 1;'))
        assert target_identifier(assignment.left) is None

    def test_call_result_has_no_name(self, parse):
        assignment = last_assignment(parse('f().a = 1;'))
        assert target_identifier(assignment.left) is None
        assert not is_scoped_variable(assignment.left, assignment.parent)

    def test_missing_target(self):
        assert target_identifier(None) is None
        assert not is_scoped_variable(None, None)
        assert not is_scoped_let_variable(None, None)


class TestDeclarations:
    """Finding a declarator in a variable statement."""

    def test_plain_declarator(self, parse):
        declaration = parse('let a = 1, b = 2;').body[0]
        assert get_declaration('b', declaration) is declaration.declarations[1]
        assert get_declaration('c', declaration) is None

    def test_destructured_declarator(self, parse):
        declaration = parse('let { a, b: c, ...rest } = foo;').body[0]
        assert get_declaration('a', declaration) is declaration.declarations[0]
        assert get_declaration('c', declaration) is declaration.declarations[0]
        # `b` is only the key, `rest` is a rest element
        assert get_declaration('b', declaration) is None
        assert get_declaration('rest', declaration) is None

    def test_not_a_declaration(self, parse):
        statement = parse('a = 1;').body[0]
        assert get_declaration('a', statement) is None

    def test_let_without_init_is_a_let_declaration(self, parse):
        declaration = parse('let a, b;').body[0]
        assert is_let_declaration('b', declaration)
        assert not is_variable_declaration('b', declaration)

    def test_const_is_not_a_let_declaration(self, parse):
        declaration = parse('const a = {};').body[0]
        assert not is_let_declaration('a', declaration)
        assert is_variable_declaration('a', declaration)

    def test_destructured_let_needs_fresh_source(self, parse):
        program = parse('function f(foo) { let { a } = foo; }')
        declaration = find_first(program, 'VariableDeclaration')
        assert not is_let_declaration('a', declaration)


class TestFreshness:
    """Initializers that count as fresh values."""

    def _init(self, program, name):
        for declaration in find_all(program, 'VariableDeclaration'):
            declarator = get_declaration(name, declaration)
            if declarator is not None:
                return declarator.init, declaration
        raise AssertionError(f"{name} not declared")

    def test_literals_and_containers(self, parse):
        program = parse('var a = 1, b = "x", c = {}, d = [], e = null;')
        for name in 'abcde':
            assert is_valid_init(*self._init(program, name)), name

    def test_call_result_is_not_fresh(self, parse):
        program = parse('var a = make();')
        assert not is_valid_init(*self._init(program, 'a'))

    def test_function_is_not_fresh(self, parse):
        program = parse('var a = () => {};')
        assert not is_valid_init(*self._init(program, 'a'))

    def test_reference_to_fresh_local(self, parse):
        program = parse('var b = {}; var a = b.c;')
        assert is_valid_init(*self._init(program, 'a'))

    def test_reference_to_parameter(self, parse):
        program = parse('function f(b) { var a = b; }')
        assert not is_valid_init(*self._init(program, 'a'))

    def test_conditional_needs_both_branches(self, parse):
        program = parse('var b = {}; var a = x ? b : {}; function f(p) { var c = x ? p : {}; }')
        assert is_valid_init(*self._init(program, 'a'))
        assert not is_valid_init(*self._init(program, 'c'))

    def test_self_reference_terminates(self, parse):
        program = parse('var a = b, b = a;')
        assert not is_valid_init(*self._init(program, 'a'))


class TestScopedLetVariable:
    """Plain reassignment of `let` bindings."""

    def test_same_scope(self, parse):
        assert is_scoped_let_variable_assignment(last_assignment(parse('let x = 1; x = 2;')))

    def test_nested_block_sees_outer_let(self, parse):
        program = parse('function f() { let x; if (c) { while (d) { x = 1; } } }')
        assert is_scoped_let_variable_assignment(last_assignment(program))

    def test_callback_expression_sees_outer_let(self, parse):
        program = parse('function f() { let x = 0; items.forEach(i => { x = x + i; }); }')
        assert is_scoped_let_variable_assignment(last_assignment(program))

    def test_nested_function_declaration_stops_lookup(self, parse):
        program = parse('let x = 1; function g() { x = 2; }')
        assert not is_scoped_let_variable_assignment(last_assignment(program))

    def test_var_and_const_do_not_allow_reassignment(self, parse):
        assert not is_scoped_let_variable_assignment(last_assignment(parse('var x = 1; x = 2;')))
        assert not is_scoped_let_variable_assignment(last_assignment(parse('const x = 1; x = 2;')))

    def test_inner_declaration_shadows_outer_let(self, parse):
        program = parse('let x = 1; if (c) { const x = 2; x = 3; }')
        assert not is_scoped_let_variable_assignment(last_assignment(program))

    def test_for_header_let(self, parse):
        program = parse('for (let i; i < 3; i = i + 1) {}')
        assert is_scoped_let_variable_assignment(last_assignment(program))

    def test_for_header_var_is_a_control_variable(self, parse):
        program = parse('for (var i = 0; i < 3; i = i + 1) {}')
        assert is_scoped_let_variable_assignment(last_assignment(program))

    def test_var_outside_the_header_is_not_rebindable(self, parse):
        program = parse('var i = 0; for (i; i < 3; i = i + 1) {}')
        assert not is_scoped_let_variable_assignment(last_assignment(program))

    def test_let_without_init_allows_no_property_writes(self, parse):
        assignment = last_assignment(parse('let a, b; b.x = {};'))
        assert is_scoped_let_variable(assignment.left, assignment.parent)
        assert not is_scoped_variable(assignment.left, assignment.parent)


class TestScopedVariable:
    """Property mutation of fresh locals."""

    def test_fresh_const(self, parse):
        assignment = last_assignment(parse('const o = {}; o.a = 1;'))
        assert is_scoped_variable(assignment.left, assignment.parent)

    def test_declared_later_in_same_scope(self, parse):
        assignment = last_assignment(parse('o.a = 1; var o = {};'))
        assert is_scoped_variable(assignment.left, assignment.parent)

    def test_outer_fresh_value_across_function_boundary(self, parse):
        assignment = last_assignment(parse('const o = {}; function f() { o.a = 1; }'))
        assert not is_scoped_variable(assignment.left, assignment.parent)

    def test_shadowing_parameter_copy(self, parse):
        program = parse('const o = {}; function f(p) { if (c) { let o = p; o.a = 1; } }')
        assignment = last_assignment(program)
        assert not is_scoped_variable(assignment.left, assignment.parent)

    def test_for_header_var(self, parse):
        assignment = last_assignment(parse('for (var i = 0; i < 3; i += 1) {}'))
        assert is_scoped_variable(assignment.left, assignment.parent)

    def test_for_header_reusing_parameter(self, parse):
        program = parse('function f(i) { for (i; i < 3; i += 1) {} }')
        assignment = last_assignment(program)
        assert not is_scoped_variable(assignment.left, assignment.parent)

    def test_update_expression_in_for_header(self, parse):
        program = parse('for (var i = 0; i < 3; i++) {}')
        update = find_first(program, 'UpdateExpression')
        assert isinstance(update, n.UpdateExpression)
        assert is_scoped_variable(update.argument, update)


class TestScopedFunction:
    """Function and class declarations for the function-props option."""

    def test_function_declaration(self, parse):
        assignment = last_assignment(parse('function foo() {} foo.bar = 1;'))
        assert is_scoped_function(assignment.left, assignment.parent)
        assert is_scoped_variable(assignment.left, assignment.parent, allow_function_props=True)
        assert not is_scoped_variable(assignment.left, assignment.parent)

    def test_exported_class(self, parse):
        assignment = last_assignment(parse('export class Foo {} Foo.bar = 1;'))
        assert is_scoped_function(assignment.left, assignment.parent)

    def test_lookup_stops_at_arrow_function(self, parse):
        program = parse('function foo() {} items.map(() => { foo.bar = 1; });')
        assignment = last_assignment(program)
        assert not is_scoped_function(assignment.left, assignment.parent)

    def test_function_expression_is_not_a_declaration(self, parse):
        assignment = last_assignment(parse('var foo = function foo() {}; foo.bar = 1;'))
        assert not is_scoped_function(assignment.left, assignment.parent)
