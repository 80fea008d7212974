"""
Tests for the context-bound solver, optimizer and model.
"""
import pytest

from zuspec.be.smt import (
    Bool,
    Context,
    EngineError,
    Int,
    ModelUnavailableError,
    SolverResult,
)


def test_solver_unsat():
    """Test that the solver correctly identifies unsatisfiable constraints."""
    ctx = Context()
    solver = ctx.solver()

    x = Int.new_const(ctx, 'x')
    solver.assert_(x.gt(10))
    solver.assert_(x.lt(5))

    assert solver.check() == SolverResult.UNSAT
    assert solver.last_result == SolverResult.UNSAT


def test_solver_sat():
    """Test that the solver finds satisfying assignments."""
    ctx = Context()
    solver = ctx.solver()

    x = Int.new_const(ctx, 'x')
    solver.assert_(x.gt(10))
    solver.assert_(x.lt(20))

    assert solver.check() == SolverResult.SAT

    value = solver.get_model().eval(x).as_int()
    assert 10 < value < 20


def test_solver_push_pop():
    """Test push/pop for backtracking."""
    ctx = Context()
    solver = ctx.solver()

    x = Int.new_const(ctx, 'x')
    solver.assert_(x.gt(10))

    # First check: x > 10
    assert solver.check() == SolverResult.SAT

    # Add conflicting constraint in new scope
    solver.push()
    assert solver.num_scopes() == 1
    solver.assert_(x.lt(5))

    # Second check: x > 10 AND x < 5
    assert solver.check() == SolverResult.UNSAT

    # Pop back to original state
    solver.pop()
    assert solver.num_scopes() == 0

    # Third check: back to just x > 10
    assert solver.check() == SolverResult.SAT


def test_solver_pop_without_scope_reports_engine_error():
    """Test that an engine-reported error is surfaced, not swallowed."""
    ctx = Context()
    solver = ctx.solver()

    with pytest.raises(EngineError) as exc_info:
        solver.pop()

    assert "Z3_solver_pop" in exc_info.value.entry_point


def test_solver_reset():
    """Test solver reset functionality."""
    ctx = Context()
    solver = ctx.solver()

    x = Int.new_const(ctx, 'x')
    solver.assert_(x.gt(10))
    solver.assert_(x.lt(5))
    assert solver.check() == SolverResult.UNSAT

    solver.reset()
    assert solver.last_result is None

    # After reset, add only satisfiable constraint
    y = Int.new_const(ctx, 'y')
    solver.assert_(y.eq(Int.from_int(ctx, 42)))

    assert solver.check() == SolverResult.SAT
    assert solver.get_model().eval(y).as_int() == 42


def test_solver_get_model_arithmetic():
    """Test extracting models from satisfiable formulas."""
    ctx = Context()
    solver = ctx.solver()

    x = Int.new_const(ctx, 'x')
    y = Int.new_const(ctx, 'y')

    solver.assert_((x + y).eq(Int.from_int(ctx, 10)))
    solver.assert_(x.gt(5))

    assert solver.check() == SolverResult.SAT
    model = solver.get_model()

    x_val = model.eval(x).as_int()
    y_val = model.eval(y).as_int()
    assert x_val + y_val == 10
    assert x_val > 5


def test_solver_boolean_constraints():
    """Test the solver with boolean variables."""
    ctx = Context()
    solver = ctx.solver()

    a = Bool.new_const(ctx, 'a')
    b = Bool.new_const(ctx, 'b')

    solver.assert_(a.or_(b))
    solver.assert_(a.not_())

    assert solver.check() == SolverResult.SAT
    model = solver.get_model()
    assert model.eval(a).as_bool() is False
    assert model.eval(b).as_bool() is True


def test_get_model_requires_sat_result():
    """Test that no model is handed out before a check or after UNSAT."""
    ctx = Context()
    solver = ctx.solver()

    with pytest.raises(ModelUnavailableError):
        solver.get_model()

    solver.assert_(Bool.from_bool(ctx, False))
    assert solver.check() == SolverResult.UNSAT
    with pytest.raises(ModelUnavailableError):
        solver.get_model()


def test_check_assumptions():
    """Test checking under assumption literals."""
    ctx = Context()
    solver = ctx.solver()

    p = Bool.new_const(ctx, 'p')
    x = Int.new_const(ctx, 'x')
    solver.assert_(p.implies(x.lt(0)))
    solver.assert_(x.gt(3))

    assert solver.check_assumptions([p]) == SolverResult.UNSAT
    assert solver.check_assumptions([p.not_()]) == SolverResult.SAT
    assert solver.check() == SolverResult.SAT


def test_model_const_interp():
    """Test reading constant interpretations back from a model."""
    ctx = Context()
    solver = ctx.solver()

    int_sort = ctx.int_sort()
    x_decl = ctx.func_decl('x', [], int_sort)
    unused = ctx.func_decl('unused', [], int_sort)
    x = x_decl.apply()
    solver.assert_(x.eq(Int.from_int(ctx, 5)))

    assert solver.check() == SolverResult.SAT
    model = solver.get_model()

    assert model.get_const_interp(x_decl).as_int() == 5
    assert model.get_const_interp(unused) is None
    assert x_decl in model.decls()
    assert len(model) == 1


def test_optimize_maximize():
    """Test that the optimizer drives an objective to its bound."""
    ctx = Context()
    opt = ctx.optimize()

    x = Int.new_const(ctx, 'x')
    opt.assert_(x.le(10))
    opt.assert_(x.ge(0))
    opt.maximize(x)

    assert opt.check() == SolverResult.SAT
    assert opt.get_model().eval(x).as_int() == 10


def test_optimize_soft_constraints():
    """Test that soft constraints are honoured when consistent with hard ones."""
    ctx = Context()
    opt = ctx.optimize()

    x = Int.new_const(ctx, 'x')
    opt.assert_(x.gt(0))
    opt.assert_soft(x.eq(Int.from_int(ctx, 7)), weight=2)
    opt.assert_soft(x.eq(Int.from_int(ctx, 3)), weight=1)

    assert opt.check() == SolverResult.SAT
    assert opt.get_model().eval(x).as_int() == 7


def test_optimize_soft_constraint_groups():
    """Test soft constraints with and without a named group."""
    ctx = Context()
    opt = ctx.optimize()

    x = Int.new_const(ctx, 'x')
    opt.assert_(x.ge(0))
    default_group = opt.assert_soft(x.eq(Int.from_int(ctx, 4)))
    named_group = opt.assert_soft(x.ge(2), group='bounds')

    assert default_group != named_group
    assert opt.check() == SolverResult.SAT
    assert opt.get_model().eval(x).as_int() == 4


def test_optimize_push_pop():
    """Test optimizer scopes."""
    ctx = Context()
    opt = ctx.optimize()

    x = Int.new_const(ctx, 'x')
    opt.assert_(x.gt(0))
    opt.push()
    opt.assert_(x.lt(0))
    assert opt.check() == SolverResult.UNSAT
    with pytest.raises(ModelUnavailableError):
        opt.get_model()

    opt.pop()
    assert opt.check() == SolverResult.SAT
