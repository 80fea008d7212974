"""
Tests for function declarations and their application.
"""
import pytest

from zuspec.be.smt import Bool, Int, SolverResult, SortMismatchError


def test_func_decl_records_signature(ctx):
    """Test that domain and range are recorded on declaration."""
    int_sort = ctx.int_sort()
    bool_sort = ctx.bool_sort()

    f = ctx.func_decl('f', [int_sort, bool_sort], int_sort)

    assert f.arity == 2
    assert f.domain == (int_sort, bool_sort)
    assert f.range == int_sort
    assert f.name == ctx.symbol('f')


def test_constant_declaration(ctx):
    """A declaration with an empty domain denotes a constant."""
    c = ctx.func_decl('c', [], ctx.int_sort())
    assert c.arity == 0

    term = c.apply()
    assert isinstance(term, Int)
    assert term == c.apply()


def test_apply_rejects_wrong_arity(ctx):
    """Test that misapplication by arity is rejected before the engine sees it."""
    f = ctx.func_decl('f', [ctx.int_sort()], ctx.int_sort())

    with pytest.raises(SortMismatchError):
        f.apply()
    with pytest.raises(SortMismatchError):
        f.apply(Int.from_int(ctx, 1), Int.from_int(ctx, 2))


def test_apply_rejects_wrong_sort(ctx):
    """Test that misapplication by argument sort is rejected."""
    f = ctx.func_decl('f', [ctx.int_sort()], ctx.bool_sort())

    with pytest.raises(SortMismatchError) as exc_info:
        f.apply(Bool.from_bool(ctx, True))

    assert exc_info.value.context["position"] == 0


def test_apply_result_class_follows_range(ctx):
    """Test that applications are wrapped according to the range sort."""
    p = ctx.func_decl('p', [ctx.int_sort()], ctx.bool_sort())
    result = p.apply(Int.from_int(ctx, 3))
    assert isinstance(result, Bool)


def test_forall_const(ctx):
    """Test universal quantification over a declared function."""
    int_sort = ctx.int_sort()
    f = ctx.func_decl('f', [int_sort], int_sort)
    solver = ctx.solver()

    x = Int.new_const(ctx, 'x')
    solver.assert_(ctx.forall_const([x], x.eq(f.apply(x))))

    assert solver.check() == SolverResult.SAT
    model = solver.get_model()

    f_f_3 = f.apply(f.apply(Int.from_int(ctx, 3)))
    assert model.eval(f_f_3).as_int() == 3
