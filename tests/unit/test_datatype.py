"""
Tests for the two-phase datatype builder.
"""
import pytest

from zuspec.be.smt import (
    SELF,
    BuilderConsumedError,
    Context,
    ContextMismatchError,
    DatatypeBuilder,
    DatatypeSort,
    DeclarationError,
    Int,
    SolverResult,
    SortKind,
)
from zuspec.be.smt.ast import const


def test_variants_follow_declaration_order(ctx):
    """The i-th variant's constructor arity equals the i-th field count."""
    int_sort = ctx.int_sort()
    bool_sort = ctx.bool_sort()
    fields = [
        [],
        [('a', int_sort)],
        [('b', int_sort), ('c', bool_sort)],
        [('d', bool_sort), ('e', int_sort), ('f', int_sort)],
    ]

    builder = DatatypeBuilder(ctx)
    for i, f in enumerate(fields):
        builder.variant(f'V{i}', f)
    shape = builder.finish('Shape')

    assert isinstance(shape, DatatypeSort)
    assert shape.sort.kind == SortKind.DATATYPE
    assert shape.sort.num_constructors == len(fields)
    assert len(shape.variants) == len(fields)
    for i, (variant, f) in enumerate(zip(shape.variants, fields)):
        assert variant.constructor.name == ctx.symbol(f'V{i}')
        assert variant.constructor.arity == len(f)
        assert variant.constructor.range == shape.sort
        assert len(variant.accessors) == len(f)
        for accessor, (field_name, field_sort) in zip(variant.accessors, f):
            assert accessor.name == ctx.symbol(field_name)
            assert accessor.range == field_sort
        assert variant.tester.arity == 1
        assert variant.tester.range == ctx.bool_sort()


def test_recursive_field_resolves_to_datatype(ctx):
    """A SELF field resolves to the finished sort itself."""
    int_list = (
        ctx.datatype_builder()
        .variant('Nil', [])
        .variant('Cons', [('head', ctx.int_sort()), ('tail', SELF)])
        .finish('IntList'))

    nil, cons = int_list.variants
    head, tail = cons.accessors

    assert nil.constructor.arity == 0
    assert cons.constructor.arity == 2
    assert tail.range == int_list.sort
    assert cons.constructor.domain[1] == int_list.sort
    assert head.range == ctx.int_sort()


def test_option_int_scenario(ctx):
    """y == Some(3) is satisfiable and value(y) evaluates to 3."""
    option = (
        DatatypeBuilder(ctx)
        .variant('None', [])
        .variant('Some', [('value', ctx.int_sort())])
        .finish('OptionInt'))
    some = option.variants[1]
    value = some.accessors[0]

    y = const(ctx, 'y', option.sort)
    solver = ctx.solver()
    solver.assert_(y.eq(some.constructor.apply(Int.from_int(ctx, 3))))

    assert solver.check() == SolverResult.SAT
    model = solver.get_model()

    assert model.eval(value.apply(y)).as_int() == 3
    assert model.eval(some.tester.apply(y)).as_bool() is True
    assert model.eval(option.variants[0].tester.apply(y)).as_bool() is False


def test_variant_lookup_by_name(ctx):
    """Test looking up a finished variant by constructor name."""
    option = (
        DatatypeBuilder(ctx)
        .variant('None', [])
        .variant('Some', [('value', ctx.int_sort())])
        .finish('OptionInt'))

    assert option.variant('Some') is option.variants[1]
    with pytest.raises(KeyError):
        option.variant('Other')


def test_finished_builder_is_consumed(ctx):
    """Every call on a finished builder is a programming error."""
    builder = DatatypeBuilder(ctx).variant('Unit', [])
    builder.finish('UnitType')

    with pytest.raises(BuilderConsumedError):
        builder.variant('Other', [])
    with pytest.raises(BuilderConsumedError):
        builder.finish('UnitType2')


def test_failed_finish_still_consumes(ctx):
    """Finishing an empty builder fails and the builder cannot be retried."""
    builder = DatatypeBuilder(ctx)

    with pytest.raises(DeclarationError):
        builder.finish('Empty')
    with pytest.raises(BuilderConsumedError):
        builder.variant('Late', [])


def test_duplicate_variant_names_rejected(ctx):
    """Colliding variant names fail at declaration time."""
    builder = DatatypeBuilder(ctx).variant('A', [])

    with pytest.raises(DeclarationError):
        builder.variant('A', [('x', ctx.int_sort())])

    # The rejected declaration was not recorded.
    dt = builder.variant('B', []).finish('AB')
    assert len(dt.variants) == 2


def test_duplicate_accessor_names_rejected(ctx):
    """Accessor names must be unique across the whole datatype."""
    int_sort = ctx.int_sort()

    with pytest.raises(DeclarationError):
        DatatypeBuilder(ctx).variant('P', [('x', int_sort), ('x', int_sort)])

    builder = DatatypeBuilder(ctx).variant('P', [('x', int_sort)])
    with pytest.raises(DeclarationError):
        builder.variant('Q', [('x', int_sort)])


def test_field_sort_from_other_context_rejected(ctx):
    """Test that field sorts must come from the builder's context."""
    other = Context()

    with pytest.raises(ContextMismatchError):
        DatatypeBuilder(ctx).variant('P', [('x', other.int_sort())])


def test_field_sort_must_be_sort(ctx):
    """Test that field sorts are type checked."""
    with pytest.raises(TypeError):
        DatatypeBuilder(ctx).variant('P', [('x', 'Int')])
