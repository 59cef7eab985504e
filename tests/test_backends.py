import numpy as np
import pytest

from atlas96.algebra import AlgebraicElement, add, scale
from atlas96.backends import (
    AlgebraicPlan,
    PermutationPlan,
    build_algebraic_plan,
    build_permutation_plan,
    execute_algebraic_plan,
    execute_permutation_plan,
    execute_plan,
    lower,
)
from atlas96.backends.instructions import (
    AlgebraStep,
    ApplyTransform,
    GradeStep,
    LiftStep,
    LoadLiteral,
    LoadParam,
    ProjectStep,
    RingStep,
    UnitStep,
)
from atlas96.backends.lowering import plan_parameters
from atlas96.backends.runtime import coerce_value, coerce_values, contains_element
from atlas96.bridge import NOT_RANK_ONE, ProjectedClass, lift, project
from atlas96.classes import RingResult
from atlas96.diagnostics import (
    ConstructionError,
    ContractViolation,
    ErrorCode,
    InternalAssertionError,
)
from atlas96.generators import TransformOp
from atlas96.ir import (
    AlgebraAtom,
    BridgeAtom,
    GradeAtom,
    LiteralAtom,
    ParamAtom,
    ReductionAtom,
    RingAtom,
    UnitAtom,
    seq,
    transform,
)

R = TransformOp("R")
D = TransformOp("D")
M = TransformOp("M")


def test_lowering_of_transformed_literal() -> None:
    assert lower(transform(R, LiteralAtom(5))) == (
        LoadLiteral(5),
        ApplyTransform(R),
    )


def test_lowering_conjugates_live_operations() -> None:
    tree = seq(ParamAtom("x"), transform(D, RingAtom("add", rhs="b")))
    assert lower(tree) == (
        LoadParam("x"),
        ApplyTransform(TransformOp("D", 2)),
        RingStep("add", "drop", "b"),
        ApplyTransform(D),
    )


def test_lowering_seeds_unlive_operations() -> None:
    assert lower(RingAtom("mul", rhs=3)) == (LoadParam("a"), RingStep("mul", "drop", 3))
    assert lower(UnitAtom("factor")) == (LoadParam("n"), UnitStep("factor"))
    assert lower(transform(M, BridgeAtom("lift"))) == (
        LoadParam("x"),
        LiftStep(),
        ApplyTransform(M),
    )
    tree = seq(BridgeAtom("lift", class_index=3), AlgebraAtom("scale", scalar=2))
    assert lower(tree) == (LiftStep(3), AlgebraStep("scale", "y", 2))


def test_plan_parameters() -> None:
    tree = seq(RingAtom("add"), ReductionAtom("sum"), AlgebraAtom("add", operand="z"))
    assert plan_parameters(lower(tree)) == {
        "a": "value",
        "b": "value",
        "values": "values",
        "z": "value",
    }
    with pytest.raises(ConstructionError) as excinfo:
        plan_parameters(lower(seq(ParamAtom("v"), ReductionAtom("sum", source="v"))))
    assert excinfo.value.code == ErrorCode.INVALID_EXPRESSION


def test_terminal_instruction_must_come_last() -> None:
    tracked = lower(seq(RingAtom("add", overflow="track"), RingAtom("mul", rhs=2)))
    for build in (build_permutation_plan, build_algebraic_plan):
        with pytest.raises(ConstructionError) as excinfo:
            build(tracked)
        assert excinfo.value.code == ErrorCode.INVALID_PLAN_SHAPE
    with pytest.raises(ConstructionError):
        build_algebraic_plan((LoadLiteral(1), ProjectStep(), ApplyTransform(R)))


def test_lift_is_terminal_only_for_permutation_plans() -> None:
    instructions = (LiftStep(3), ApplyTransform(R))
    with pytest.raises(ConstructionError):
        build_permutation_plan(instructions)
    plan = build_algebraic_plan(instructions)
    assert execute_algebraic_plan(plan, {}) == lift(27)


def test_permutation_engine_rejects_algebraic_instructions() -> None:
    plan = PermutationPlan((LoadLiteral(3), GradeStep(1)))
    with pytest.raises(InternalAssertionError) as excinfo:
        execute_permutation_plan(plan, {})
    assert excinfo.value.code == "backend_invariant_violated"
    assert excinfo.value.instruction == "grade"
    with pytest.raises(InternalAssertionError):
        execute_permutation_plan(PermutationPlan((ApplyTransform(R),)), {})


def test_missing_and_mistyped_runtime_params() -> None:
    plan = build_permutation_plan(lower(RingAtom("add")))
    with pytest.raises(ContractViolation) as excinfo:
        execute_permutation_plan(plan, {"a": 1})
    assert excinfo.value.code == ErrorCode.MISSING_RUNTIME_PARAM
    assert excinfo.value.data == {"param": "b"}
    with pytest.raises(ContractViolation) as excinfo:
        execute_permutation_plan(plan, {"a": lift(1), "b": 2})
    assert excinfo.value.code == ErrorCode.RUNTIME_PARAM_KIND_MISMATCH
    with pytest.raises(ContractViolation) as excinfo:
        execute_permutation_plan(plan, {"a": (1, 2), "b": 2})
    assert excinfo.value.code == ErrorCode.RUNTIME_PARAM_KIND_MISMATCH


def test_algebraic_engine_requires_rank_one_operands() -> None:
    plan = build_algebraic_plan(lower(RingAtom("add")))
    with pytest.raises(ContractViolation) as excinfo:
        execute_algebraic_plan(plan, {"a": add(lift(1), lift(2)), "b": 3})
    assert excinfo.value.code == ErrorCode.NOT_RANK_ONE_OPERAND
    reduce_plan = build_algebraic_plan(lower(ReductionAtom("max")))
    with pytest.raises(ContractViolation):
        execute_algebraic_plan(reduce_plan, {"values": (4, scale(lift(4), 2))})


def test_algebraic_engine_executes_composite_steps() -> None:
    tree = seq(BridgeAtom("lift"), AlgebraAtom("multiply"), GradeAtom(1))
    plan = build_algebraic_plan(lower(seq(tree, BridgeAtom("project"))))
    assert lift(0) == AlgebraicElement.identity()
    assert execute_algebraic_plan(plan, {"x": 0, "y": 9}) == ProjectedClass(9)
    plan = build_algebraic_plan(lower(seq(tree, GradeAtom(2))))
    projected_out = execute_algebraic_plan(plan, {"x": 0, "y": 9})
    assert not projected_out.clifford.any()
    assert project(projected_out) is NOT_RANK_ONE

    plan = build_algebraic_plan(lower(AlgebraAtom("add")))
    summed = execute_algebraic_plan(plan, {"x": 5, "y": lift(6)})
    assert summed == add(lift(5), lift(6))
    assert project(summed) is NOT_RANK_ONE

    plan = build_algebraic_plan(lower(AlgebraAtom("scale", scalar=-2)))
    assert execute_algebraic_plan(plan, {"x": 5}) == scale(lift(5), -2)


def test_algebraic_engine_returns_final_class_results() -> None:
    plan = build_algebraic_plan(lower(RingAtom("add")))
    assert execute_algebraic_plan(plan, {"a": 95, "b": lift(1)}) == 0
    plan = build_algebraic_plan(lower(RingAtom("add", overflow="track")))
    assert execute_algebraic_plan(plan, {"a": 95, "b": 1}) == RingResult(0, True)
    plan = build_algebraic_plan(lower(RingAtom("gcd", rhs=36)))
    assert execute_algebraic_plan(plan, {"a": lift(84)}) == 12
    plan = build_algebraic_plan(lower(ReductionAtom("sum")))
    assert execute_algebraic_plan(plan, {"values": (1, 2)}) == 3


def test_algebraic_engine_lifts_interior_class_results() -> None:
    plan = build_algebraic_plan(lower(seq(RingAtom("add"), BridgeAtom("project"))))
    assert execute_algebraic_plan(plan, {"a": 95, "b": 1}) == ProjectedClass(0)
    plan = build_algebraic_plan(lower(seq(ReductionAtom("max"), GradeAtom(1))))
    assert execute_algebraic_plan(plan, {"values": (3, 21)}) == lift(21)


def test_execute_plan_dispatches_on_plan_kind() -> None:
    instructions = lower(transform(R, ParamAtom("x")))
    assert execute_plan(PermutationPlan(instructions), {"x": 21}) == 45
    assert execute_plan(AlgebraicPlan(instructions), {"x": 21}) == lift(45)


DIFFERENTIAL_TREES = [
    transform(R, ParamAtom("x")),
    seq(ParamAtom("x"), transform(D, RingAtom("add", rhs="b"))),
    seq(
        ParamAtom("x"),
        transform(M, RingAtom("mul", rhs=5)),
        RingAtom("sub", rhs="b", overflow="track"),
    ),
    seq(ParamAtom("x"), RingAtom("gcd", rhs=36), UnitAtom("factor")),
    seq(ParamAtom("x"), transform(TransformOp("T", 3), RingAtom("lcm", rhs="b"))),
    seq(
        ReductionAtom("sum"),
        transform(TransformOp("R", 2), RingAtom("add", rhs="x")),
        BridgeAtom("lift"),
    ),
    seq(
        ReductionAtom("product"),
        transform(M, RingAtom("add", rhs=1)),
        UnitAtom("is_unit"),
    ),
    seq(transform(D, ParamAtom("x")), BridgeAtom("project")),
]


@pytest.mark.parametrize("tree", DIFFERENTIAL_TREES)
def test_engines_agree_on_class_programs(tree) -> None:
    instructions = lower(tree)
    permutation_plan = build_permutation_plan(instructions)
    algebraic_plan = build_algebraic_plan(instructions)
    for x in range(0, 96, 7):
        params = {"x": x, "b": 29, "values": (x, 29, 7)}
        by_class = execute_permutation_plan(permutation_plan, params)
        by_element = execute_algebraic_plan(algebraic_plan, params)
        if isinstance(by_element, AlgebraicElement):
            assert project(by_element) == ProjectedClass(by_class)
        else:
            assert by_element == by_class


def test_runtime_coercion() -> None:
    assert coerce_value(np.int64(5), "x") == 5
    assert coerce_value(np.array(17, dtype=np.int32), "x") == 17
    assert coerce_values(np.arange(3), "values") == (0, 1, 2)
    assert coerce_values([1, lift(2)], "values") == (1, lift(2))
    assert contains_element((1, lift(2)))
    assert not contains_element((1, 2))
    for bad in (True, 1.0, np.float64(1.0), np.array([1, 2]), "5"):
        with pytest.raises(ContractViolation) as excinfo:
            coerce_value(bad, "x")
        assert excinfo.value.code == ErrorCode.RUNTIME_PARAM_KIND_MISMATCH
    for bad in ("abc", 5, lift(1), np.array([[1]])):
        with pytest.raises(ContractViolation):
            coerce_values(bad, "values")
    with pytest.raises(ContractViolation) as excinfo:
        coerce_value(96, "x")
    assert excinfo.value.code == ErrorCode.CLASS_INDEX_OUT_OF_RANGE
