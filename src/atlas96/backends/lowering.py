from atlas96.diagnostics import ConstructionError, ErrorCode
from atlas96.ir.model import (
    AlgebraAtom,
    AtomNode,
    BridgeAtom,
    ExprNode,
    GradeAtom,
    LiteralAtom,
    Parallel,
    ParamAtom,
    ReductionAtom,
    RingAtom,
    Sequential,
    Transform,
    UnitAtom,
    is_source,
    iter_atoms,
)

from .instructions import (
    AlgebraicPlan,
    AlgebraStep,
    ApplyTransform,
    GradeStep,
    Instruction,
    Instructions,
    LiftStep,
    LoadLiteral,
    LoadParam,
    PermutationPlan,
    ProjectStep,
    ReduceStep,
    RingStep,
    UnitStep,
)


def _lower_atom(atom: AtomNode, *, live: bool, out: list[Instruction]) -> None:
    if isinstance(atom, LiteralAtom):
        out.append(LoadLiteral(atom.value))
        return
    if isinstance(atom, ParamAtom):
        out.append(LoadParam(atom.name))
        return
    if isinstance(atom, ReductionAtom):
        out.append(ReduceStep(atom.op, atom.source))
        return
    if isinstance(atom, BridgeAtom) and atom.class_index is not None:
        out.append(LiftStep(atom.class_index))
        return

    if not live:
        seed = atom.lhs if isinstance(atom, RingAtom) else atom.source
        out.append(LoadParam(seed))
    if isinstance(atom, RingAtom):
        out.append(RingStep(atom.op, atom.overflow, atom.rhs))
    elif isinstance(atom, UnitAtom):
        out.append(UnitStep(atom.op))
    elif isinstance(atom, BridgeAtom):
        out.append(ProjectStep() if atom.op == "project" else LiftStep())
    elif isinstance(atom, GradeAtom):
        out.append(GradeStep(atom.grade))
    elif isinstance(atom, AlgebraAtom):
        out.append(AlgebraStep(atom.op, atom.operand, atom.scalar))
    else:
        raise TypeError(f"unsupported atom {type(atom).__name__}")


def _lower(node: ExprNode, *, live: bool, out: list[Instruction]) -> None:
    if isinstance(node, Sequential | Parallel):
        _lower(node.left, live=live, out=out)
        _lower(node.right, live=True, out=out)
        return
    if isinstance(node, Transform):
        if live and not is_source(next(iter_atoms(node.child))):
            out.append(ApplyTransform(node.op.inverse()))
        _lower(node.child, live=live, out=out)
        out.append(ApplyTransform(node.op))
        return
    _lower_atom(node, live=live, out=out)


def lower(node: ExprNode, /) -> Instructions:
    """Flatten a normalized tree into one straight-line instruction list.

    `Transform(g, x)` lowers to `g^-1, x, g`; the leading inverse is omitted
    when `x` starts from a fresh value.
    """
    out: list[Instruction] = []
    _lower(node, live=False, out=out)
    return tuple(out)


def is_terminal_instruction(
    instruction: Instruction, /, *, lift_is_terminal: bool
) -> bool:
    if isinstance(instruction, RingStep):
        return instruction.overflow == "track"
    if isinstance(instruction, UnitStep | ProjectStep):
        return True
    return lift_is_terminal and isinstance(instruction, LiftStep)


def _check_terminal_placement(
    instructions: Instructions, *, backend: str, lift_is_terminal: bool
) -> None:
    for position, instruction in enumerate(instructions[:-1]):
        if is_terminal_instruction(instruction, lift_is_terminal=lift_is_terminal):
            raise ConstructionError(
                code=ErrorCode.INVALID_PLAN_SHAPE,
                message=(
                    f"{instruction.kind} instruction at position {position} ends the "
                    f"{backend} plan but {len(instructions) - position - 1} "
                    "instruction(s) follow it"
                ),
                help="terminal ring/unit/bridge operations must come last",
                data={"backend": backend, "position": position},
            )


def plan_parameters(instructions: Instructions, /) -> dict[str, str]:
    """Runtime parameters a plan reads, mapped to `value` or `values`."""
    kinds: dict[str, str] = {}
    for instruction in instructions:
        if isinstance(instruction, LoadParam):
            name, kind = instruction.name, "value"
        elif isinstance(instruction, RingStep) and isinstance(instruction.rhs, str):
            name, kind = instruction.rhs, "value"
        elif isinstance(instruction, AlgebraStep) and instruction.op != "scale":
            name, kind = instruction.operand, "value"
        elif isinstance(instruction, ReduceStep):
            name, kind = instruction.source, "values"
        else:
            continue
        if kinds.setdefault(name, kind) != kind:
            raise ConstructionError(
                code=ErrorCode.INVALID_EXPRESSION,
                message=f"runtime parameter {name!r} is read both as one value "
                "and as a sequence",
                data={"param": name},
            )
    return kinds


def build_permutation_plan(instructions: Instructions, /) -> PermutationPlan:
    _check_terminal_placement(
        instructions, backend="permutation", lift_is_terminal=True
    )
    return PermutationPlan(instructions)


def build_algebraic_plan(instructions: Instructions, /) -> AlgebraicPlan:
    _check_terminal_placement(instructions, backend="algebraic", lift_is_terminal=False)
    return AlgebraicPlan(instructions)


__all__ = [
    "build_algebraic_plan",
    "build_permutation_plan",
    "is_terminal_instruction",
    "lower",
    "plan_parameters",
]
