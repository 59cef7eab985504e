from .builders import expression_from_mapping, expression_to_mapping, par, seq
from .model import (
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
    iter_atoms,
    pretty_print,
    referenced_params,
    transform,
)

__all__ = [
    "AlgebraAtom",
    "AtomNode",
    "BridgeAtom",
    "ExprNode",
    "GradeAtom",
    "LiteralAtom",
    "Parallel",
    "ParamAtom",
    "ReductionAtom",
    "RingAtom",
    "Sequential",
    "Transform",
    "UnitAtom",
    "expression_from_mapping",
    "expression_to_mapping",
    "iter_atoms",
    "par",
    "pretty_print",
    "referenced_params",
    "seq",
    "transform",
]
