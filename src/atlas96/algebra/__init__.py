from .clifford import (
    CONTEXT_BLADES,
    MAX_GRADE,
    NUM_BLADES,
    basis_blade,
    blade_from_generators,
    blade_grade,
    blade_product,
    clifford_product,
    grade_project,
)
from .element import (
    AlgebraicElement,
    add,
    conjugate,
    involute,
    multiply,
    power,
    project_grade,
    reverse,
    scale,
)
from .octonion import FANO_LINES, cayley_product, cross_product
from .transforms import (
    apply_element_transform,
    apply_element_transforms,
    transform_d,
    transform_m,
    transform_r,
    transform_t,
)

__all__ = [
    "AlgebraicElement",
    "CONTEXT_BLADES",
    "FANO_LINES",
    "MAX_GRADE",
    "NUM_BLADES",
    "add",
    "apply_element_transform",
    "apply_element_transforms",
    "basis_blade",
    "blade_from_generators",
    "blade_grade",
    "blade_product",
    "cayley_product",
    "clifford_product",
    "conjugate",
    "cross_product",
    "grade_project",
    "involute",
    "multiply",
    "power",
    "project_grade",
    "reverse",
    "scale",
    "transform_d",
    "transform_m",
    "transform_r",
    "transform_t",
]
