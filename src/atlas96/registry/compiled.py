from collections.abc import Mapping
from dataclasses import dataclass

from atlas96.backends import execute_plan
from atlas96.backends.instructions import AlgebraicPlan, ExecutionPlan, PermutationPlan
from atlas96.backends.runtime import (
    ExecutionResult,
    RuntimeSequence,
    RuntimeValue,
    coerce_runtime_value,
    contains_element,
)
from atlas96.compiler.analysis import ComplexityTier, TreeMetrics
from atlas96.compiler.selection import BackendKind
from atlas96.diagnostics import ContractViolation, ErrorCode

from .descriptor import OperationDescriptor


@dataclass(frozen=True, slots=True)
class CompiledOperation:
    """Cached, immutable compilation artifact with one invocation entry point.

    `plan` is the plan chosen at compile time; `element_plan` runs whenever an
    algebraic element is supplied at call time.
    """

    descriptor: OperationDescriptor
    cache_key: str
    tier: ComplexityTier
    backend: BackendKind
    metrics: TreeMetrics
    plan: ExecutionPlan
    element_plan: AlgebraicPlan

    def bind(
        self, params: Mapping[str, object], /
    ) -> dict[str, RuntimeValue | RuntimeSequence]:
        """Validate call-time parameters against the declared runtime shape."""
        declared = dict(self.descriptor.runtime)
        unexpected = sorted(set(params) - set(declared))
        if unexpected:
            raise ContractViolation(
                code=ErrorCode.UNEXPECTED_RUNTIME_PARAM,
                message=(
                    f"{self.descriptor.qualified_name} got unexpected runtime "
                    f"parameter(s) {unexpected}"
                ),
                help=f"declared runtime parameters: {sorted(declared)}",
                data={"operation": self.descriptor.qualified_name},
            )
        bound: dict[str, RuntimeValue | RuntimeSequence] = {}
        for name, kind in declared.items():
            if name not in params:
                raise ContractViolation(
                    code=ErrorCode.MISSING_RUNTIME_PARAM,
                    message=(
                        f"{self.descriptor.qualified_name} is missing runtime "
                        f"parameter {name!r}"
                    ),
                    data={"operation": self.descriptor.qualified_name, "param": name},
                )
            bound[name] = coerce_runtime_value(params[name], name, kind)
        return bound

    def select_plan(self, bound: Mapping[str, object], /) -> ExecutionPlan:
        """Route element-valued calls to the algebraic plan."""
        if isinstance(self.plan, PermutationPlan) and any(
            contains_element(value) for value in bound.values()
        ):
            return self.element_plan
        return self.plan

    def invoke(
        self, params: Mapping[str, object] | None = None, /, **kwargs: object
    ) -> ExecutionResult:
        merged = {**(params or {}), **kwargs}
        bound = self.bind(merged)
        return execute_plan(self.select_plan(bound), bound)

    def __call__(
        self, params: Mapping[str, object] | None = None, /, **kwargs: object
    ) -> ExecutionResult:
        return self.invoke(params, **kwargs)


__all__ = ["CompiledOperation"]
