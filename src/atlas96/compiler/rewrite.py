"""Group-law normalization of expression trees.

Rules run bottom-up to a fixpoint:

* push: a transform over `seq`/`par` moves onto both branches;
* fold: adjacent same-generator transforms add their powers;
* mirror: `M . g^k . M` becomes `D^-k` for triality and `g^k` otherwise.

A final pass rewrites every leaf chain into `[M?] R^r D^d T^t`
(outermost first). Nothing folds across a `par` boundary or an atom.
"""

from collections.abc import Callable
from dataclasses import dataclass

from atlas96.generators import TransformKind, TransformOp
from atlas96.ir.model import ExprNode, Parallel, Sequential, Transform, transform


@dataclass(frozen=True, slots=True)
class RewriteRule:
    """One local rewrite; `apply` returns None when the rule does not match."""

    name: str
    apply: Callable[[Transform], ExprNode | None]


def _push_through_combinator(node: Transform) -> ExprNode | None:
    child = node.child
    if isinstance(child, Sequential | Parallel):
        return type(child)(
            Transform(node.op, child.left), Transform(node.op, child.right)
        )
    return None


def _fold_adjacent(node: Transform) -> ExprNode | None:
    child = node.child
    if not isinstance(child, Transform) or child.op.kind is not node.op.kind:
        return None
    return transform(node.op.compose(child.op), child.child)


def _mirror_conjugation(node: Transform) -> ExprNode | None:
    if node.op.kind is not TransformKind.MIRROR:
        return None
    middle = node.child
    if not isinstance(middle, Transform) or middle.op.kind is TransformKind.MIRROR:
        return None
    inner = middle.child
    if not isinstance(inner, Transform) or inner.op.kind is not TransformKind.MIRROR:
        return None
    if middle.op.kind is TransformKind.TRIALITY:
        return transform(middle.op.inverse(), inner.child)
    return transform(middle.op, inner.child)


REWRITE_RULES: tuple[RewriteRule, ...] = (
    RewriteRule("push_through_combinator", _push_through_combinator),
    RewriteRule("fold_adjacent", _fold_adjacent),
    RewriteRule("mirror_conjugation", _mirror_conjugation),
)


def _rewrite_once(node: ExprNode) -> tuple[ExprNode, bool]:
    """Rewrite children first, then try each rule at this node."""
    if isinstance(node, Sequential | Parallel):
        left, left_changed = _rewrite_once(node.left)
        right, right_changed = _rewrite_once(node.right)
        if left_changed or right_changed:
            return type(node)(left, right), True
        return node, False
    if not isinstance(node, Transform):
        return node, False

    child, changed = _rewrite_once(node.child)
    current = Transform(node.op, child) if changed else node
    for rule in REWRITE_RULES:
        rewritten = rule.apply(current)
        if rewritten is not None:
            return rewritten, True
    return current, changed


def apply_rewrite_rules(node: ExprNode, /) -> ExprNode:
    """Apply the local rules until none matches."""
    current = node
    changed = True
    while changed:
        current, changed = _rewrite_once(current)
    return current


def canonical_chain(ops: tuple[TransformOp, ...], /) -> tuple[TransformOp, ...]:
    """Canonical `[M?] R^r D^d T^t` form of an outermost-first transform chain.

    `R` and `T` commute with every generator; `D^k . M = M . D^-k`.
    """
    mirrored = False
    rotate = triality = twist = 0
    for op in reversed(ops):
        if op.kind is TransformKind.ROTATE:
            rotate += op.power
        elif op.kind is TransformKind.TWIST:
            twist += op.power
        elif op.kind is TransformKind.TRIALITY:
            triality += -op.power if mirrored else op.power
        elif op.power:
            mirrored = not mirrored
    canonical = (
        TransformOp(TransformKind.MIRROR, 1 if mirrored else 0),
        TransformOp(TransformKind.ROTATE, rotate),
        TransformOp(TransformKind.TRIALITY, triality),
        TransformOp(TransformKind.TWIST, twist),
    )
    return tuple(op for op in canonical if not op.is_identity)


def split_chain(node: ExprNode, /) -> tuple[tuple[TransformOp, ...], ExprNode]:
    """Peel nested transforms off `node`, outermost first."""
    ops: list[TransformOp] = []
    current = node
    while isinstance(current, Transform):
        ops.append(current.op)
        current = current.child
    return tuple(ops), current


def wrap_chain(ops: tuple[TransformOp, ...], node: ExprNode, /) -> ExprNode:
    wrapped = node
    for op in reversed(ops):
        wrapped = transform(op, wrapped)
    return wrapped


def canonicalize_chains(node: ExprNode, /) -> ExprNode:
    """Rewrite every transform chain into canonical order."""
    if isinstance(node, Sequential | Parallel):
        return type(node)(
            canonicalize_chains(node.left), canonicalize_chains(node.right)
        )
    if not isinstance(node, Transform):
        return node
    ops, inner = split_chain(node)
    return wrap_chain(canonical_chain(ops), canonicalize_chains(inner))


def normalize(node: ExprNode, /) -> ExprNode:
    """Push, fold, and cancel transforms, then canonicalize leaf chains."""
    return canonicalize_chains(apply_rewrite_rules(node))


def extract_chains(
    node: ExprNode, /
) -> tuple[tuple[tuple[TransformOp, ...], ExprNode], ...]:
    """`(transforms, leaf)` pairs of a normalized tree, in evaluation order."""
    if isinstance(node, Sequential | Parallel):
        return extract_chains(node.left) + extract_chains(node.right)
    ops, inner = split_chain(node)
    if isinstance(inner, Sequential | Parallel):
        return tuple(
            (ops + inner_ops, leaf) for inner_ops, leaf in extract_chains(inner)
        )
    return ((ops, inner),)


__all__ = [
    "REWRITE_RULES",
    "RewriteRule",
    "apply_rewrite_rules",
    "canonical_chain",
    "canonicalize_chains",
    "extract_chains",
    "normalize",
    "split_chain",
    "wrap_chain",
]
