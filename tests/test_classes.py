import pytest

from atlas96 import ContractViolation, RingResult
from atlas96.classes import (
    NUM_CLASSES,
    UNITS_96,
    add96,
    apply_mirror,
    apply_rotation,
    apply_triality,
    apply_twist,
    decode,
    encode,
    factor96,
    gcd96,
    is_unit96,
    lcm96,
    max96,
    min96,
    mul96,
    product96,
    sub96,
    sum96,
)

THIRD_OPERANDS = (*range(0, NUM_CLASSES, 4), 1, 3, 35, 47, 95)


def test_decode_splits_class_into_coordinates() -> None:
    assert decode(21) == (0, 2, 5)
    assert decode(21).h2 == 0
    assert decode(21).d == 2
    assert decode(21).l == 5
    assert decode(95) == (3, 2, 7)


def test_encode_and_decode_are_inverse() -> None:
    for index in range(96):
        assert encode(*decode(index)) == index
    for h2 in range(4):
        for d in range(3):
            for ctx in range(8):
                assert decode(encode(h2, d, ctx)) == (h2, d, ctx)


@pytest.mark.parametrize("index", [-1, 96, 1000, True, 2.0, "3"])
def test_decode_rejects_invalid_index(index: object) -> None:
    with pytest.raises(ContractViolation) as error:
        decode(index)  # type: ignore[arg-type]
    assert error.value.code == "class_index_out_of_range"
    assert error.value.channel == "contract_violation"


@pytest.mark.parametrize("coords", [(4, 0, 0), (0, 3, 0), (0, 0, 8), (-1, 0, 0)])
def test_encode_rejects_out_of_range_coordinates(coords: tuple[int, int, int]) -> None:
    with pytest.raises(ContractViolation):
        encode(*coords)


def test_generator_concrete_values() -> None:
    assert apply_rotation(21) == 45
    assert apply_triality(0) == 8
    assert apply_mirror(8) == 16
    assert apply_mirror(16) == 8
    assert apply_mirror(3) == 3
    assert apply_twist(7) == 0
    assert apply_twist(0, -1) == 7
    assert apply_rotation(72, 1) == 0


def test_generator_orders() -> None:
    for index in range(96):
        assert apply_rotation(index, 4) == index
        assert apply_triality(index, 3) == index
        assert apply_twist(index, 8) == index
        assert apply_mirror(apply_mirror(index)) == index


def test_generators_commute_pairwise() -> None:
    for index in range(96):
        assert apply_rotation(apply_triality(index)) == apply_triality(
            apply_rotation(index)
        )
        assert apply_rotation(apply_twist(index)) == apply_twist(apply_rotation(index))
        assert apply_triality(apply_twist(index)) == apply_twist(apply_triality(index))


def test_mirror_inverts_triality() -> None:
    for index in range(96):
        assert apply_mirror(apply_triality(apply_mirror(index))) == apply_triality(
            index, 2
        )


def test_ring_ops_drop_overflow_by_default() -> None:
    assert add96(95, 1) == 0
    assert sub96(0, 1) == 95
    assert mul96(12, 8) == 0
    assert add96(40, 2) == 42


def test_ring_ops_report_overflow_only_when_tracked() -> None:
    assert add96(95, 1, overflow="track") == RingResult(value=0, overflow=True)
    assert add96(40, 2, overflow="track") == RingResult(value=42, overflow=False)
    assert sub96(0, 1, overflow="track") == RingResult(value=95, overflow=True)
    assert sub96(5, 3, overflow="track") == RingResult(value=2, overflow=False)
    assert mul96(12, 8, overflow="track") == RingResult(value=0, overflow=True)
    assert mul96(9, 10, overflow="track") == RingResult(value=90, overflow=False)


def test_ring_ops_reject_unknown_overflow_mode() -> None:
    with pytest.raises(ValueError):
        add96(1, 2, overflow="wrap")  # type: ignore[arg-type]


def test_ring_identities_and_commutativity_on_every_class() -> None:
    for a in range(NUM_CLASSES):
        assert add96(a, 0) == a
        assert mul96(a, 1) == a
        for b in range(NUM_CLASSES):
            assert add96(a, b) == add96(b, a)
            assert mul96(a, b) == mul96(b, a)


@pytest.mark.parametrize("c", THIRD_OPERANDS)
def test_ring_associativity_over_every_pair(c: int) -> None:
    for a in range(NUM_CLASSES):
        for b in range(NUM_CLASSES):
            assert add96(add96(a, b), c) == add96(a, add96(b, c))
            assert mul96(mul96(a, b), c) == mul96(a, mul96(b, c))


def test_gcd_and_lcm() -> None:
    assert gcd96(12, 18) == 6
    assert gcd96(0, 0) == 0
    assert gcd96(0, 7) == 7
    assert lcm96(4, 6) == 12
    assert lcm96(0, 5) == 0
    assert lcm96(32, 48) == 0


def test_reductions_wrap_mod_96() -> None:
    assert sum96([50, 50]) == 4
    assert sum96([]) == 0
    assert product96([]) == 1
    assert product96([5, 7]) == 35
    assert product96([10, 10]) == 4
    assert max96([3, 90, 12]) == 90
    assert min96([3, 1, 12]) == 1
    assert max96([]) == 0
    assert min96([]) == 0


def test_reduction_rejects_out_of_range_item() -> None:
    with pytest.raises(ContractViolation):
        sum96([1, 96])


def test_units_are_exactly_the_residues_coprime_to_96() -> None:
    assert UNITS_96 == (
        1, 5, 7, 11, 13, 17, 19, 23, 25, 29, 31, 35, 37, 41, 43, 47,
        49, 53, 55, 59, 61, 65, 67, 71, 73, 77, 79, 83, 85, 89, 91, 95,
    )  # fmt: skip
    assert sum(is_unit96(n) for n in range(96)) == 32
    assert not is_unit96(2)
    assert is_unit96(5)
    assert not is_unit96(0)


def test_factor96_examples() -> None:
    assert factor96(35) == (5, 7)
    assert product96(factor96(35)) == 35
    assert factor96(0) == (0,)
    assert factor96(1) == (1,)
    assert factor96(25) == (5, 5)
    assert factor96(95) == (5, 19)


def test_factor96_round_trips_every_unit() -> None:
    for unit in UNITS_96:
        assert product96(factor96(unit)) == unit


def test_factor96_is_lossy_on_non_units() -> None:
    assert factor96(2) == (2,)
    assert factor96(10) == (5,)
    assert product96(factor96(10)) != 10
