"""Tests for the equality predicates."""

import pytest

from dagflow._equality import equal, resolve_equality, same_value


class TestSameValue:
    @pytest.mark.parametrize(
        ("a", "b"),
        [
            (1, 1),
            (1.5, 1.5),
            ("text", "text"),
            (b"raw", b"raw"),
            (True, True),
            (None, None),
            (2 + 1j, 2 + 1j),
        ],
    )
    def test_equal_scalars(self, a: object, b: object) -> None:
        assert same_value(a, b)

    def test_same_object(self) -> None:
        items = [1, 2]
        assert same_value(items, items)

    def test_distinct_containers(self) -> None:
        assert not same_value([1, 2], [1, 2])
        assert not same_value({"a": 1}, {"a": 1})

    def test_different_types(self) -> None:
        assert not same_value(1, 1.0)
        assert not same_value(1, True)
        assert not same_value("1", 1)

    def test_nan_equals_nan(self) -> None:
        assert same_value(float("nan"), float("nan"))

    def test_signed_zero(self) -> None:
        assert same_value(0.0, 0.0)
        assert same_value(-0.0, -0.0)
        assert not same_value(0.0, -0.0)

    def test_different_values(self) -> None:
        assert not same_value(1, 2)
        assert not same_value("a", "b")


class TestEqual:
    def test_structural_comparison(self) -> None:
        assert equal([1, 2], [1, 2])
        assert equal({"a": (1, 2)}, {"a": (1, 2)})
        assert not equal([1, 2], [2, 1])

    def test_numeric_comparison(self) -> None:
        assert equal(1, 1.0)
        assert equal(0.0, -0.0)
        assert not equal(float("nan"), float("nan"))

    def test_ambiguous_comparison_falls_back_to_identity(self) -> None:
        class Ambiguous:
            def __eq__(self, other: object) -> bool:
                msg = "truth value is ambiguous"
                raise ValueError(msg)

            __hash__ = object.__hash__

        value = Ambiguous()
        assert equal(value, value)
        assert not equal(value, Ambiguous())


class TestResolveEquality:
    def test_known_names(self) -> None:
        assert resolve_equality("same_value") is same_value
        assert resolve_equality("equal") is equal

    def test_unknown_name(self) -> None:
        with pytest.raises(KeyError, match="deep"):
            resolve_equality("deep")
