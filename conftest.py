"""Pytest configuration and shared test utilities."""

import pytest
import numpy as np
import jax.numpy as jnp
from typing import Union

from ticketfee.units import UnitManager


# Currency amounts are float64; a hundredth of a kobo is well below any
# rounding the storefront shows
RTOL_DEFAULT = 1e-9
ATOL_DEFAULT = 1e-6


def assert_close(
    actual: Union[float, jnp.ndarray, np.ndarray],
    expected: Union[float, jnp.ndarray, np.ndarray],
    rtol: float = RTOL_DEFAULT,
    atol: float = ATOL_DEFAULT,
    msg: str = ""
):
    """Assert that two values are close within tolerance.

    Handles JAX arrays, NumPy arrays, and Python floats uniformly.

    Example:
        >>> fee = compute_line_item_fee(2000)
        >>> assert_close(fee.service_fee, 200.0)
    """
    actual_val = float(actual) if hasattr(actual, '__float__') else actual
    expected_val = float(expected) if hasattr(expected, '__float__') else expected

    assert actual_val == pytest.approx(expected_val, rel=rtol, abs=atol), (
        f"{msg}\nExpected: {expected_val}\nActual: {actual_val}\n"
        f"Diff: {abs(actual_val - expected_val)}"
    )


def assert_array_close(
    actual: Union[jnp.ndarray, np.ndarray],
    expected: Union[jnp.ndarray, np.ndarray],
    rtol: float = RTOL_DEFAULT,
    atol: float = ATOL_DEFAULT,
    msg: str = ""
):
    """Assert that two arrays are close within tolerance."""
    np.testing.assert_allclose(
        np.asarray(actual), np.asarray(expected),
        rtol=rtol, atol=atol,
        err_msg=msg
    )


@pytest.fixture
def close():
    """Fixture providing assert_close function.

    Usage:
        def test_something(close):
            close(actual, expected)
    """
    return assert_close


@pytest.fixture
def array_close():
    """Fixture providing assert_array_close function."""
    return assert_array_close


@pytest.fixture
def manager():
    """Shared UnitManager singleton."""
    return UnitManager.instance()


@pytest.fixture
def mixed_cart():
    """One standard-tier and one premium-tier line, as the storefront sends them."""
    return [
        {
            "cartId": "cart-1",
            "eventId": "evt-lagos-jazz",
            "eventTitle": "Lagos Jazz Night",
            "tierName": "Regular",
            "price": 200000,
            "quantity": 1,
        },
        {
            "cartId": "cart-2",
            "eventId": "evt-afrobeats",
            "eventTitle": "Afrobeats Live",
            "tierName": "VIP",
            "price": 1000000,
            "quantity": 2,
        },
    ]
