"""Payment verification polling.

After the customer returns from the payment gateway the storefront asks
the backend whether the transaction with a given reference has settled.
A ``pending`` answer is retried with capped exponential backoff a few
times before giving up. The transition logic is a pure function; the
polling loop takes the HTTP call and the sleep as arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple
import time

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .fields import quantity_field
from .units import UnitSpec

__all__ = [
    'VerificationStatus',
    'VerificationConfig',
    'VerificationState',
    'GatewayHTTPError',
    'backoff_delay',
    'advance_verification',
    'verify_payment',
]


class VerificationStatus(str, Enum):
    VERIFYING = "verifying"
    SUCCESS = "success"
    PENDING = "pending"
    PENDING_TIMEOUT = "pending_timeout"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({
    VerificationStatus.SUCCESS,
    VerificationStatus.PENDING_TIMEOUT,
    VerificationStatus.FAILED,
    VerificationStatus.NOT_FOUND,
    VerificationStatus.ERROR,
})


class GatewayHTTPError(Exception):
    """Raised by a verification fetch when the backend answers with an HTTP error."""

    def __init__(self, status_code: int, message: str = ""):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


class VerificationConfig(BaseModel):
    """Retry policy for pending payments.

    Example:
        >>> config = VerificationConfig(base_delay="3 s", max_delay="10 s")
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, validate_default=True)

    max_retries: int = Field(default=3, ge=0)
    base_delay: Tuple[float, UnitSpec] = Field(default="3 s")
    backoff_factor: float = Field(default=1.5, ge=1.0)
    max_delay: Tuple[float, UnitSpec] = Field(default="10 s")

    _validate_base_delay = field_validator("base_delay", mode="before")(
        quantity_field("time", "second", min_value=0.0)
    )
    _validate_max_delay = field_validator("max_delay", mode="before")(
        quantity_field("time", "second", min_value=0.0)
    )


DEFAULT_VERIFICATION = VerificationConfig()


@dataclass(frozen=True)
class VerificationState:
    """Where a verification currently stands.

    Attributes:
        status: Latest status
        retry_count: Pending answers already retried
        payment_data: Backend payload once the payment succeeded
        next_delay: Seconds to wait before the next attempt, if any
    """
    status: VerificationStatus = VerificationStatus.VERIFYING
    retry_count: int = 0
    payment_data: Optional[Any] = None
    next_delay: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


def backoff_delay(retry_count: int, config: VerificationConfig = DEFAULT_VERIFICATION) -> float:
    """Seconds to wait before retry number ``retry_count`` (0-based)."""
    delay = config.base_delay[0] * config.backoff_factor ** retry_count
    return min(delay, config.max_delay[0])


def advance_verification(
    state: VerificationState,
    response: Optional[Mapping[str, Any]] = None,
    http_status: Optional[int] = None,
    config: VerificationConfig = DEFAULT_VERIFICATION,
) -> VerificationState:
    """Next state after one verification attempt.

    Args:
        state: State before the attempt
        response: Decoded backend body (``{"status": ..., "data": ...}``),
            or None if the request failed
        http_status: HTTP status of a failed request
        config: Retry policy

    Returns:
        New VerificationState; terminal states are returned unchanged
    """
    if state.is_terminal:
        return state

    if response is None:
        if http_status == 404:
            status = VerificationStatus.NOT_FOUND
        elif http_status == 400:
            status = VerificationStatus.FAILED
        else:
            status = VerificationStatus.ERROR
        return replace(state, status=status, next_delay=None)

    outcome = response.get("status")
    if outcome == "success" and response.get("data"):
        return replace(
            state,
            status=VerificationStatus.SUCCESS,
            payment_data=response["data"],
            next_delay=None,
        )

    if outcome == "pending":
        if state.retry_count < config.max_retries:
            return replace(
                state,
                status=VerificationStatus.PENDING,
                retry_count=state.retry_count + 1,
                next_delay=backoff_delay(state.retry_count, config),
            )
        return replace(state, status=VerificationStatus.PENDING_TIMEOUT, next_delay=None)

    return replace(state, status=VerificationStatus.FAILED, next_delay=None)


def verify_payment(
    reference: str,
    fetch: Callable[[str], Mapping[str, Any]],
    sleep: Callable[[float], None] = time.sleep,
    config: VerificationConfig = DEFAULT_VERIFICATION,
) -> VerificationState:
    """Poll until the payment with ``reference`` reaches a terminal status.

    Args:
        reference: Gateway transaction reference
        fetch: Calls the verification endpoint and returns the decoded body;
            raises GatewayHTTPError for HTTP error answers. Any other
            exception ends the verification with status ERROR
        sleep: Called with the backoff delay between attempts
        config: Retry policy

    Returns:
        Terminal VerificationState
    """
    state = VerificationState()
    while not state.is_terminal:
        try:
            body = fetch(reference)
        except GatewayHTTPError as e:
            state = advance_verification(state, http_status=e.status_code, config=config)
        except Exception:
            # No answer from the backend at all (network failure, timeout)
            logger.opt(exception=True).bind(reference=reference).warning(
                "Payment verification request failed"
            )
            state = advance_verification(state, config=config)
        else:
            state = advance_verification(state, response=body, config=config)

        logger.bind(reference=reference, retry=state.retry_count).debug(
            "Payment verification status: {}", state.status.value
        )

        if state.next_delay is not None:
            sleep(state.next_delay)

    return state
