"""
Circuit Breaker configuration for external service calls.

CLOSED passes calls through, OPEN fails them immediately after too many
consecutive failures, HALF_OPEN lets a trial call decide whether to close.

Client-side Stripe errors (bad request, declined card) say nothing about the
provider's health and are excluded from the failure count.
"""

import logging

import stripe
from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)


stripe_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name="stripe_circuit_breaker",
    exclude=[stripe.InvalidRequestError, stripe.CardError],
)


class StateChangeLogger(CircuitBreakerListener):
    """Logs breaker state changes for monitoring and alerting."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        logger.warning(
            "Circuit breaker state changed",
            extra={
                "breaker_name": self.name,
                "old_state": old_state.name if old_state else None,
                "new_state": new_state.name,
            },
        )


stripe_breaker.add_listener(StateChangeLogger("stripe"))


__all__ = [
    "stripe_breaker",
    "CircuitBreakerError",
]
