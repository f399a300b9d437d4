"""Outcome metrics for record store operations."""

import time
from functools import wraps
from typing import Optional

from chartbroker.domain.base.exceptions import RecordAlreadyExistsError, RecordNotFoundError

OUTCOME_OK = "ok"
OUTCOME_ERROR = "errors"

# Misses the lifecycle manager translates into Gone/Conflict; not store failures.
EXPECTED_OUTCOMES = (
    (RecordNotFoundError, "not_found"),
    (RecordAlreadyExistsError, "conflict"),
)


def record_outcome(error: Optional[BaseException]) -> str:
    if error is None:
        return OUTCOME_OK
    for kind, outcome in EXPECTED_OUTCOMES:
        if isinstance(error, kind):
            return outcome
    return OUTCOME_ERROR


def instrument_record_store(op_name: str):
    """Count and time a record store method by outcome.

    The decorated store exposes ``metrics`` (a collector or ``None``) and
    ``metrics_prefix`` naming its backend, e.g. ``storage.configmap``.
    Each call emits ``<prefix>.<op>_<outcome>_total`` where outcome is one of
    ``ok``, ``not_found``, ``conflict`` or ``errors``, and observes
    ``<prefix>.<op>_duration``.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            metrics = self.metrics
            if metrics is None:
                return func(self, *args, **kwargs)
            name = f"{self.metrics_prefix}.{op_name}"
            start = time.monotonic()
            error: Optional[BaseException] = None
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                error = e
                raise
            finally:
                metrics.increment_counter(f"{name}_{record_outcome(error)}_total")
                metrics.record_time(f"{name}_duration", time.monotonic() - start)

        return wrapper

    return decorator
