"""Tagged success/failure results and the error taxonomy.

Public operations never raise for store failures: they return ``Success``
or ``Failed`` so the first failure can be passed up the call chain as a
value.  Absence of data is ``Success(None)`` or ``Success([])``, never an
error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

logger = logging.getLogger("datasources.results")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class DataSourcesError(Exception):
    """Base class for every error surfaced by this package."""


class StoreUnavailable(DataSourcesError):
    """A health data store or provider call failed.

    Attributes:
        cause: The exception raised by the collaborator.
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause
        self.__cause__ = cause


class InvalidMetricForOperation(DataSourcesError, ValueError):
    """An operation was requested for a metric type it does not support."""


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.data


@dataclass(frozen=True)
class Failed:
    error: DataSourcesError

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


UseCaseResult = Union[Success[T], Failed]


def as_data_sources_error(exc: Exception) -> DataSourcesError:
    """Return ``exc`` unchanged if it is ours, else wrap it in StoreUnavailable."""
    if isinstance(exc, DataSourcesError):
        return exc
    return StoreUnavailable(exc)


def failure(operation: str, exc: Exception) -> Failed:
    """Build the ``Failed`` returned by ``operation`` when ``exc`` aborted it.

    Usage::

        try:
            value = await self._resolve(metric_type, now)
        except Exception as exc:
            return failure("resolve", exc)
        return Success(value)
    """
    if isinstance(exc, DataSourcesError):
        # Already logged where it was first converted
        logger.debug("%s failed: %s", operation, exc)
        return Failed(exc)
    error = StoreUnavailable(exc)
    logger.warning("%s failed: %s", operation, error)
    return Failed(error)
