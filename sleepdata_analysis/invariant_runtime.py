"""
Error taxonomy and fail-closed invariant checks for a single analysis run.

Every failure is fatal: configuration errors, mismatched input resources,
broken initial values and sampler failures all abort the run before any
artifact is written. A per-run context records which invariants passed or
failed so the log carries the run id and seed alongside each check.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


class SleepAnalysisError(RuntimeError):
    """Base class for fatal run errors."""


class ConfigurationError(SleepAnalysisError):
    """Raised when iterations, burn-in or variables are not acceptable."""

    def __init__(self, check_id: str, message: str):
        self.check_id = check_id
        super().__init__(f"[ConfigurationError:{check_id}] {message}")


class DataShapeError(SleepAnalysisError):
    """Raised when an input resource does not match the requested variables."""


class InvariantViolationError(SleepAnalysisError):
    """Raised when constructed initial values fail a required property."""

    def __init__(self, invariant_id: str, message: str, data: Optional[Dict[str, Any]] = None):
        self.invariant_id = invariant_id
        self.data = data or {}
        super().__init__(f"[InvariantViolation:{invariant_id}] {message} | data={self.data}")


class SamplerError(SleepAnalysisError):
    """Raised when the external mHMM sampler fails."""


@dataclass
class InvariantRecord:
    invariant_id: str
    status: str  # "pass" or "fail"
    tolerance: Optional[float] = None
    detail: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InvariantContext:
    """Holds the invariant log of one run."""

    unique_id: Optional[str]
    run_seed: Optional[int]
    variables: Tuple[str, ...] = ()
    model_shape: Dict[str, int] = field(default_factory=dict)
    invariant_log: list = field(default_factory=list)

    def record_invariant(self, rec: InvariantRecord) -> None:
        self.invariant_log.append(rec)

    def failures(self) -> list:
        return [rec for rec in self.invariant_log if rec.status == "fail"]


_ctx: ContextVar[Optional[InvariantContext]] = ContextVar("invariant_ctx", default=None)


def set_invariant_context(ctx: Optional[InvariantContext]):
    return _ctx.set(ctx)


def reset_invariant_context(token) -> None:
    _ctx.reset(token)


def current_context() -> Optional[InvariantContext]:
    return _ctx.get()


def _build_data(extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    ctx = current_context()
    data = dict(extra or {})
    if ctx:
        data.setdefault("unique_id", ctx.unique_id)
        data.setdefault("run_seed", ctx.run_seed)
        data.setdefault("variables", list(ctx.variables))
        data.setdefault("model_shape", dict(ctx.model_shape))
    return data


def require_invariant(
    condition: bool,
    invariant_id: str,
    message: str,
    tolerance: Optional[float] = None,
    data: Optional[Dict[str, Any]] = None,
) -> None:
    """Assert an invariant, record status, and fail-closed on violation."""

    ctx = current_context()
    payload = _build_data(data)
    status = "pass" if condition else "fail"
    if ctx:
        ctx.record_invariant(
            InvariantRecord(
                invariant_id=invariant_id,
                status=status,
                tolerance=tolerance,
                detail=message,
                data=payload,
            )
        )
    if not condition:
        raise InvariantViolationError(invariant_id, message, data=payload)
