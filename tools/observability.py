"""Observability helpers for instrumenting store tool calls."""

from __future__ import annotations

import inspect
import logging
import time
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from pydantic import BaseModel, ValidationError

from beauty_app.logging_config import (
    ensure_correlation_id,
    get_logger,
    log_event,
    redact_for_log,
)

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _preview_kwargs(kwargs: dict, max_keys: int = 6) -> dict:
    preview: dict = {}
    for idx, (key, value) in enumerate(kwargs.items()):
        if idx >= max_keys:
            preview["truncated"] = True
            break
        preview[key] = value.model_dump() if isinstance(value, BaseModel) else value
    return redact_for_log(preview)


def instrument_tool(
    tool_name: str,
    input_model: type[BaseModel] | None = None,
    input_arg: str = "payload",
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a tool to emit structured logs and validate its payload.

    When ``input_model`` is given, the argument named ``input_arg`` is
    validated into that model before the tool runs; a
    :class:`pydantic.ValidationError` is logged and re-raised.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        signature = inspect.signature(func)

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()

            bound = signature.bind(*args, **kwargs)
            arguments = bound.arguments
            if input_model and input_arg in arguments:
                raw = arguments[input_arg]
                try:
                    arguments[input_arg] = raw if isinstance(raw, input_model) else input_model.model_validate(raw)
                except ValidationError as exc:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "tool_validation_failed",
                        tool=tool_name,
                        correlation_id=correlation_id,
                        errors=exc.errors(include_url=False, include_context=False),
                    )
                    raise

            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_started",
                tool=tool_name,
                correlation_id=correlation_id,
                kwargs=_preview_kwargs({k: v for k, v in arguments.items() if k != "self"}),
            )
            try:
                result = func(*bound.args, **bound.kwargs)
            except Exception:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "tool_call_failed",
                    tool=tool_name,
                    correlation_id=correlation_id,
                    duration_ms=duration_ms,
                    exc_info=True,
                )
                raise
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_completed",
                tool=tool_name,
                correlation_id=correlation_id,
                duration_ms=duration_ms,
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_tool"]
