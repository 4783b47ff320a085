"""Component-aware logging helpers.

``SmartLogger`` tags every record with its component plus whatever operation
context is active. ``log_operation`` opens such a context with a correlation
id; ``log_execution`` records start, completion and failure of a function or
coroutine.

Context is held in ``contextvars`` so concurrent requests served on one event
loop keep their own correlation ids.
"""

import functools
import inspect
import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Dict, Optional, Union

from .multi_file_logger import get_multi_file_logger

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
_operation_context: ContextVar[Dict[str, Any]] = ContextVar("operation_context", default={})

# Module path fragment -> log component, first match wins
MODULE_COMPONENTS = (
    ("orchestrator.server", "chat_api"),
    ("orchestrator.chat_service", "chat_api"),
    ("orchestrator.session_store", "chat_api"),
    ("orchestrator", "orchestrator"),
    ("agents.coordinator", "orchestrator"),
    ("agents.devops", "devops"),
    ("agents.servicenow", "servicenow"),
)


def component_for_module(module_name: str) -> str:
    for fragment, component in MODULE_COMPONENTS:
        if fragment in module_name:
            return component
    return "system"


class SmartLogger:
    """Logger bound to one component."""

    def __init__(self, component: Optional[str] = None):
        if component is None:
            caller = inspect.currentframe().f_back
            component = component_for_module(caller.f_globals.get("__name__", ""))
        self._component = component
        self._sink = get_multi_file_logger()

    @property
    def component(self) -> str:
        return self._component

    def _log(self, level: int, message: str, **fields):
        fields.setdefault("component", self._component)
        for key, value in _operation_context.get().items():
            fields.setdefault(key, value)
        correlation_id = _correlation_id.get()
        if correlation_id:
            fields["correlation_id"] = correlation_id
        self._sink.log(level, message, **fields)

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, **fields)


def _call_arguments(func: Callable, args: tuple, kwargs: dict) -> Dict[str, Any]:
    # Bound methods arrive with self first
    if args and hasattr(args[0], func.__name__):
        args = args[1:]
    logged = {}
    if args:
        logged["args"] = args
    if kwargs:
        logged["kwargs"] = kwargs
    return logged


def _result_fields(result: Any) -> Dict[str, Any]:
    text = str(result)
    if len(text) > 1000:
        return {"result_preview": text[:500] + "...", "result_size": len(text)}
    return {"result": result}


def log_execution(component_or_func: Union[Callable, str, None] = None, operation: Optional[str] = None,
                  include_args: bool = True, include_result: bool = True, log_errors: bool = True):
    """Log start, completion and failure of the decorated function.

    Usable bare (``@log_execution``) or with a component and operation name
    (``@log_execution("devops", "tool_execute")``). Coroutine functions are
    wrapped with a coroutine. Exceptions are logged and re-raised.
    """
    def decorate(func: Callable, component: Optional[str]) -> Callable:
        func_logger = SmartLogger(component or component_for_module(func.__module__))
        op_name = operation or func.__name__

        def started(args, kwargs):
            execution_id = uuid.uuid4().hex[:8]
            fields = _call_arguments(func, args, kwargs) if include_args else {}
            func_logger.info(f"function_start_{op_name}", operation=op_name,
                             execution_id=execution_id, **fields)
            return execution_id, time.time()

        def completed(execution_id, start, result):
            fields = _result_fields(result) if include_result else {}
            func_logger.info(f"function_complete_{op_name}", operation=op_name,
                             execution_id=execution_id, success=True,
                             duration_seconds=round(time.time() - start, 3), **fields)

        def failed(execution_id, start, error):
            if log_errors:
                func_logger.error(f"function_error_{op_name}", operation=op_name,
                                  execution_id=execution_id, success=False,
                                  duration_seconds=round(time.time() - start, 3),
                                  error=str(error), error_type=type(error).__name__)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                execution_id, start = started(args, kwargs)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    failed(execution_id, start, e)
                    raise
                completed(execution_id, start, result)
                return result
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            execution_id, start = started(args, kwargs)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                failed(execution_id, start, e)
                raise
            completed(execution_id, start, result)
            return result
        return wrapper

    if callable(component_or_func):
        return decorate(component_or_func, None)
    return lambda func: decorate(func, component_or_func)


@contextmanager
def log_operation(component: str, operation: str, correlation_id: Optional[str] = None, **context):
    """Scope an operation: every record logged inside carries ``context``.

    Example:
        with log_operation("chat_api", "chat_request", session_id=session_id):
            result = await orchestrator.process(prompt, history)
    """
    op_logger = SmartLogger(component)
    id_token = _correlation_id.set(correlation_id or _correlation_id.get() or uuid.uuid4().hex[:8])
    context_token = _operation_context.set({**_operation_context.get(), "operation": operation, **context})

    op_logger.info(f"operation_start_{operation}")
    start = time.time()
    try:
        yield _correlation_id.get()
    except Exception as e:
        op_logger.error(f"operation_error_{operation}",
                        duration_seconds=round(time.time() - start, 3),
                        success=False,
                        error=str(e),
                        error_type=type(e).__name__)
        raise
    else:
        op_logger.info(f"operation_complete_{operation}",
                       duration_seconds=round(time.time() - start, 3),
                       success=True)
    finally:
        _operation_context.reset(context_token)
        _correlation_id.reset(id_token)
