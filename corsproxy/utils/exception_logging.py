"""
Utility functions for exception logging on the proxy's failure paths.

These helpers never raise: a broken exception object or a failing logger
must not turn a well-formed error response into a crash.
"""

import logging


def _safe_str(obj) -> str:
    """
    Safely convert an object to string, handling cases where __str__ or __repr__ might fail.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def _sub_exceptions(exception) -> list:
    try:
        return list(getattr(exception, "exceptions", None) or [])
    except Exception:
        return []


def format_exception_message(exception: Exception) -> str:
    """
    Describe an exception as ``Type: message``, including sub-exceptions of
    exception groups. Transport errors from httpx often carry an empty
    message, in which case the type name alone is returned.

    Args:
        exception: The exception to format

    Returns:
        A formatted string describing the exception
    """
    if exception is None:
        return "None"
    try:
        text = _safe_str(exception)
        main = f"{type(exception).__name__}: {text}" if text else type(exception).__name__

        subs = _sub_exceptions(exception)
        if subs:
            joined = "; ".join(format_exception_message(sub) for sub in subs)
            return f"{main} (Sub-exceptions: {joined})"
        return main
    except Exception:
        return f"<{type(exception).__name__} (formatting failed)>"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its traceback, and each sub-exception separately
    for exception groups.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Proxy]", "[Redirect]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    try:
        safe_prefix = _safe_str(prefix) if prefix is not None else ""
        subs = _sub_exceptions(exception)
        if subs:
            logger.log(
                level,
                f"{safe_prefix} Exception with {len(subs)} sub-exceptions: {_safe_str(exception)}",
            )
            for i, sub_exc in enumerate(subs):
                logger.log(
                    level,
                    f"{safe_prefix} Sub-exception {i+1}: {format_exception_message(sub_exc)}",
                    exc_info=sub_exc,
                )
        else:
            logger.log(
                level,
                f"{safe_prefix} Exception: {format_exception_message(exception)}",
                exc_info=exception if exception is not None else False,
            )
    except Exception:
        try:
            logger.log(logging.ERROR, "Exception logging failed")
        except Exception:
            # If even this fails, give up completely (don't propagate the exception)
            pass
