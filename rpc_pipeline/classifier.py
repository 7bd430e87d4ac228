"""Request outcomes and the error classifier.

Every request ends with exactly one :class:`Success` or :class:`Failure`. A
failure always wraps a :class:`ClassifiedError` whose code belongs to
:class:`~rpc_pipeline.exceptions.JsonRpcErrorCode`; raised exceptions are
turned into one by :func:`classify_exception`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from rpc_pipeline.exceptions import RPC_ERRORS, JsonRpcError, JsonRpcErrorCode

logger = logging.getLogger("rpc_pipeline")


@dataclass(frozen=True)
class ClassifiedError:
    """A failure normalized to the protocol error taxonomy.

    Attributes
    ----------
    kind : JsonRpcErrorCode
        Error kind; its value is the protocol error code.
    message : str
        Message sent to the client.
    cause : BaseException | None
        The exception the error was classified from, kept for diagnostics
        only. It is never serialized.
    """

    kind: JsonRpcErrorCode
    message: str
    cause: BaseException | None = None

    @property
    def code(self) -> int:
        return int(self.kind)

    def as_dict(self) -> dict[str, int | str]:
        """Return the protocol error object (``code`` and ``message`` only)."""
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class Success:
    """Successful outcome holding the method's return value."""

    value: Any = None


@dataclass(frozen=True)
class Failure:
    """Failed outcome holding a classified error."""

    error: ClassifiedError


Outcome = Success | Failure


def classify_exception(
    exception: BaseException,
    *,
    sanitize: bool = True,
    method_name: str | None = None,
) -> ClassifiedError:
    """Map an exception onto the error taxonomy.

    Parameters
    ----------
    exception : BaseException
        The failure raised by a pipeline stage, hook or RPC method.
    sanitize : bool, optional
        Hide the message of unclassified failures from the client, by
        default True.
    method_name : str | None, optional
        Method being processed, for log context.

    Returns
    -------
    ClassifiedError
        The classified error.
    """
    if isinstance(exception, JsonRpcError):
        try:
            kind = JsonRpcErrorCode(exception.code)
        except ValueError:
            logger.warning(
                "Unknown JSON-RPC error code %s coerced to INTERNAL_ERROR",
                exception.code,
            )
            kind = JsonRpcErrorCode.INTERNAL_ERROR
        return ClassifiedError(kind=kind, message=exception.message, cause=exception)

    # Unexpected errors - these indicate bugs
    if sanitize:
        # Production: log without stack trace to avoid information disclosure
        logger.error(
            "Unexpected error processing RPC call '%s': %s",
            method_name,
            f"{type(exception).__name__}: {str(exception)[:200]}",
        )
        message = RPC_ERRORS[JsonRpcErrorCode.INTERNAL_ERROR]
    else:
        logger.error(
            "Unexpected error processing RPC call '%s'",
            method_name,
            exc_info=exception,
        )
        message = str(exception) or type(exception).__name__

    return ClassifiedError(
        kind=JsonRpcErrorCode.INTERNAL_ERROR, message=message, cause=exception
    )
