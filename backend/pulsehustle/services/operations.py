"""
Operation Wrapper - uniform result envelope and audit trail

Domain services raise typed ``ServiceError`` subclasses. Callers that want
the flat ``{success, data | error}`` envelope (the HTTP layer, the service
facade) run the call through ``Operations.run`` or ``with_transaction``.

    - with_transaction(fn): envelope only, no side effects
    - Operations.run(fn): envelope + log + best-effort ``errors`` row
    - Operations.log(): best-effort ``audit_logs`` row

Audit and error writes are advisory: a failure to write them is logged and
swallowed, never propagated to the caller.

Note: the envelope itself provides no atomicity. Writes that need to commit
together must share one ``PersistenceGateway.transaction()``.
"""

import logging
import traceback
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel

from pulsehustle.errors import ServiceError
from pulsehustle.gateway import PersistenceGateway
from pulsehustle.middleware.metrics import record_operation_failure
from pulsehustle.models import AuditLog, ErrorRecord

logger = logging.getLogger(__name__)


class OperationResult(BaseModel):
    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "OperationResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, exc: BaseException) -> "OperationResult":
        if isinstance(exc, ServiceError):
            return cls(success=False, error=exc.message, error_kind=exc.kind)
        return cls(success=False, error=str(exc) or exc.__class__.__name__, error_kind="internal")


async def with_transaction(fn: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> OperationResult:
    """
    Execute ``fn`` and normalise the outcome into an ``OperationResult``.

    Writes that ``fn`` committed before failing are not undone.
    """
    try:
        return OperationResult.ok(await fn(*args, **kwargs))
    except Exception as exc:
        logger.error(f"Operation {getattr(fn, '__name__', fn)} failed: {exc}")
        return OperationResult.fail(exc)


class Operations:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def log(
        self,
        operation: str,
        table_name: str,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> bool:
        """Append an audit log entry. Returns False if it could not be written."""
        try:
            await self.gateway.insert(
                AuditLog,
                operation=operation,
                table_name=table_name,
                details=details or {},
                user_id=user_id,
            )
            return True
        except Exception as e:
            logger.warning(f"Failed to log operation {operation} on {table_name}: {e}")
            return False

    async def record_error(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        exc: Optional[BaseException] = None,
    ) -> bool:
        try:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)) if exc else None
            await self.gateway.insert(ErrorRecord, message=message, stack=stack, context=context or {})
            return True
        except Exception as e:
            logger.warning(f"Failed to record error '{message}': {e}")
            return False

    async def run(
        self,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        label: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
        **kwargs: Any,
    ) -> OperationResult:
        """
        Run a service call and return its envelope.

        On failure the error is logged and an ``errors`` row is written
        (best effort) as "<label> error: <message>".
        """
        label = label or getattr(fn, "__name__", "operation")
        try:
            data = await fn(*args, **kwargs)
        except ServiceError as exc:
            logger.warning(f"{label} failed ({exc.kind}): {exc.message}")
            record_operation_failure(exc.kind)
            await self.record_error(f"{label} error: {exc.message}", context, exc)
            return OperationResult.fail(exc)
        except Exception as exc:
            logger.exception(f"{label} failed unexpectedly")
            record_operation_failure("internal")
            await self.record_error(f"{label} error: {exc}", context, exc)
            return OperationResult.fail(exc)
        return OperationResult.ok(data, message=message)
