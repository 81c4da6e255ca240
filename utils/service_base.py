"""
Shared service-layer foundation used by every app.

Services return a ServiceResult instead of raising for expected outcomes
(missing rows, permission problems, rule violations). Views map the error
code to an HTTP status through ``utils.api_errors``. Exceptions are reserved
for conditions the caller cannot handle.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a service operation.

    Attributes:
        ok: True if the operation succeeded
        value: Success payload (may be None for void operations)
        error: Error code from ErrorCodes (present if ok=False)
        error_detail: Human-readable message (present if ok=False)

    Examples:
        >>> result = service_ok(order)
        >>> if result.ok:
        ...     return Response(OrderSerializer(result.value).data, 200)

        >>> result = service_err(ErrorCodes.ORDER_NOT_FOUND, "Order 123 not found")
        >>> result.error
        'order_not_found'
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None


def service_ok(value: Optional[T] = None) -> ServiceResult[T]:
    """
    Create a successful ServiceResult.

    Example:
        >>> return service_ok(ranking)
    """
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "") -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code (e.g. ErrorCodes.ORDER_NOT_FOUND)
        error_detail: Human-readable message, defaults to the code

    Example:
        >>> return service_err(ErrorCodes.PRICE_MISMATCH, "Order price does not match current product price")
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error)


class BaseService:
    """
    Base class for services providing a class-scoped logger and timing.

    Usage:
        class OrderService(BaseService):
            def __init__(self, inventory_service):
                super().__init__()
                self.inventory_service = inventory_service

            @BaseService.log_performance
            def create_order(self, ...):
                self.logger.info("Creating order ...")
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator logging execution time and outcome of a service method.

        Failed ServiceResults are logged at WARNING with their error code;
        raised exceptions are logged with traceback and re-raised.
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


class ErrorCodes:
    """Standard error codes shared by all services."""

    # Generic
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    ALREADY_EXISTS = "already_exists"
    CONFLICT = "conflict"

    # Permission errors
    PERMISSION_DENIED = "permission_denied"

    # Product errors
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_INACTIVE = "product_inactive"
    INSUFFICIENT_STOCK = "insufficient_stock"
    INVALID_QUANTITY = "invalid_quantity"

    # Order errors
    ORDER_NOT_FOUND = "order_not_found"
    PRICE_MISMATCH = "price_mismatch"
    INVALID_ORDER_STATE = "invalid_order_state"
    INVALID_TRANSITION = "invalid_transition"

    # Ranking errors
    INVALID_RANKING_CATEGORY = "invalid_ranking_category"

    # Internal errors
    INTERNAL_ERROR = "internal_error"
