"""
Exceptions for the billing service.

Domain errors are plain Python exceptions raised by the storage layer.
BusinessError turns them into HTTP responses with safe messages:
generic text for clients, details in the log.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class DuplicateInvoiceNumberError(ValueError):
    """Raised when an invoice is saved under a number another invoice already holds."""

    def __init__(self, invoice_number: str):
        super().__init__(f"Invoice number {invoice_number} already exists")
        self.invoice_number = invoice_number


class InvoiceNotFoundError(LookupError):
    def __init__(self, invoice_id: int):
        super().__init__(f"Invoice {invoice_id} not found")
        self.invoice_id = invoice_id


class BusinessError:
    """Business-domain HTTP errors with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        Generic 404.

        Example:
            if not invoice:
                raise BusinessError.not_found("Invoice")
        """
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")

        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation errors.

        OK to include specific details here since the caller caused the issue.
        Examples: "Please enter Customer / Company Name", "Please add at least one item"
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        """
        409 for resource conflicts.
        Example: "Invoice number INV-004 already exists"
        """
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs actual error internally, hides from user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=True
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )
