"""
Domain exceptions and their conversion into user-facing notifications.

Services raise the domain errors below. The API layer never lets them
escape: every one is turned into a notification body the dashboard shows
as a toast ({"title", "description", "variant"}), and the surrounding
view keeps its previous state.

Internal details (SQL errors, raw LLM output) are logged, never returned.
"""
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class BizOpsError(Exception):
    """Base class for every error the services raise on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    title = "Something went wrong"

    def __init__(self, description: str = ""):
        super().__init__(description or self.title)
        self.description = description or self.title


class StoreUnavailable(BizOpsError):
    """Network/permission failure on any Entity Store call."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    title = "Store Unavailable"


class DocumentNotFound(BizOpsError):
    """Referenced document (or item slot inside it) is absent at read time."""

    status_code = status.HTTP_404_NOT_FOUND
    title = "Not Found"

    def __init__(self, collection: str, doc_id: str, description: str = ""):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(description or f"{collection}/{doc_id} does not exist")


class VersionConflict(BizOpsError):
    """Compare-and-set write lost against a concurrent writer."""

    status_code = status.HTTP_409_CONFLICT
    title = "Update Conflict"

    def __init__(self, collection: str, doc_id: str, expected_version: int):
        self.collection = collection
        self.doc_id = doc_id
        self.expected_version = expected_version
        super().__init__(
            f"{collection}/{doc_id} changed since version {expected_version}"
        )


class ValidationFailed(BizOpsError):
    """Input rejected before any store call is issued."""

    status_code = 422
    title = "Invalid Input"


class AdvisorError(BizOpsError):
    """External reasoning service returned nothing usable."""

    status_code = status.HTTP_502_BAD_GATEWAY
    title = "Assistant Unavailable"


class InvalidResponseShape(AdvisorError):
    title = "Assignment Failed"


class ExtractionFailed(AdvisorError):
    title = "Extraction Failed"


def notification(title: str, description: str, variant: str = "destructive") -> dict:
    return {"title": title, "description": description, "variant": variant}


class BusinessError:
    """HTTP exceptions with safe (non-leaky) messages for route-local checks."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """404 with a generic message; the reason only goes to the log."""
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=notification("Not Found", f"{resource} not found"),
        )


async def _bizops_error_handler(request: Request, exc: BizOpsError) -> JSONResponse:
    if isinstance(exc, (StoreUnavailable, AdvisorError)):
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.description}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.description}")

    description = exc.description
    if isinstance(exc, StoreUnavailable):
        description = "The data store could not be reached. Please try again."
    elif isinstance(exc, InvalidResponseShape):
        description = "The AI could not suggest an assignment. Please try again."
    elif isinstance(exc, ExtractionFailed):
        description = "Could not extract data from the invoice. Please try a clearer image."

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": notification(exc.title, description)},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": notification(
                "Something went wrong",
                "An internal error occurred. Please try again later.",
            )
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BizOpsError, _bizops_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
