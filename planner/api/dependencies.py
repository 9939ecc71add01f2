"""Shared API dependencies"""
from fastapi import HTTPException, Request, status
from planner.errors import PlannerValidationError
from planner.services.planner_store import PlannerStore
from planner.utils.monitoring import StructuredLogger


def get_store(request: Request) -> PlannerStore:
    """The store instance owned by the running application"""
    return request.app.state.store


def validation_failed(error: PlannerValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(error),
    )


def not_found(kind: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{kind} not found",
    )


def internal_error(error: Exception, action: str) -> HTTPException:
    StructuredLogger.log_error(error, context={"action": action})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(error)}",
    )
