"""FastAPI dependencies for the interactions API.

Provides dependency injection for:
- Interaction service
- Error mapping from domain errors to HTTP responses
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .exceptions import InteractionError
from .service import InteractionService


async def get_interaction_service(request: Request) -> InteractionService:
    """Get interaction service from app state."""
    app_state = request.app.state
    service = getattr(app_state, "interaction_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Interaction service not available",
        )
    return service


InteractionServiceDep = Annotated[
    InteractionService, Depends(get_interaction_service)
]


def handle_interaction_error(error: InteractionError) -> HTTPException:
    """Convert interaction errors to HTTP exceptions."""
    status_map = {
        "invalid_input": status.HTTP_400_BAD_REQUEST,
        "invalid_reply": status.HTTP_400_BAD_REQUEST,
        "unauthorized": status.HTTP_401_UNAUTHORIZED,
        "forbidden": status.HTTP_403_FORBIDDEN,
        "not_found": status.HTTP_404_NOT_FOUND,
        "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if status_code == status.HTTP_401_UNAUTHORIZED
        else None
    )

    return HTTPException(
        status_code=status_code,
        detail=error.message,
        headers=headers,
    )
