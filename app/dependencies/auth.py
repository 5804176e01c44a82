"""Authentication dependencies for route handlers"""

from fastapi import HTTPException, Request, status

from app.models.user import User


def get_current_user(request: Request) -> User:
    """
    Get the user set by FirebaseAuthMiddleware.

    Raises:
        HTTPException: 401 if the request carries no verified user
    """
    user = getattr(request.state, "current_user", None)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
