"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from .holder_authentication import resolve_login_user, authenticate_holder

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    # Services
    'resolve_login_user',
    'authenticate_holder',
]
