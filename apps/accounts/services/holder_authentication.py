"""
Holder authentication service.

Every holder signs in with a password plus one identifier:

    participant - email or registered phone number
    exhibitor   - email or company code (case-insensitive, e.g. EXH001)
    admin       - email
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import User

from .exceptions import InvalidCredentialsError, InactiveAccountError

logger = logging.getLogger(__name__)


def _normalize_phone(value: str) -> str:
    return ''.join(ch for ch in value if ch.isdigit() or ch == '+')


def resolve_login_user(identifier: str, *, for_update: bool = False) -> User:
    """
    Find the login behind an email, phone number or company code.

    Raises:
        InvalidCredentialsError: If nothing matches
    """
    identifier = (identifier or '').strip()
    if not identifier:
        raise InvalidCredentialsError("Invalid credentials")

    if '@' in identifier:
        lookup = Q(email__iexact=identifier)
    else:
        lookup = Q(exhibitor__company_code__iexact=identifier)
        phone = _normalize_phone(identifier)
        if phone:
            lookup |= Q(participant__phone_number__in={identifier, phone})

    qs = User.objects.filter(lookup)
    if for_update:
        qs = qs.select_for_update(of=('self',))

    users = list(qs[:2])
    if len(users) != 1:
        raise InvalidCredentialsError("Invalid credentials")
    return users[0]


@transaction.atomic
def authenticate_holder(*, identifier: str, password: str) -> User:
    """
    Authenticate a participant, exhibitor or admin.

    Uses select_for_update() so concurrent logins do not race on last_login.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If account is deactivated
    """
    user = resolve_login_user(identifier, for_update=True)

    if not user.check_password(password):
        logger.info("Failed login for %s", identifier)
        raise InvalidCredentialsError("Invalid credentials")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user
