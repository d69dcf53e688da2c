"""
Exhibitor company management.

A company is created together with the login its staff sign in with
(email or company code). Deleting a company removes that login, its
employees and every allocation claim it made.
"""

import logging
from typing import Optional

from django.db import transaction, IntegrityError
from django.db.models import Q, QuerySet

from apps.accounts.models import User, UserRole
from apps.exhibitors.models import ExhibitorCompany

from .exceptions import DuplicateExhibitorError

logger = logging.getLogger(__name__)


def search_companies(*, search: Optional[str] = None, plan: Optional[str] = None) -> QuerySet[ExhibitorCompany]:
    queryset = ExhibitorCompany.objects.select_related('user')

    if search:
        search = search.strip()
        queryset = queryset.filter(
            Q(company_code__icontains=search) |
            Q(company_name__icontains=search) |
            Q(phone_number__icontains=search)
        )
    if plan:
        queryset = queryset.filter(plan=plan)
    return queryset


@transaction.atomic
def create_exhibitor(
    *,
    email: str,
    company_code: str,
    company_name: str,
    plan: str,
    phone_number: str = '',
    password: Optional[str] = None
) -> ExhibitorCompany:
    """
    Register an exhibitor company and its login.

    Company codes are stored upper-case (``exh004`` becomes ``EXH004``).

    Raises:
        DuplicateExhibitorError: If the email or company code is taken
    """
    company_code = company_code.strip().upper()

    if ExhibitorCompany.objects.filter(company_code__iexact=company_code).exists():
        raise DuplicateExhibitorError(f"Company code {company_code} is already registered")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=company_name,
            role=UserRole.EXHIBITOR,
        )
        company = ExhibitorCompany.objects.create(
            user=user,
            company_code=company_code,
            company_name=company_name.strip(),
            phone_number=phone_number.strip(),
            plan=plan,
        )
    except IntegrityError:
        raise DuplicateExhibitorError(
            f"An exhibitor with email {email} or code {company_code} already exists"
        )

    logger.info("Created exhibitor %s (%s plan)", company.company_code, plan)
    return company


@transaction.atomic
def update_exhibitor(
    *,
    company: ExhibitorCompany,
    company_name: Optional[str] = None,
    phone_number: Optional[str] = None,
    plan: Optional[str] = None
) -> ExhibitorCompany:
    """
    Change company details.

    A plan change applies to slots not yet claimed; existing claims stand.
    """
    company = ExhibitorCompany.objects.select_for_update().get(pk=company.pk)

    if company_name is not None:
        company.company_name = company_name.strip()
        company.user.display_name = company.company_name
        company.user.save(update_fields=['display_name'])
    if phone_number is not None:
        company.phone_number = phone_number.strip()
    if plan is not None:
        company.plan = plan

    company.save()
    return company


@transaction.atomic
def delete_exhibitor(*, company: ExhibitorCompany) -> int:
    """
    Remove a company with its login, employees and claims.

    Returns:
        Number of allocation claims deleted with it
    """
    claims = company.claims.count()
    code = company.company_code
    company.user.delete()

    logger.warning("Deleted exhibitor %s and %d allocation claims", code, claims)
    return claims
