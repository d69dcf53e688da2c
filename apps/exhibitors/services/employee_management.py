"""
Exhibitor employee management.

Employees are never deleted; removal deactivates them so past claims
keep their collector.
"""

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from apps.exhibitors.models import ExhibitorCompany, ExhibitorEmployee

from .exceptions import EmployeeNotFoundError

logger = logging.getLogger(__name__)


def get_active_employees(*, company: ExhibitorCompany) -> QuerySet:
    return company.employees.filter(is_active=True)


def get_employee(*, company: ExhibitorCompany, employee_id: UUID) -> ExhibitorEmployee:
    """
    Raises:
        EmployeeNotFoundError: If the employee is not part of the company
    """
    try:
        return company.employees.get(id=employee_id)
    except (ExhibitorEmployee.DoesNotExist, ValidationError):
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")


def add_employee(
    *,
    company: ExhibitorCompany,
    employee_name: str,
    employee_phone: str = ''
) -> ExhibitorEmployee:
    employee = ExhibitorEmployee.objects.create(
        company=company,
        employee_name=employee_name.strip(),
        employee_phone=employee_phone.strip(),
    )
    logger.info("Added employee %s to %s", employee.pk, company.company_code)
    return employee


def update_employee(
    *,
    company: ExhibitorCompany,
    employee_id: UUID,
    employee_name: Optional[str] = None,
    employee_phone: Optional[str] = None
) -> ExhibitorEmployee:
    employee = get_employee(company=company, employee_id=employee_id)

    if employee_name is not None:
        employee.employee_name = employee_name.strip()
    if employee_phone is not None:
        employee.employee_phone = employee_phone.strip()

    employee.save()
    return employee


def remove_employee(*, company: ExhibitorCompany, employee_id: UUID) -> ExhibitorEmployee:
    """Deactivate an employee; they can no longer collect meals."""
    employee = get_employee(company=company, employee_id=employee_id)
    employee.is_active = False
    employee.save(update_fields=['is_active', 'updated_at'])

    logger.info("Deactivated employee %s of %s", employee.pk, company.company_code)
    return employee
