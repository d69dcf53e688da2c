"""
Exhibitors app services layer.

Bulk meal claims are recorded in an append-only allocation ledger;
remaining allocation is always recomputed from it.
"""

from .exceptions import (
    ExhibitorServiceError,
    SlotAlreadyClaimedError,
    AllocationExceededError,
    InvalidQuantityError,
    EmployeeRequiredError,
    MealTypeMismatchError,
    MealSlotNotFoundError,
    EmployeeNotFoundError,
    ClaimNotFoundError,
    ConfigurationError,
    NetworkFailureError,
    DuplicateExhibitorError,
)

from .allocation_ledger import (
    allocation_policy,
    get_company_for_user,
    remaining_allocation,
    slot_availability,
    allocation_summary,
    claim_bulk,
    get_company_claims,
    reset_allocation_claim,
)

from .employee_management import (
    get_active_employees,
    get_employee,
    add_employee,
    update_employee,
    remove_employee,
)

from .company_management import (
    search_companies,
    create_exhibitor,
    update_exhibitor,
    delete_exhibitor,
)


__all__ = [
    # Exceptions
    'ExhibitorServiceError',
    'SlotAlreadyClaimedError',
    'AllocationExceededError',
    'InvalidQuantityError',
    'EmployeeRequiredError',
    'MealTypeMismatchError',
    'MealSlotNotFoundError',
    'EmployeeNotFoundError',
    'ClaimNotFoundError',
    'ConfigurationError',
    'NetworkFailureError',
    'DuplicateExhibitorError',

    # Allocation ledger
    'allocation_policy',
    'get_company_for_user',
    'remaining_allocation',
    'slot_availability',
    'allocation_summary',
    'claim_bulk',
    'get_company_claims',
    'reset_allocation_claim',

    # Employees
    'get_active_employees',
    'get_employee',
    'add_employee',
    'update_employee',
    'remove_employee',

    # Companies
    'search_companies',
    'create_exhibitor',
    'update_exhibitor',
    'delete_exhibitor',
]
