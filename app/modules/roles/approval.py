"""Role derivation at sign-up and the approval status state machine."""
from typing import Dict, FrozenSet, Tuple

from app.core.errors import ValidationError
from app.modules.roles.schemas import ApprovalStatus, Role

PENDING = ApprovalStatus.PENDING
APPROVED = ApprovalStatus.APPROVED
REJECTED = ApprovalStatus.REJECTED

_BASE_TRANSITIONS: Dict[ApprovalStatus, FrozenSet[ApprovalStatus]] = {
    PENDING: frozenset({APPROVED, REJECTED}),
    APPROVED: frozenset(),
    REJECTED: frozenset(),
}

_RECONSIDERATION_TRANSITIONS: Dict[ApprovalStatus, FrozenSet[ApprovalStatus]] = {
    PENDING: frozenset({APPROVED, REJECTED}),
    APPROVED: frozenset({REJECTED}),
    REJECTED: frozenset({APPROVED}),
}


def derive_initial_assignment(requested_role: Role, email: str, bootstrap_email: str = "") -> Tuple[Role, ApprovalStatus]:
    """Role and status a new account starts with.

    The bootstrap superadmin email wins over whatever role was requested.
    Only suppliers wait for approval.
    """
    if bootstrap_email and email and email.strip().lower() == bootstrap_email.strip().lower():
        return Role.SUPERADMIN, APPROVED
    role = Role(requested_role)
    if role == Role.SUPERADMIN:
        raise ValidationError("The superadmin role cannot be requested at sign-up")
    if role == Role.SUPPLIER:
        return role, PENDING
    return role, APPROVED


def allowed_transitions(current: ApprovalStatus, allow_reconsideration: bool = False) -> FrozenSet[ApprovalStatus]:
    table = _RECONSIDERATION_TRANSITIONS if allow_reconsideration else _BASE_TRANSITIONS
    return table[ApprovalStatus(current)]


def validate_transition(role: Role, current: ApprovalStatus, target: ApprovalStatus, allow_reconsideration: bool = False) -> None:
    if Role(role) != Role.SUPPLIER:
        raise ValidationError(f"Only supplier accounts go through approval (account role is {Role(role).value})")
    current = ApprovalStatus(current)
    target = ApprovalStatus(target)
    if target not in allowed_transitions(current, allow_reconsideration):
        raise ValidationError(
            f"Cannot move supplier approval from {current.value} to {target.value}"
        )


def is_approved(role: Role, approval_status: ApprovalStatus) -> bool:
    """Vendors and superadmins never wait for approval."""
    return Role(role) != Role.SUPPLIER or ApprovalStatus(approval_status) == APPROVED
