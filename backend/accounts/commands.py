# accounts/commands.py
"""
Command layer for accounts/authorization operations.

ALL security-critical mutations go through these commands:
- Registration (user + role + graduate/employer profile)
- Role assignment and revocation
- Suspension

Commands return CommandResult instead of raising for business-rule
failures, so views can answer with a 400 and the reason.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounts.models import Role, UserRole
from accounts.permissions import get_role

logger = logging.getLogger(__name__)

User = get_user_model()


class CommandResult:
    def __init__(self, success: bool, data=None, error: str = None, not_found: bool = False):
        self.success = success
        self.data = data
        self.error = error
        self.not_found = not_found

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, not_found: bool = False):
        return cls(success=False, error=error, not_found=not_found)


USER_TYPE_FOR_ROLE = {
    Role.SUPER_ADMIN: User.UserType.SUPER_ADMIN,
    Role.INSTITUTION_ADMIN: User.UserType.INSTITUTION_ADMIN,
    Role.GRADUATE: User.UserType.GRADUATE,
    Role.EMPLOYER: User.UserType.EMPLOYER,
}


# =============================================================================
# Registration
# =============================================================================

@transaction.atomic
def register_user(
    email: str,
    password: str,
    name: str,
    role: str,
    institution=None,
    profile: dict | None = None,
) -> CommandResult:
    """
    Register a graduate or employer account.

    - graduate: bound to `institution`; a Graduate row is created in the
      institution's database.
    - employer: an Employer profile (pending verification) is created.

    Args:
        email: Unique login email
        password: Raw password
        name: Display name
        role: "graduate" or "employer"
        institution: Tenant (required for graduates)
        profile: Extra profile fields (graduation_year, company_name, ...)

    Returns:
        CommandResult with the user
    """
    profile = profile or {}

    if role not in (Role.GRADUATE, Role.EMPLOYER):
        return CommandResult.fail(f"Self-registration is not available for role '{role}'.")

    if User.objects.filter(email__iexact=email).exists():
        return CommandResult.fail("A user with this email already exists.")

    if role == Role.GRADUATE and institution is None:
        return CommandResult.fail("Graduates must register with an institution.")

    user = User.objects.create_user(
        email=email,
        password=password,
        name=name,
        user_type=USER_TYPE_FOR_ROLE[role],
        institution=institution if role == Role.GRADUATE else None,
    )
    UserRole.objects.create(user=user, role=get_role(role))

    if role == Role.GRADUATE:
        from graduates.models import Graduate

        with institution.run():
            Graduate.objects.create(
                tenant_id=institution.id,
                user_id=user.id,
                name=name,
                email=user.email,
                graduation_year=profile.get("graduation_year") or timezone.now().year,
                student_id=profile.get("student_id", ""),
            )
    else:
        from employers.models import Employer

        Employer.objects.create(
            user=user,
            company_name=profile.get("company_name") or name,
            industry=profile.get("industry", ""),
            company_size=profile.get("company_size") or Employer.CompanySize.SMALL,
            contact_person_name=name,
            contact_email=user.email,
        )

    logger.info(f"Registered {role} {user.email}")
    return CommandResult.ok(data={"user": user})


# =============================================================================
# Roles
# =============================================================================

@transaction.atomic
def assign_role(actor: ActorContext | None, user, role_name: str, institution=None) -> CommandResult:
    """
    Assign a role to a user.

    institution-admin requires an institution; the user is bound to it.
    actor=None is allowed for bootstrap code (management commands).
    """
    if actor is not None:
        require(actor, "roles.assign")

    if role_name not in Role.NAMES:
        return CommandResult.fail(f"Unknown role: {role_name}")

    if role_name == Role.INSTITUTION_ADMIN:
        institution = institution or user.institution
        if institution is None:
            return CommandResult.fail("Institution admins must be bound to an institution.")
        if user.institution_id != institution.id:
            user.institution = institution
            user.save(update_fields=["institution"])

    role = get_role(role_name)
    _, created = UserRole.objects.get_or_create(
        user=user,
        role=role,
        defaults={"assigned_by": actor.user if actor else None},
    )

    if created and user.user_type != USER_TYPE_FOR_ROLE[role_name] and not user.user_roles.exclude(role=role).exists():
        user.user_type = USER_TYPE_FOR_ROLE[role_name]
        user.save(update_fields=["user_type"])

    logger.info(f"Role {role_name} {'assigned to' if created else 'already held by'} {user.email}")
    return CommandResult.ok(data={"user": user, "role": role, "created": created})


@transaction.atomic
def revoke_role(actor: ActorContext, user, role_name: str) -> CommandResult:
    require(actor, "roles.assign")

    if user.pk == actor.user.pk and role_name == Role.SUPER_ADMIN:
        return CommandResult.fail("You cannot revoke your own super-admin role.")

    deleted, _ = UserRole.objects.filter(user=user, role__name=role_name).delete()
    if not deleted:
        return CommandResult.fail(f"User does not hold role '{role_name}'.", not_found=True)

    logger.info(f"Role {role_name} revoked from {user.email}")
    return CommandResult.ok(data={"user": user})


# =============================================================================
# Suspension
# =============================================================================

def suspend_user(actor: ActorContext, user, reason: str = "") -> CommandResult:
    require(actor, "users.manage")

    if user.pk == actor.user.pk:
        return CommandResult.fail("You cannot suspend yourself.")

    user.is_suspended = True
    user.suspended_at = timezone.now()
    user.suspension_reason = reason
    user.save(update_fields=["is_suspended", "suspended_at", "suspension_reason"])

    logger.info(f"User {user.email} suspended by {actor.user.email}")
    return CommandResult.ok(data={"user": user})


def reactivate_user(actor: ActorContext, user) -> CommandResult:
    require(actor, "users.manage")

    user.is_suspended = False
    user.suspended_at = None
    user.suspension_reason = ""
    user.save(update_fields=["is_suspended", "suspended_at", "suspension_reason"])

    logger.info(f"User {user.email} reactivated by {actor.user.email}")
    return CommandResult.ok(data={"user": user})
