"""Guardian helpers for simple 'entity visibility'.

When an object is created or edited from admin, object-level permissions
are assigned to:
  * the current user
  * all entity admins (UserProfile.is_entity_admin=True)
"""

from guardian.shortcuts import assign_perm

from core.models import UserProfile

DEFAULT_PERMS = ("view", "change", "delete")


def assign_object_perms_to_user(user, obj, perms=DEFAULT_PERMS):
    """Assign view/change/delete perms for obj to a user."""
    if not user or not user.is_authenticated:
        return
    # Proxy models share the concrete model's permission rows
    opts = obj._meta.concrete_model._meta
    for p in perms:
        assign_perm(f"{opts.app_label}.{p}_{opts.model_name}", user, obj)


def assign_object_perms_to_entity_admins(entity, obj, perms=DEFAULT_PERMS):
    """Assign perms for obj to all users marked as entity admin."""
    qs = UserProfile.objects.filter(entity=entity, is_entity_admin=True).select_related("user")
    for prof in qs:
        assign_object_perms_to_user(prof.user, obj, perms=perms)


def roles_for_user(user) -> set[str]:
    """Booking roles of a user. Superusers count as admin."""
    if user is None or not user.is_authenticated:
        return set()
    roles = set()
    if user.is_superuser:
        roles.add("admin")
    profile = getattr(user, "profile", None)
    if profile is not None:
        roles |= profile.role_set
    return roles
