"""Admin mixins to keep admin code simple and consistent."""

from django.contrib import messages

from core.exceptions import LedgerError
from core.permissions import assign_object_perms_to_user, assign_object_perms_to_entity_admins


class EntityScopedAdminMixin:
    """Mixin: restrict to the user's entity and assign guardian perms after save.

    This avoids relying on signals (signals don't know the request.user).
    """

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)

        entity = getattr(obj, "entity", None)
        if entity is not None:
            assign_object_perms_to_user(request.user, obj)
            assign_object_perms_to_entity_admins(entity, obj)

    def get_queryset(self, request):
        """Superusers see everything, others only their entity."""
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        profile = getattr(request.user, "profile", None)
        if not profile:
            return qs.none()
        if hasattr(qs.model, "entity_id"):
            return qs.filter(entity=profile.entity)
        return qs

    def run_ledger_operation(self, request, operation, success_message):
        """Run a service call and report the outcome as an admin message."""
        try:
            result = operation()
        except LedgerError as e:
            self.message_user(request, f"{e.message} ({e.kind})", level=messages.ERROR)
            return None
        self.message_user(request, success_message(result), level=messages.SUCCESS)
        return result
