from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from guardian.admin import GuardedModelAdmin
from mptt.admin import MPTTModelAdmin
from simple_history.admin import SimpleHistoryAdmin

from core.admin_utils import EntityScopedAdminMixin
from core.models import AccountingPeriod, Account, Entity, NumberSeries, UserProfile, VatCode
from core.services.periods import lock_period, unlock_period


@admin.register(Entity)
class EntityAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "currency", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)

    fieldsets = (
        (_("General"), {"fields": ("name", "currency", "is_active")}),
        (_("Control accounts"), {
            "fields": (
                "default_ar_account",
                "default_ap_account",
                "default_output_vat_account",
                "default_input_vat_account",
            )
        }),
    )


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "entity", "roles", "is_entity_admin")
    list_filter = ("entity", "is_entity_admin")


@admin.register(Account)
class AccountAdmin(EntityScopedAdminMixin, GuardedModelAdmin, MPTTModelAdmin):
    list_display = ("number", "name", "entity", "is_postable")
    list_filter = ("entity", "is_postable")
    search_fields = ("number", "name")


@admin.register(VatCode)
class VatCodeAdmin(EntityScopedAdminMixin, GuardedModelAdmin, admin.ModelAdmin):
    list_display = ("entity", "code", "name", "vat_type", "rate")
    list_filter = ("entity", "vat_type")
    search_fields = ("code", "name")
    ordering = ("entity", "code")


@admin.register(NumberSeries)
class NumberSeriesAdmin(EntityScopedAdminMixin, admin.ModelAdmin):
    list_display = ("entity", "code", "next_number")
    list_filter = ("entity",)
    # Counters only move forward through allocation
    readonly_fields = ("next_number",)


@admin.register(AccountingPeriod)
class AccountingPeriodAdmin(EntityScopedAdminMixin, GuardedModelAdmin, SimpleHistoryAdmin):
    list_display = ("entity", "name", "date_from", "date_to", "is_locked")
    list_filter = ("entity", "is_locked")
    readonly_fields = ("is_locked",)
    actions = ["lock_periods", "unlock_periods"]

    @admin.action(description="Lock selected periods")
    def lock_periods(self, request, queryset):
        for period in queryset:
            lock_period(period.entity, period.pk)
        self.message_user(request, f"Locked {queryset.count()} period(s).", level=messages.SUCCESS)

    @admin.action(description="Unlock selected periods")
    def unlock_periods(self, request, queryset):
        for period in queryset:
            unlock_period(period.entity, period.pk)
        self.message_user(request, f"Unlocked {queryset.count()} period(s).", level=messages.SUCCESS)
