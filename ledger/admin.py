from django.contrib import admin, messages
from guardian.admin import GuardedModelAdmin

from core.admin_utils import EntityScopedAdminMixin
from ledger.models import LedgerEntry, ReportSnapshot
from ledger.services.reports import materialize_report


@admin.register(LedgerEntry)
class LedgerEntryAdmin(EntityScopedAdminMixin, GuardedModelAdmin, admin.ModelAdmin):
    """Read-only: entries are corrected with new vouchers, never edited."""

    list_display = ("entry_date", "voucher_type", "voucher_number", "account_number", "amount", "entry_type", "description")
    list_filter = ("entity", "entry_type", "voucher_type", "vat_direction")
    search_fields = ("account_number", "description", "voucher_number")
    date_hierarchy = "entry_date"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReportSnapshot)
class ReportSnapshotAdmin(EntityScopedAdminMixin, GuardedModelAdmin, admin.ModelAdmin):
    list_display = ("entity", "period", "report_type", "created_at")
    list_filter = ("entity", "report_type")
    readonly_fields = ("rows", "created_at")
    actions = ["refresh_snapshots"]

    @admin.action(description="Recompute selected snapshots")
    def refresh_snapshots(self, request, queryset):
        count = 0
        for snapshot in queryset.select_related("entity", "period"):
            materialize_report(snapshot.entity, snapshot.period, snapshot.report_type)
            count += 1
        self.message_user(request, f"Recomputed {count} snapshot(s).", level=messages.SUCCESS)
