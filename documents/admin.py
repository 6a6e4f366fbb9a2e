from django.contrib import admin
from django.utils import timezone
from django_object_actions import DjangoObjectActions, action
from guardian.admin import GuardedModelAdmin
from simple_history.admin import SimpleHistoryAdmin

from core.admin_utils import EntityScopedAdminMixin
from core.permissions import roles_for_user
from documents.models import (
    CreditNote,
    Document,
    DocumentLine,
    Invoice,
    ManualVoucher,
    Payment,
    PurchaseCreditNote,
    PurchaseVoucher,
)
from documents.services.lifecycle import book_document, delete_document, recalculate_document
from documents.services.reversal import create_reversal

TOTAL_FIELDS = (
    "total_excl_vat",
    "total_vatable_amount",
    "total_non_vatable_amount",
    "total_vat",
    "total_incl_vat",
)


class DocumentLineInline(admin.TabularInline):
    model = DocumentLine
    extra = 0
    fk_name = "document"
    fields = (
        "line_no", "account_number", "account_name", "description", "quantity", "unit_price",
        "discount", "vat_code", "vat_rate", "total_amount", "total_amount_incl_vat",
    )
    readonly_fields = ("account_name", "vat_rate", "total_amount", "total_amount_incl_vat")

    def has_change_permission(self, request, obj=None):
        return obj is None or obj.state == Document.State.DRAFT

    has_add_permission = has_change_permission
    has_delete_permission = has_change_permission


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("date", "amount", "method", "note", "created_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class DocumentAdminBase(DjangoObjectActions, EntityScopedAdminMixin, GuardedModelAdmin, SimpleHistoryAdmin):
    """Shared admin for every document class.

    Totals and line amounts are always recomputed on save; booking and
    crediting go through the service layer.
    """

    inlines = [DocumentLineInline, PaymentInline]

    list_display = ("number", "date", "contact_name", "total_incl_vat", "state", "payment_status")
    list_filter = ("entity", "state")
    search_fields = ("number", "contact_name", "reference")
    readonly_fields = (
        "guid", "document_class", "state", "number", "payment_status", "paid_amount",
        "remaining_amount", "paid_on", "reversal_of", "booked_at", "booked_by", "deleted_at",
        *TOTAL_FIELDS,
    )

    change_actions = ("book_action", "credit_action", "delete_action")

    def get_change_actions(self, request, object_id, form_url):
        # Show buttons based on current state
        obj = self.get_object(request, object_id)
        if not obj:
            return ()
        if obj.state == Document.State.DRAFT:
            return ("book_action", "delete_action")
        if obj.state in Document.BOOKED_STATES:
            if obj.document_class == Document.DocumentClass.INVOICE:
                return ("credit_action", "delete_action")
            return ("delete_action",)
        return ()

    def get_readonly_fields(self, request, obj=None):
        if obj is not None and obj.state != Document.State.DRAFT:
            return [f.name for f in obj._meta.concrete_fields]
        return self.readonly_fields

    def get_changeform_initial_data(self, request):
        initial = super().get_changeform_initial_data(request)
        initial.setdefault("date", timezone.localdate())

        prof = getattr(request.user, "profile", None)
        if prof and prof.entity_id:
            initial.setdefault("entity", prof.entity_id)
            initial.setdefault("currency", prof.entity.currency)
        return initial

    def save_model(self, request, obj, form, change):
        if not obj.document_class:
            obj.document_class = self.model.DOCUMENT_CLASS
        super().save_model(request, obj, form, change)

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        if form.instance.state == Document.State.DRAFT:
            recalculate_document(form.instance)

    @action(label="Book", description="Post the document to the ledger")
    def book_action(self, request, obj):
        self.run_ledger_operation(
            request,
            lambda: book_document(obj.entity, obj.guid, by=request.user, actor_roles=roles_for_user(request.user)),
            lambda doc: f"Booked as number {doc.number}.",
        )

    @action(label="Create credit note", description="Create a draft credit note reversing this invoice")
    def credit_action(self, request, obj):
        self.run_ledger_operation(
            request,
            lambda: create_reversal(obj.entity, obj.guid, by=request.user),
            lambda note: f"Created credit note {note.number}.",
        )

    @action(label="Delete", description="Delete a draft, or mark a booked document deleted")
    def delete_action(self, request, obj):
        self.run_ledger_operation(
            request,
            lambda: delete_document(obj.entity, obj.guid, by=request.user),
            lambda guid: f"Deleted document {guid}.",
        )


@admin.register(Invoice)
class InvoiceAdmin(DocumentAdminBase):
    pass


@admin.register(CreditNote)
class CreditNoteAdmin(DocumentAdminBase):
    pass


@admin.register(ManualVoucher)
class ManualVoucherAdmin(DocumentAdminBase):
    list_display = ("number", "date", "description", "total_excl_vat", "state")


@admin.register(PurchaseVoucher)
class PurchaseVoucherAdmin(DocumentAdminBase):
    list_display = ("number", "date", "contact_name", "total_excl_vat", "state")


@admin.register(PurchaseCreditNote)
class PurchaseCreditNoteAdmin(DocumentAdminBase):
    pass
