from django.db import models

from documents.models.document import Document


class DocumentClassManager(models.Manager):
    def __init__(self, document_class):
        super().__init__()
        self.document_class = document_class

    def get_queryset(self):
        return super().get_queryset().filter(document_class=self.document_class)


class ClassProxyMixin:
    """Proxies default ``document_class`` on save."""

    DOCUMENT_CLASS = None

    def save(self, *args, **kwargs):
        if not self.document_class:
            self.document_class = self.DOCUMENT_CLASS
        super().save(*args, **kwargs)


class Invoice(ClassProxyMixin, Document):
    DOCUMENT_CLASS = Document.DocumentClass.INVOICE
    objects = DocumentClassManager(DOCUMENT_CLASS)

    class Meta:
        proxy = True
        verbose_name = "Invoice"
        verbose_name_plural = "Invoices"


class CreditNote(ClassProxyMixin, Document):
    DOCUMENT_CLASS = Document.DocumentClass.CREDIT_NOTE
    objects = DocumentClassManager(DOCUMENT_CLASS)

    class Meta:
        proxy = True
        verbose_name = "Credit note"
        verbose_name_plural = "Credit notes"


class ManualVoucher(ClassProxyMixin, Document):
    DOCUMENT_CLASS = Document.DocumentClass.MANUAL_VOUCHER
    objects = DocumentClassManager(DOCUMENT_CLASS)

    class Meta:
        proxy = True
        verbose_name = "Manual voucher"
        verbose_name_plural = "Manual vouchers"


class PurchaseVoucher(ClassProxyMixin, Document):
    DOCUMENT_CLASS = Document.DocumentClass.PURCHASE_VOUCHER
    objects = DocumentClassManager(DOCUMENT_CLASS)

    class Meta:
        proxy = True
        verbose_name = "Purchase voucher"
        verbose_name_plural = "Purchase vouchers"


class PurchaseCreditNote(ClassProxyMixin, Document):
    DOCUMENT_CLASS = Document.DocumentClass.PURCHASE_CREDIT_NOTE
    objects = DocumentClassManager(DOCUMENT_CLASS)

    class Meta:
        proxy = True
        verbose_name = "Purchase credit note"
        verbose_name_plural = "Purchase credit notes"
