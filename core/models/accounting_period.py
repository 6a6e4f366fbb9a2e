from django.db import models
from simple_history.models import HistoricalRecords


class AccountingPeriod(models.Model):
    """Accounting period (usually a financial year) of an entity.

    A locked period rejects every posting dated inside it, inclusive at
    both ends.
    """

    entity = models.ForeignKey("core.Entity", on_delete=models.CASCADE, related_name="accounting_periods")

    name = models.CharField(max_length=100)
    date_from = models.DateField()
    date_to = models.DateField()
    is_locked = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    history = HistoricalRecords()

    class Meta:
        ordering = ["entity", "date_from"]
        indexes = [
            models.Index(fields=["entity", "date_from", "date_to"], name="period_entity_dates_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.date_from} - {self.date_to})"

    def contains(self, on_date) -> bool:
        return self.date_from <= on_date <= self.date_to

    def lock(self):
        if not self.is_locked:
            self.is_locked = True
            self.save(update_fields=["is_locked"])

    def unlock(self):
        if self.is_locked:
            self.is_locked = False
            self.save(update_fields=["is_locked"])
