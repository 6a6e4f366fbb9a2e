from django.db import models


class ReportSnapshot(models.Model):
    """Materialized report rows for one (entity, period, report type).

    ``rows`` is a list of ``{"account_number", "account_name", "amount"}``
    with amounts stored as strings.
    """

    class ReportType(models.TextChoices):
        BALANCE = "balance", "Balance"
        RESULT = "result", "Result"
        PRIMO = "primo", "Opening balance"

    entity = models.ForeignKey("core.Entity", on_delete=models.CASCADE, related_name="report_snapshots")
    period = models.ForeignKey("core.AccountingPeriod", on_delete=models.CASCADE, related_name="report_snapshots")
    report_type = models.CharField(max_length=20, choices=ReportType.choices)

    rows = models.JSONField(default=list)
    created_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["entity", "period", "report_type"], name="uniq_report_snapshot"),
        ]
        ordering = ["period", "report_type"]

    def __str__(self):
        return f"{self.get_report_type_display()} {self.period}"
