from django.db import models, transaction


class NumberSeries(models.Model):
    """Counter handing out document numbers per (entity, code).

    ``code`` is the document class ("invoice", "credit_note", ...), so each
    class of document is numbered independently.

    The important part is *concurrency safety*:
    - We lock the NumberSeries row in the database (select_for_update)
    - We read next_number
    - We increment next_number and save
    Two users booking at the same time never get the same number.
    """

    entity = models.ForeignKey("core.Entity", on_delete=models.CASCADE, related_name="number_series")

    code = models.CharField(max_length=50)
    next_number = models.IntegerField(default=1)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["entity", "code"], name="uniq_number_series_per_entity"),
        ]
        ordering = ["code"]
        verbose_name_plural = "number series"

    def __str__(self):
        return f"{self.entity} {self.code} (next {self.next_number})"

    @classmethod
    def for_code(cls, entity, code: str, *, seed: int = 1) -> "NumberSeries":
        """Return the counter for (entity, code), creating it at ``seed``."""
        series, _ = cls.objects.get_or_create(entity=entity, code=code, defaults={"next_number": seed})
        return series

    @transaction.atomic
    def allocate(self) -> int:
        """Allocate the next number.

        The row lock is held until the surrounding transaction commits, so
        no other allocation can read the old next_number in parallel. If
        that transaction rolls back, the number is handed out again.
        """
        series = type(self).objects.select_for_update().get(pk=self.pk)

        current = series.next_number
        series.next_number = current + 1
        series.save(update_fields=["next_number"])

        self.next_number = series.next_number
        return current
