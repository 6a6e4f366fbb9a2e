from django.db import models
from mptt.models import MPTTModel, TreeForeignKey, TreeManager


class AccountManager(TreeManager):
    def names_for(self, entity) -> dict[str, str]:
        """Map account number -> name for one entity."""
        return dict(self.filter(entity=entity).values_list("number", "name"))


class Account(MPTTModel):
    """Chart of accounts node for a specific entity (tree via django-mptt).

    Ledger entries reference accounts by number, so an entry can be posted
    to a number that is not (yet) in the chart. Reports then show it
    without a name.
    """

    entity = models.ForeignKey("core.Entity", on_delete=models.CASCADE, related_name="accounts")

    number = models.CharField(max_length=20)
    name = models.CharField(max_length=255)

    parent = TreeForeignKey("self", null=True, blank=True, on_delete=models.PROTECT, related_name="children")
    is_postable = models.BooleanField(default=True)

    objects = AccountManager()

    class Meta:
        unique_together = ("entity", "number")
        ordering = ["number"]

    class MPTTMeta:
        order_insertion_by = ["number"]

    def __str__(self):
        return f"{self.number} {self.name}"

    @property
    def is_result_account(self) -> bool:
        """Profit & loss accounts start with 5, 6, 7 or 8."""
        return self.number[:1] in {"5", "6", "7", "8"}
