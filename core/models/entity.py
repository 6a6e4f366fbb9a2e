from django.db import models
from django.conf import settings


class Entity(models.Model):
    """Organization that owns documents, ledger entries and periods.

    Key principle:
    - Every business object belongs to an Entity (multi-tenant / multi-company).
    - Entity holds the control-account configuration used when posting.
      Missing accounts fall back to ``settings.LEDGER["DEFAULT_ACCOUNTS"]``.
    """

    CONTROL_ACCOUNTS = {
        "receivable": "default_ar_account",
        "payable": "default_ap_account",
        "output_vat": "default_output_vat_account",
        "input_vat": "default_input_vat_account",
    }

    name = models.CharField(max_length=255)
    currency = models.CharField(max_length=3, default="DKK")

    # Control accounts (defaults)
    default_ar_account = models.ForeignKey("core.Account", null=True, blank=True, on_delete=models.PROTECT, related_name="+")
    default_ap_account = models.ForeignKey("core.Account", null=True, blank=True, on_delete=models.PROTECT, related_name="+")
    default_output_vat_account = models.ForeignKey("core.Account", null=True, blank=True, on_delete=models.PROTECT, related_name="+")
    default_input_vat_account = models.ForeignKey("core.Account", null=True, blank=True, on_delete=models.PROTECT, related_name="+")

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "entities"

    def __str__(self):
        return self.name

    def control_account_number(self, kind: str) -> str:
        """Account number for a control account kind (receivable, payable, output_vat, input_vat)."""
        account = getattr(self, self.CONTROL_ACCOUNTS[kind])
        if account is not None:
            return account.number
        return settings.LEDGER["DEFAULT_ACCOUNTS"][kind]


class UserProfile(models.Model):
    """Connect a user to an Entity."""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    entity = models.ForeignKey("core.Entity", on_delete=models.CASCADE, related_name="users")

    # Roles checked when booking (e.g. "admin" for manual vouchers)
    roles = models.CharField(max_length=255, blank=True, default="", help_text="Comma separated, e.g. 'admin,bookkeeper'")
    is_entity_admin = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.user} @ {self.entity}"

    @property
    def role_set(self) -> set[str]:
        roles = {r.strip() for r in self.roles.split(",") if r.strip()}
        if self.is_entity_admin:
            roles.add("admin")
        return roles
