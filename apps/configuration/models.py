from django.db import models


class SettingKey(models.TextChoices):
    COFFEE_PRICE = 'coffee_price', 'Coffee price'
    ADMIN_EMAIL = 'admin_email', 'Admin email'
    BANK_IBAN = 'bank_iban', 'Bank IBAN'
    BANK_BIC = 'bank_bic', 'Bank BIC'
    BANK_OWNER = 'bank_owner', 'Bank account owner'


class Setting(models.Model):
    """Runtime-editable kiosk setting (key/value)."""

    key = models.CharField(max_length=50, primary_key=True, choices=SettingKey.choices)
    value = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'settings'
        ordering = ['key']

    def __str__(self):
        return f"{self.key} = {self.value}"
