from rest_framework import serializers


class SettingValueSerializer(serializers.Serializer):
    """A single setting value (validated by the service)."""

    value = serializers.CharField(allow_blank=True, trim_whitespace=True)


class SettingEntrySerializer(serializers.Serializer):
    value = serializers.CharField(allow_blank=True)
    updated_at = serializers.DateTimeField(allow_null=True)


class CoffeePriceSerializer(serializers.Serializer):
    coffee_price = serializers.DecimalField(max_digits=6, decimal_places=2)


class TestEmailSerializer(serializers.Serializer):
    """Recipient for the SMTP test; defaults to the configured admin email."""

    email = serializers.EmailField(required=False)
