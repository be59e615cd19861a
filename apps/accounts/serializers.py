from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Admin account for display."""

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'is_active',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class AdminLoginSerializer(serializers.Serializer):
    """Serializer for admin login."""

    username = serializers.CharField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class AdminCreateSerializer(serializers.Serializer):
    """Input for creating an admin account (rules enforced in the service)."""

    username = serializers.CharField(max_length=150)
    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )


class PasswordChangeSerializer(serializers.Serializer):
    """Input for changing an admin password."""

    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
