"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Profile of a platform user."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "phone",
            "role",
            "business_name",
            "provider_status",
            "is_verified",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "email", "role", "provider_status", "is_verified", "created_at", "updated_at"]


class UserShortSerializer(serializers.ModelSerializer):
    """Compact representation embedded in other resources."""

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "phone", "role"]
        read_only_fields = fields
