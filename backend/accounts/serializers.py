"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import Company, Office

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects the ``user_type`` claim into the JWT payload.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username or Email.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["user_type"] = user.user_type
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the
        authenticated user is exposed as ``self.user`` for the view.
        """
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  Organisation Serializers
# ═══════════════════════════════════════════════════════════════════


class OfficeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Office
        fields = ["id", "name"]
        read_only_fields = fields


class CompanySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ["id", "name"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact user representation nested inside reports and chats."""

    class Meta:
        model = User
        fields = ["id", "username", "first_name", "last_name", "user_type"]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """Full profile of the authenticated user."""

    offices = OfficeSerializer(many=True, read_only=True)
    company = CompanySerializer(read_only=True)
    user_type_display = serializers.CharField(
        source="get_user_type_display",
        read_only=True,
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "user_type",
            "user_type_display",
            "offices",
            "company",
            "date_joined",
        ]
        read_only_fields = fields


class StaffLoadSerializer(UserSummarySerializer):
    """Technical staff member with the number of open reports assigned."""

    offices = OfficeSerializer(many=True, read_only=True)
    open_reports = serializers.IntegerField(read_only=True)

    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + ["offices", "open_reports"]
        read_only_fields = fields


class MaintainerSerializer(UserSummarySerializer):
    """External maintainer with its company."""

    company = CompanySerializer(read_only=True)

    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + ["company"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class MaintainerFilterSerializer(serializers.Serializer):
    category = serializers.IntegerField(
        required=False,
        min_value=1,
        help_text="Only maintainers whose company services this category.",
    )


class StaffFilterSerializer(serializers.Serializer):
    office = serializers.IntegerField(
        required=False,
        min_value=1,
        help_text="Only staff members of this office.",
    )
