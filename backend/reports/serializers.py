"""
Reports app serializers.

Request serializers only check the *shape* of the payload (types, required
keys).  Business rules (image count, municipal bounds, allowed transitions,
who may act) are enforced by ``reports.services`` so that they raise the
domain error kinds clients rely on.
"""

from __future__ import annotations

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Category, Report


# ═══════════════════════════════════════════════════════════════════
#  Response Serializers
# ═══════════════════════════════════════════════════════════════════


class CategorySerializer(serializers.ModelSerializer):
    office_name = serializers.CharField(
        source="office.name",
        read_only=True,
        default=None,
    )

    class Meta:
        model = Category
        fields = ["id", "name", "office", "office_name"]
        read_only_fields = fields


class ReportSerializer(serializers.ModelSerializer):
    """Full representation of a report, as seen by the people working on it."""

    category = CategorySerializer(read_only=True)
    status_display = serializers.CharField(
        source="get_status_display",
        read_only=True,
    )
    created_by = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    co_assigned_to = UserSummarySerializer(read_only=True)

    class Meta:
        model = Report
        fields = [
            "id",
            "title",
            "description",
            "category",
            "images",
            "latitude",
            "longitude",
            "status",
            "status_display",
            "anonymous",
            "rejection_reason",
            "created_by",
            "assigned_to",
            "co_assigned_to",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PublicReportSerializer(serializers.ModelSerializer):
    """
    Map pin for an approved report.  The author is omitted when the
    citizen asked to stay anonymous.
    """

    category = CategorySerializer(read_only=True)
    created_by = serializers.SerializerMethodField()

    class Meta:
        model = Report
        fields = [
            "id",
            "title",
            "description",
            "category",
            "images",
            "latitude",
            "longitude",
            "status",
            "anonymous",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields

    def get_created_by(self, obj: Report) -> dict | None:
        if obj.anonymous:
            return None
        return UserSummarySerializer(obj.created_by).data


class SideEffectFailureSerializer(serializers.Serializer):
    """Body of a 207 response: the committed report plus what failed."""

    detail = serializers.CharField()
    code = serializers.CharField()
    failed_effects = serializers.ListField(child=serializers.CharField())
    report = ReportSerializer()


# ═══════════════════════════════════════════════════════════════════
#  Request Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, allow_blank=True)
    description = serializers.CharField(allow_blank=True, trim_whitespace=False)
    category = serializers.IntegerField(min_value=1)
    images = serializers.ListField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False),
        allow_empty=True,
        help_text="1 to 3 image URLs.",
    )
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    anonymous = serializers.BooleanField(default=False)


class ReportStatusFilterSerializer(serializers.Serializer):
    status = serializers.CharField(help_text="Report status to list.")


class CategoryUpdateSerializer(serializers.Serializer):
    category = serializers.IntegerField(min_value=1)


class ReviewSerializer(serializers.Serializer):
    status = serializers.CharField(help_text="'Assigned' to accept, 'Rejected' to reject.")
    rejection_reason = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        help_text="Mandatory when rejecting.",
    )


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(help_text="Target status.")


class AssignExternalSerializer(serializers.Serializer):
    maintainer_id = serializers.IntegerField(min_value=1)
