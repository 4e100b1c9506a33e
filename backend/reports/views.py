"""
Reports app ViewSets.

Views are intentionally thin:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

Mutations that commit but fail a follow-up side effect answer
``207 Multi-Status`` with the committed report and the failed effects.
"""

from __future__ import annotations

from typing import Any, Callable

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from core.domain.exception_handler import domain_error_payload
from core.domain.exceptions import SideEffectFailure

from .serializers import (
    AssignExternalSerializer,
    CategorySerializer,
    CategoryUpdateSerializer,
    PublicReportSerializer,
    ReportCreateSerializer,
    ReportSerializer,
    ReportStatusFilterSerializer,
    ReviewSerializer,
    SideEffectFailureSerializer,
    StatusUpdateSerializer,
)
from .services import (
    CategoryDirectoryService,
    ReportCategoryService,
    ReportCoAssignmentService,
    ReportCreationService,
    ReportQueryService,
    ReportWorkflowService,
)

_MUTATION_RESPONSES = {
    200: ReportSerializer,
    207: OpenApiResponse(response=SideEffectFailureSerializer, description="Committed; a side effect failed."),
    400: OpenApiResponse(description="Validation failed."),
    403: OpenApiResponse(description="Not allowed for this user."),
    404: OpenApiResponse(description="Report or referenced entity not found."),
    409: OpenApiResponse(description="Invalid status transition."),
}


def _lifecycle_response(operation: Callable[..., Any], *args: Any) -> Response:
    try:
        report = operation(*args)
    except SideEffectFailure as exc:
        payload = domain_error_payload(exc)
        payload["report"] = ReportSerializer(exc.report).data
        return Response(payload, status=status.HTTP_207_MULTI_STATUS)
    return Response(ReportSerializer(report).data, status=status.HTTP_200_OK)


class CategoryListView(APIView):
    """GET /api/categories/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List categories",
        responses={200: CategorySerializer(many=True)},
        tags=["Reports"],
    )
    def get(self, request: Request) -> Response:
        categories = CategoryDirectoryService.list_categories()
        return Response(CategorySerializer(categories, many=True).data, status=status.HTTP_200_OK)


class ReportViewSet(viewsets.ViewSet):
    """
    Report lifecycle endpoints.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined; reports are never updated generically or deleted.
    Who may do what is decided in ``reports.services``.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    # ── Queries ─────────────────────────────────────────────────────

    @extend_schema(
        summary="List reports by status",
        parameters=[
            OpenApiParameter(name="status", type=str, required=True, description="Report status."),
        ],
        responses={
            200: ReportSerializer(many=True),
            400: OpenApiResponse(description="Unknown status."),
            403: OpenApiResponse(description="Reviewers only."),
        },
        tags=["Reports"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/reports/?status=<status>"""
        filter_serializer = ReportStatusFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        reports = ReportQueryService.list_by_status(
            filter_serializer.validated_data["status"],
            request.user.pk,
        )
        return Response(ReportSerializer(reports, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Submit a report",
        request=ReportCreateSerializer,
        responses={
            201: ReportSerializer,
            400: OpenApiResponse(description="Validation failed."),
            403: OpenApiResponse(description="Citizens only."),
            404: OpenApiResponse(description="Category not found."),
        },
        tags=["Reports"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/reports/"""
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        report = ReportCreationService.create_report(
            request.user.pk,
            title=data["title"],
            description=data["description"],
            category_id=data["category"],
            images=data["images"],
            latitude=data["latitude"],
            longitude=data["longitude"],
            anonymous=data["anonymous"],
        )
        return Response(ReportSerializer(report).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Report detail",
        responses={
            200: ReportSerializer,
            403: OpenApiResponse(description="Only the creator can view the report."),
            404: OpenApiResponse(description="Report not found."),
        },
        tags=["Reports"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        """GET /api/reports/{id}/"""
        report = ReportQueryService.get_by_id(int(pk), request.user.pk)
        return Response(ReportSerializer(report).data, status=status.HTTP_200_OK)

    @extend_schema(summary="My reports", responses={200: ReportSerializer(many=True)}, tags=["Reports"])
    @action(detail=False, methods=["get"], url_path="mine")
    def mine(self, request: Request) -> Response:
        """GET /api/reports/mine/"""
        reports = ReportQueryService.list_mine(request.user.pk)
        return Response(ReportSerializer(reports, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(summary="Reports assigned to me", responses={200: ReportSerializer(many=True)}, tags=["Reports"])
    @action(detail=False, methods=["get"], url_path="assigned")
    def assigned(self, request: Request) -> Response:
        """GET /api/reports/assigned/"""
        reports = ReportQueryService.list_assigned_to(request.user.pk)
        return Response(ReportSerializer(reports, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(summary="Reports co-assigned to me", responses={200: ReportSerializer(many=True)}, tags=["Reports"])
    @action(detail=False, methods=["get"], url_path="co-assigned")
    def co_assigned(self, request: Request) -> Response:
        """GET /api/reports/co-assigned/"""
        reports = ReportQueryService.list_co_assigned_to(request.user.pk)
        return Response(ReportSerializer(reports, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(summary="Public map", responses={200: PublicReportSerializer(many=True)}, tags=["Reports"])
    @action(detail=False, methods=["get"], url_path="map")
    def public_map(self, request: Request) -> Response:
        """GET /api/reports/map/"""
        reports = ReportQueryService.list_public_map()
        return Response(PublicReportSerializer(reports, many=True).data, status=status.HTTP_200_OK)

    # ── Mutations ───────────────────────────────────────────────────

    @extend_schema(
        summary="Change report category",
        request=CategoryUpdateSerializer,
        responses={
            200: ReportSerializer,
            403: OpenApiResponse(description="Reviewers only."),
            404: OpenApiResponse(description="Report or category not found."),
            409: OpenApiResponse(description="Report already closed."),
        },
        tags=["Reports"],
    )
    @action(detail=True, methods=["put"], url_path="category")
    def update_category(self, request: Request, pk: int = None) -> Response:
        """PUT /api/reports/{id}/category/"""
        serializer = CategoryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = ReportCategoryService.update_category(
            int(pk),
            serializer.validated_data["category"],
            request.user.pk,
        )
        return Response(ReportSerializer(report).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Accept or reject a pending report",
        request=ReviewSerializer,
        responses={
            **_MUTATION_RESPONSES,
            422: OpenApiResponse(description="No office or staff to route to."),
        },
        tags=["Reports"],
    )
    @action(detail=True, methods=["put"], url_path="review")
    def review(self, request: Request, pk: int = None) -> Response:
        """PUT /api/reports/{id}/review/"""
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return _lifecycle_response(
            ReportWorkflowService.accept_or_reject,
            int(pk),
            serializer.validated_data["status"],
            request.user.pk,
            serializer.validated_data["rejection_reason"],
        )

    @extend_schema(
        summary="Update work status",
        request=StatusUpdateSerializer,
        responses=_MUTATION_RESPONSES,
        tags=["Reports"],
    )
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: int = None) -> Response:
        """PUT /api/reports/{id}/status/"""
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return _lifecycle_response(
            ReportWorkflowService.update_status,
            int(pk),
            serializer.validated_data["status"],
            request.user.pk,
        )

    @extend_schema(
        summary="Co-assign an external maintainer",
        request=AssignExternalSerializer,
        responses=_MUTATION_RESPONSES,
        tags=["Reports"],
    )
    @action(detail=True, methods=["put"], url_path="assign-external")
    def assign_external(self, request: Request, pk: int = None) -> Response:
        """PUT /api/reports/{id}/assign-external/"""
        serializer = AssignExternalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return _lifecycle_response(
            ReportCoAssignmentService.assign_external_maintainer,
            int(pk),
            request.user.pk,
            serializer.validated_data["maintainer_id"],
        )
