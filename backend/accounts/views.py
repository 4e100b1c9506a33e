"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``LoginView``          — POST /auth/login/
- ``MeView``             — GET /me/
- ``StaffListView``      — GET /staff/
- ``MaintainerListView`` — GET /maintainers/
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from .serializers import (
    CustomTokenObtainPairSerializer,
    MaintainerFilterSerializer,
    MaintainerSerializer,
    StaffFilterSerializer,
    StaffLoadSerializer,
    UserDetailSerializer,
)
from .services import MaintainerDirectoryService, StaffDirectoryService


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates a user via username or email plus
    password and returns a JWT pair together with the user profile.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=CustomTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(description="JWT access/refresh pair and user profile."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = serializer.validated_data
        payload["user"] = UserDetailSerializer(serializer.user).data

        return Response(payload, status=status.HTTP_200_OK)


class MeView(APIView):
    """
    GET /api/accounts/me/ → Retrieve the current user's profile.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user",
        responses={200: UserDetailSerializer},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        return Response(UserDetailSerializer(request.user).data, status=status.HTTP_200_OK)


class StaffListView(APIView):
    """
    GET /api/accounts/staff/?office=<id>

    Technical staff members with their current open-report load.
    Restricted to PROs and administrators (enforced in the service).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List technical staff",
        parameters=[
            OpenApiParameter(name="office", type=int, required=False, description="Restrict to one office."),
        ],
        responses={200: StaffLoadSerializer(many=True)},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        filter_serializer = StaffFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        staff = StaffDirectoryService.list_technical_staff(
            request.user,
            office_id=filter_serializer.validated_data.get("office"),
        )
        return Response(StaffLoadSerializer(staff, many=True).data, status=status.HTTP_200_OK)


class MaintainerListView(APIView):
    """
    GET /api/accounts/maintainers/?category=<id>

    External maintainers, optionally only those whose company services
    the given category.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List external maintainers",
        parameters=[
            OpenApiParameter(name="category", type=int, required=False, description="Category the company must service."),
        ],
        responses={
            200: MaintainerSerializer(many=True),
            404: OpenApiResponse(description="Category not found."),
        },
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        filter_serializer = MaintainerFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        maintainers = MaintainerDirectoryService.list_for_category(
            filter_serializer.validated_data.get("category"),
        )
        return Response(MaintainerSerializer(maintainers, many=True).data, status=status.HTTP_200_OK)
