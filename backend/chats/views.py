"""
Chats app ViewSets — thin wrappers around ``chats.services``.

Endpoints
---------
GET  /api/chats/                        → chats of the authenticated user
GET  /api/chats/report/{report_id}/     → the user's chats about one report
GET  /api/chats/{id}/messages/          → messages of a chat
POST /api/chats/{id}/messages/          → send a message
"""

from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from drf_spectacular.utils import OpenApiResponse, extend_schema

from .serializers import ChatSerializer, MessageCreateSerializer, MessageSerializer
from .services import ChatQueryService, MessageService


class ChatViewSet(viewsets.ViewSet):

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="My chats",
        responses={200: ChatSerializer(many=True)},
        tags=["Chats"],
    )
    def list(self, request: Request) -> Response:
        chats = ChatQueryService.list_for_user(request.user.pk)
        return Response(ChatSerializer(chats, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Chats of a report",
        responses={
            200: ChatSerializer(many=True),
            403: OpenApiResponse(description="Not involved in the report."),
            404: OpenApiResponse(description="Report not found."),
        },
        tags=["Chats"],
    )
    @action(detail=False, methods=["get"], url_path=r"report/(?P<report_id>\d+)")
    def for_report(self, request: Request, report_id: str = None) -> Response:
        chats = ChatQueryService.list_for_report(int(report_id), request.user.pk)
        return Response(ChatSerializer(chats, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        methods=["GET"],
        summary="Chat messages",
        responses={
            200: MessageSerializer(many=True),
            403: OpenApiResponse(description="Not a participant."),
            404: OpenApiResponse(description="Chat not found."),
        },
        tags=["Chats"],
    )
    @extend_schema(
        methods=["POST"],
        summary="Send a message",
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Empty message."),
            403: OpenApiResponse(description="Not a participant."),
            404: OpenApiResponse(description="Chat not found."),
        },
        tags=["Chats"],
    )
    @action(detail=True, methods=["get", "post"], url_path="messages")
    def messages(self, request: Request, pk: int = None) -> Response:
        if request.method == "POST":
            serializer = MessageCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            message = MessageService.send_message(
                int(pk),
                request.user.pk,
                serializer.validated_data["text"],
            )
            return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

        messages = MessageService.list_messages(int(pk), request.user.pk)
        return Response(MessageSerializer(messages, many=True).data, status=status.HTTP_200_OK)
