from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from engagement.api.serializers import (
    CommentRequestSerializer,
    EngagementCountsSerializer,
    EngagementPageSerializer,
    EngagementSerializer,
    HasReactedSerializer,
    OwnerRequestSerializer,
)
from engagement.domain.services import EngagementService
from infrastructure.container import container
from utils.api_errors import ErrorResponseSerializer, error_response
from utils.pagination import pagination_params
from utils.rbac import is_admin

PAGINATION_PARAMETERS = [
    OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
    OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20)"),
]

READ_ACTIONS = ("counts", "reactions", "comments", "replies", "reshares")


def _validation_error(detail):
    return Response({"error": "validation_error", "detail": detail}, status=status.HTTP_400_BAD_REQUEST)


def _owner_serializer(request):
    serializer = OwnerRequestSerializer(data=request.data)
    serializer.is_valid()
    return serializer


class EngagementViewSet(viewsets.ViewSet):
    """Reactions, comments and reshares on content identified by an opaque id."""

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_service(self) -> EngagementService:
        return container.engagement_service()

    def _page_response(self, request, list_method, *args, **kwargs):
        try:
            page, page_size = pagination_params(request)
        except ValueError:
            return _validation_error("page and page_size must be integers")

        result = list_method(*args, page=page, page_size=page_size, **kwargs)
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = EngagementSerializer(result.value["results"], many=True).data
        return Response(response_data, status=status.HTTP_200_OK)

    # ===== Reads =====

    @extend_schema(
        operation_id="engagement_counts",
        summary="Engagement counts for a piece of content",
        responses={200: EngagementCountsSerializer},
        tags=["Engagement"],
    )
    def counts(self, request, content_id=None):
        result = self.get_service().counts(content_id)
        if not result.ok:
            return error_response(result)
        return Response(EngagementCountsSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="engagement_reactions",
        summary="List reactions on content (newest first)",
        parameters=PAGINATION_PARAMETERS,
        responses={200: EngagementPageSerializer},
        tags=["Engagement"],
    )
    def reactions(self, request, content_id=None):
        return self._page_response(request, self.get_service().list_reactions, content_id)

    @extend_schema(
        operation_id="engagement_comments",
        summary="List top-level comments on content (newest first)",
        parameters=PAGINATION_PARAMETERS
        + [OpenApiParameter(name="parent_id", type=str, description="List replies to this comment instead")],
        responses={200: EngagementPageSerializer},
        tags=["Engagement"],
    )
    def comments(self, request, content_id=None):
        parent_id = request.query_params.get("parent_id") or None
        return self._page_response(request, self.get_service().list_comments, content_id, parent_id=parent_id)

    @extend_schema(
        operation_id="engagement_replies",
        summary="List replies to a comment (newest first)",
        parameters=PAGINATION_PARAMETERS,
        responses={
            200: EngagementPageSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Comment not found"),
        },
        tags=["Engagement"],
    )
    def replies(self, request, comment_id=None):
        return self._page_response(request, self.get_service().list_replies, comment_id)

    @extend_schema(
        operation_id="engagement_reshares",
        summary="List reshares of content (newest first)",
        parameters=PAGINATION_PARAMETERS,
        responses={200: EngagementPageSerializer},
        tags=["Engagement"],
    )
    def reshares(self, request, content_id=None):
        return self._page_response(request, self.get_service().list_reshares, content_id)

    @extend_schema(
        operation_id="engagement_has_reacted",
        summary="Whether the authenticated user reacted to content",
        responses={200: HasReactedSerializer},
        tags=["Engagement"],
    )
    def has_reacted(self, request, content_id=None):
        has_reacted = self.get_service().has_user_reacted(request.user, content_id)
        return Response({"has_reacted": has_reacted}, status=status.HTTP_200_OK)

    # ===== Writes =====

    @extend_schema(
        operation_id="engagement_react",
        summary="React to content",
        description="""
        **What it receives:**
        - `content_id` and `content_type` in the URL
        - Optional `owner_id`: content owner credited in the content ranking

        **Errors:**
        - 409 if the user already reacted to this content
        """,
        request=OwnerRequestSerializer,
        responses={
            201: EngagementSerializer,
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Already reacted"),
        },
        tags=["Engagement"],
    )
    def react(self, request, content_id=None, content_type=None):
        owner = _owner_serializer(request)
        if owner.errors:
            return _validation_error(owner.errors)

        owner_id = owner.validated_data.get("owner_id")
        result = self.get_service().react(request.user, content_id, content_type, owner_id=owner_id)
        if not result.ok:
            return error_response(result)
        return Response(EngagementSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="engagement_unreact",
        summary="Remove the authenticated user's reaction",
        request=OwnerRequestSerializer,
        responses={
            204: None,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Reaction not found"),
        },
        tags=["Engagement"],
    )
    def unreact(self, request, content_id=None):
        owner = _owner_serializer(request)
        if owner.errors:
            return _validation_error(owner.errors)

        owner_id = owner.validated_data.get("owner_id")
        result = self.get_service().unreact(request.user, content_id, owner_id=owner_id)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="engagement_comment",
        summary="Comment on content",
        request=CommentRequestSerializer,
        responses={
            201: EngagementSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Empty or too long text"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Parent comment not found"),
        },
        tags=["Engagement"],
    )
    def comment(self, request, content_id=None, content_type=None):
        serializer = CommentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _validation_error(serializer.errors)

        data = serializer.validated_data
        result = self.get_service().comment(
            request.user,
            content_id,
            content_type,
            data["text"],
            parent_id=data.get("parent_id"),
            owner_id=data.get("owner_id"),
        )
        if not result.ok:
            return error_response(result)
        return Response(EngagementSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="engagement_delete_comment",
        summary="Delete a comment (author or admin)",
        request=OwnerRequestSerializer,
        responses={
            204: None,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the author"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Comment not found"),
        },
        tags=["Engagement"],
    )
    def delete_comment(self, request, comment_id=None):
        owner = _owner_serializer(request)
        if owner.errors:
            return _validation_error(owner.errors)

        owner_id = owner.validated_data.get("owner_id")
        result = self.get_service().delete_comment(
            comment_id, request.user, is_admin=is_admin(request.user), owner_id=owner_id
        )
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="engagement_reshare",
        summary="Reshare content",
        request=OwnerRequestSerializer,
        responses={201: EngagementSerializer},
        tags=["Engagement"],
    )
    def reshare(self, request, content_id=None, content_type=None):
        owner = _owner_serializer(request)
        if owner.errors:
            return _validation_error(owner.errors)

        owner_id = owner.validated_data.get("owner_id")
        result = self.get_service().reshare(request.user, content_id, content_type, owner_id=owner_id)
        if not result.ok:
            return error_response(result)
        return Response(EngagementSerializer(result.value).data, status=status.HTTP_201_CREATED)
