from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from rankings.api.serializers import (
    LeaderboardEntrySerializer,
    RankingCategorySerializer,
    RankingSummarySerializer,
    UpdateRankingRequestSerializer,
    UserRankingSerializer,
)
from rankings.domain.services import RankingService
from utils.api_errors import ErrorResponseSerializer, error_response
from utils.rbac import is_admin

LIMIT_PARAMETER = OpenApiParameter(name="limit", type=int, description="Number of entries (default: 10)")


def _parse_limit(request):
    raw = request.query_params.get("limit")
    if raw is None:
        return None
    try:
        limit = int(raw)
    except ValueError:
        return -1
    return limit if limit > 0 else -1


def _invalid_limit_response():
    return Response(
        {"error": "validation_error", "detail": "limit must be a positive integer"},
        status=status.HTTP_400_BAD_REQUEST,
    )


class RankingViewSet(viewsets.ViewSet):
    """Leaderboards and per-user ranking summaries."""

    def get_permissions(self):
        if self.action in ("my_rankings", "update_ranking"):
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_service(self) -> RankingService:
        return container.ranking_service()

    @extend_schema(
        operation_id="rankings_categories",
        summary="List ranking categories",
        responses={200: RankingCategorySerializer(many=True)},
        tags=["Rankings"],
    )
    def categories(self, request):
        categories = self.get_service().get_categories()
        return Response(RankingCategorySerializer(categories, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="rankings_top",
        summary="Top users across all categories",
        description="""
        **What it returns:**
        - Users ordered by the sum of their scores, highest first
        - Ties broken by user id ascending
        - Each entry carries the user's per-category rankings
        """,
        parameters=[LIMIT_PARAMETER],
        responses={
            200: LeaderboardEntrySerializer(many=True),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid limit"),
        },
        tags=["Rankings"],
    )
    def top(self, request):
        limit = _parse_limit(request)
        if limit == -1:
            return _invalid_limit_response()

        result = self.get_service().get_top_users(limit)
        if not result.ok:
            return error_response(result)

        return Response(LeaderboardEntrySerializer(result.value, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="rankings_top_by_category",
        summary="Top users in one category",
        parameters=[LIMIT_PARAMETER],
        responses={
            200: UserRankingSerializer(many=True),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown category or invalid limit"),
        },
        tags=["Rankings"],
    )
    def top_by_category(self, request, category=None):
        limit = _parse_limit(request)
        if limit == -1:
            return _invalid_limit_response()

        result = self.get_service().get_top_users_by_category(category, limit)
        if not result.ok:
            return error_response(result)

        return Response(UserRankingSerializer(result.value, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="rankings_user_summary",
        summary="Ranking summary of a user",
        responses={200: RankingSummarySerializer},
        tags=["Rankings"],
    )
    def user_rankings(self, request, user_id=None):
        result = self.get_service().get_user_ranking_summary(user_id)
        if not result.ok:
            return error_response(result)

        return Response(RankingSummarySerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="rankings_my_summary",
        summary="Ranking summary of the authenticated user",
        responses={200: RankingSummarySerializer},
        tags=["Rankings"],
    )
    def my_rankings(self, request):
        result = self.get_service().get_user_ranking_summary(request.user.id)
        if not result.ok:
            return error_response(result)

        return Response(RankingSummarySerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="rankings_update",
        summary="Set or adjust a user's score (admin)",
        description="""
        **What it receives:**
        - `score`: absolute value to store, or
        - `adjustment`: delta added to the current score

        **Requirements:**
        - Caller must have the Admin role
        """,
        request=UpdateRankingRequestSerializer,
        responses={
            200: UserRankingSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid body or category"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Caller is not an admin"),
        },
        tags=["Rankings"],
    )
    def update_ranking(self, request, user_id=None, category=None):
        if not is_admin(request.user):
            return Response(
                {"error": "permission_denied", "detail": "Admin role required"},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = UpdateRankingRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "validation_error", "detail": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        service = self.get_service()
        data = serializer.validated_data
        if "score" in data:
            result = service.set_ranking(user_id, category, data["score"], actor_id=request.user.id)
        else:
            result = service.adjust_ranking(user_id, category, data["adjustment"], actor_id=request.user.id)

        if not result.ok:
            return error_response(result)

        return Response(UserRankingSerializer(result.value).data, status=status.HTTP_200_OK)
