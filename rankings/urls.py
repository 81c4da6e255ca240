from django.urls import path

from rankings.api.views import RankingViewSet

app_name = "rankings"

urlpatterns = [
    path("categories/", RankingViewSet.as_view({"get": "categories"}), name="categories"),
    path("top/", RankingViewSet.as_view({"get": "top"}), name="top"),
    path(
        "top/category/<str:category>/",
        RankingViewSet.as_view({"get": "top_by_category"}),
        name="top-by-category",
    ),
    path("user/<uuid:user_id>/", RankingViewSet.as_view({"get": "user_rankings"}), name="user-rankings"),
    path(
        "user/<uuid:user_id>/category/<str:category>/",
        RankingViewSet.as_view({"put": "update_ranking"}),
        name="update-ranking",
    ),
    path("my/", RankingViewSet.as_view({"get": "my_rankings"}), name="my-rankings"),
]
