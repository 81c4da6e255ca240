from django.urls import path

from engagement.api.views import EngagementViewSet

app_name = "engagement"

content = "content/<str:content_id>/"
typed_content = content + "type/<str:content_type>/"

urlpatterns = [
    path(content + "counts/", EngagementViewSet.as_view({"get": "counts"}), name="counts"),
    path(content + "reactions/", EngagementViewSet.as_view({"get": "reactions"}), name="reactions"),
    path(content + "comments/", EngagementViewSet.as_view({"get": "comments"}), name="comments"),
    path(content + "reshares/", EngagementViewSet.as_view({"get": "reshares"}), name="reshares"),
    path(content + "has-reacted/", EngagementViewSet.as_view({"get": "has_reacted"}), name="has-reacted"),
    path(content + "reaction/", EngagementViewSet.as_view({"delete": "unreact"}), name="unreact"),
    path(typed_content + "reaction/", EngagementViewSet.as_view({"post": "react"}), name="react"),
    path(typed_content + "comment/", EngagementViewSet.as_view({"post": "comment"}), name="comment"),
    path(typed_content + "reshare/", EngagementViewSet.as_view({"post": "reshare"}), name="reshare"),
    path("comments/<uuid:comment_id>/", EngagementViewSet.as_view({"delete": "delete_comment"}), name="delete-comment"),
    path("comments/<uuid:comment_id>/replies/", EngagementViewSet.as_view({"get": "replies"}), name="replies"),
]
