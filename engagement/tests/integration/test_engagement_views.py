from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from engagement.domain.models import Engagement
from marketplace.tests.factories import AdminFactory, CommentFactory, EngagementFactory, UserFactory
from rankings.domain.models import UserRanking


class EngagementViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = UserFactory()
        self.owner = UserFactory()
        self.client.force_authenticate(user=self.user)

    def _react_url(self, content_id="post-1"):
        return reverse("engagement:react", kwargs={"content_id": content_id, "content_type": "Post"})

    def test_react_then_duplicate(self):
        first = self.client.post(self._react_url(), {"owner_id": str(self.owner.id)}, format="json")
        second = self.client.post(self._react_url(), {"owner_id": str(self.owner.id)}, format="json")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data["kind"], "reaction")
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data["error"], "already_exists")
        ranking = UserRanking.objects.get(user=self.owner, category="content")
        self.assertEqual(ranking.score, 1)

    def test_unreact(self):
        EngagementFactory(user=self.user, content_id="post-1")

        response = self.client.delete(reverse("engagement:unreact", kwargs={"content_id": "post-1"}))
        missing = self.client.delete(reverse("engagement:unreact", kwargs={"content_id": "post-1"}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_malformed_owner_id(self):
        react = self.client.post(self._react_url(), {"owner_id": "not-a-uuid"}, format="json")
        reshare = self.client.post(
            reverse("engagement:reshare", kwargs={"content_id": "post-1", "content_type": "Post"}),
            {"owner_id": "not-a-uuid"},
            format="json",
        )

        for response in (react, reshare):
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data["error"], "validation_error")
            self.assertIn("owner_id", response.data["detail"])
        self.assertFalse(Engagement.objects.exists())

    def test_anonymous_cannot_react(self):
        self.client.force_authenticate(user=None)

        response = self.client.post(self._react_url(), {}, format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_comment_validation(self):
        url = reverse("engagement:comment", kwargs={"content_id": "post-1", "content_type": "Post"})

        blank = self.client.post(url, {"text": "   "}, format="json")
        too_long = self.client.post(url, {"text": "x" * 1001}, format="json")
        longest = self.client.post(url, {"text": "x" * 1000}, format="json")

        self.assertEqual(blank.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(too_long.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(longest.status_code, status.HTTP_201_CREATED)

    def test_delete_foreign_comment_forbidden(self):
        comment = CommentFactory(content_id="post-1")

        response = self.client.delete(reverse("engagement:delete-comment", kwargs={"comment_id": comment.id}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Engagement.objects.filter(id=comment.id).exists())

    def test_admin_deletes_foreign_comment(self):
        comment = CommentFactory(content_id="post-1")
        self.client.force_authenticate(user=AdminFactory())

        response = self.client.delete(reverse("engagement:delete-comment", kwargs={"comment_id": comment.id}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Engagement.objects.filter(id=comment.id).exists())

    def test_public_reads(self):
        self.client.force_authenticate(user=None)
        EngagementFactory(content_id="post-1")
        CommentFactory(content_id="post-1")
        CommentFactory(content_id="post-1")

        counts = self.client.get(reverse("engagement:counts", kwargs={"content_id": "post-1"}))
        comments = self.client.get(
            reverse("engagement:comments", kwargs={"content_id": "post-1"}), {"page_size": 1}
        )

        self.assertEqual(counts.status_code, status.HTTP_200_OK)
        self.assertEqual(counts.data, {"reactions": 1, "comments": 2, "reshares": 0, "total": 3})
        self.assertEqual(comments.status_code, status.HTTP_200_OK)
        self.assertEqual(comments.data["count"], 2)
        self.assertEqual(comments.data["num_pages"], 2)
        self.assertEqual(len(comments.data["results"]), 1)

    def test_bad_pagination(self):
        response = self.client.get(reverse("engagement:reactions", kwargs={"content_id": "post-1"}), {"page": "x"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_has_reacted(self):
        EngagementFactory(user=self.user, content_id="post-1")

        response = self.client.get(reverse("engagement:has-reacted", kwargs={"content_id": "post-1"}))

        self.assertEqual(response.data, {"has_reacted": True})

    def test_replies(self):
        comment = CommentFactory(content_id="post-1")
        CommentFactory(content_id="post-1", parent=comment)

        response = self.client.get(reverse("engagement:replies", kwargs={"comment_id": comment.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
