import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models

from utils.rbac import ROLE_ADMIN, ROLE_SELLER, ROLE_USER


class CustomUser(AbstractUser):
    """
    Local projection of an identity-provider account.

    Authentication happens upstream; we only keep the id, a display name and
    the role string the provider assigned.
    """

    ROLE_CHOICES = [
        (ROLE_USER, "User"),
        (ROLE_SELLER, "Seller"),
        (ROLE_ADMIN, "Admin"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Role system - simple field, compared verbatim by utils.rbac
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_USER)

    class Meta(AbstractUser.Meta):
        app_label = "authentication"

    def __str__(self):
        return self.username
