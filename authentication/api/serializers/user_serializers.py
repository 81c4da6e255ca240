from django.contrib.auth import get_user_model
from rest_framework import serializers


User = get_user_model()


class MinimalUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "role"]
        read_only_fields = ["id", "username", "role"]
