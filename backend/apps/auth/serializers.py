"""
Serializers for authentication endpoints.
"""

from django.contrib.auth import authenticate
from rest_framework import exceptions, serializers


class LoginSerializer(serializers.Serializer):
    """Validates credentials; the authenticated user lands in validated_data."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get("request"),
            email=attrs["email"],
            password=attrs["password"],
        )
        # ModelBackend also rejects inactive accounts here
        if user is None:
            raise exceptions.AuthenticationFailed("Invalid credentials")
        attrs["user"] = user
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(required=False, allow_blank=True)
    refreshToken = serializers.CharField(
        required=False, allow_blank=True, source="refresh_token_alias"
    )

    def validate(self, attrs):
        token = attrs.pop("refresh_token_alias", "") or attrs.get("refresh_token", "")
        return {"refresh_token": token}
