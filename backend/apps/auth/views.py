"""
Authentication views: login, logout.

Token handling only; account management lives in apps.users.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from apps.auth.serializers import LoginSerializer, LogoutSerializer
from apps.users.serializers import UserSerializer

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([AllowAny])
def login(request):
    """
    POST /api/v1/auth/login

    Exchange email and password for an access / refresh token pair.
    """
    serializer = LoginSerializer(data=request.data, context={"request": request._request})
    try:
        serializer.is_valid(raise_exception=True)
    except AuthenticationFailed:
        logger.info("login_failed", extra={"operation": "auth.login", "entity_id": None})
        raise

    user = serializer.validated_data["user"]
    refresh = RefreshToken.for_user(user)

    logger.info("login_succeeded", extra={"operation": "auth.login", "entity_id": str(user.id)})
    return Response(
        {
            "data": {
                "token": str(refresh.access_token),
                "refreshToken": str(refresh),
                "user": UserSerializer(user).data,
            }
        },
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout(request):
    """
    POST /api/v1/auth/logout

    Blacklist the refresh token when one is supplied. Access tokens simply expire.
    """
    serializer = LogoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    refresh_token = serializer.validated_data["refresh_token"]
    if refresh_token:
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError:
            logger.info(
                "logout_token_rejected",
                extra={"operation": "auth.logout", "entity_id": str(request.user.id)},
            )

    return Response({"data": {"success": True}}, status=status.HTTP_200_OK)
