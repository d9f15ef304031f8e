"""
JWT authentication that also records the authenticated user as the
current actor for activity logging.
"""

from rest_framework_simplejwt.authentication import JWTAuthentication

from apps.audit.context import set_current_actor


class ActorJWTAuthentication(JWTAuthentication):
    def authenticate(self, request):
        result = super().authenticate(request)
        if result is not None:
            user, _token = result
            set_current_actor(user)
        return result
