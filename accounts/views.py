from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .serializers import UserSerializer


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def me(request):
    """
    Return basic info about the currently authenticated user.
    Used by the frontend dashboards for greetings and role-based redirects.
    """
    return Response(UserSerializer(request.user).data)
