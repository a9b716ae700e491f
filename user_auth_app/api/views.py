from rest_framework import status
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.authtoken.models import Token
from rest_framework.authtoken.views import ObtainAuthToken

from user_auth_app.roles import get_role, set_role
from .permissions import IsAdminRole
from .serializers import RegistrationSerializer, CustomAuthTokenSerializer, RoleUpdateSerializer


def _account_payload(user, token):
    """Builds the response body shared by registration and login."""
    return {
        'token': token.key,
        'username': user.username,
        'email': user.email,
        'user_id': user.id,
        'role': get_role(user.id),
    }


class RegistrationView(APIView):
    """
    Handles new user registration.

    This endpoint allows any unauthenticated user to create a new account.
    Upon successful registration it returns an authentication token for
    immediate login. New accounts always start with the 'user' role.

    Endpoint:
        POST /api/registration/

    Responses:
        - 201 Created: Returns the auth token, basic user details and the role.
        - 400 Bad Request: The provided data was invalid (e.g., passwords
          don't match, email already exists).
    """
    permission_classes = [AllowAny]

    def post(self, request):
        """Processes the user registration request."""
        serializer = RegistrationSerializer(data=request.data)

        if serializer.is_valid():
            saved_account = serializer.save()
            token, created = Token.objects.get_or_create(user=saved_account)
            return Response(_account_payload(saved_account, token), status=status.HTTP_201_CREATED)
        else:
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class CustomLoginView(ObtainAuthToken):
    """
    Handles user authentication and token generation.

    Endpoint:
        POST /api/login/

    Responses:
        - 200 OK: Returns the auth token, basic user details and the role.
        - 400 Bad Request: Authentication failed (invalid credentials, missing fields).
    """
    permission_classes = [AllowAny]
    serializer_class = CustomAuthTokenSerializer

    def post(self, request):
        """Processes the user login request."""
        serializer = self.serializer_class(
            data=request.data,
            context={'request': request}
        )

        if serializer.is_valid():
            user = serializer.validated_data['user']
            token, created = Token.objects.get_or_create(user=user)
            return Response(_account_payload(user, token), status=status.HTTP_200_OK)
        else:
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class UserRoleView(APIView):
    """
    Lets an administrator change the role of a user.

    Endpoint:
        PATCH /api/users/{user_id}/role/

    Request Body:
        - role (str): 'user', 'business_owner' or 'admin'.
    """
    permission_classes = [IsAdminRole]

    def patch(self, request, pk):
        serializer = RoleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = set_role(pk, serializer.validated_data['role'])
        return Response({'user_id': pk, 'role': role}, status=status.HTTP_200_OK)
