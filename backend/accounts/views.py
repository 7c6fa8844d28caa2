import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from common.exceptions import InvalidInputError, UnauthorizedError
from .serializers import (
    RegisterSerializer,
    LoginSerializer,
    UserSerializer,
    ProfileUpdateSerializer,
)
from .services import issue_tokens

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    """
    Register a new user at a position

    POST Body:
    {
        "name": "Jane",
        "email": "jane@example.com",
        "password": "password123",
        "latitude": 52.52,
        "longitude": 13.405
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User registered: %s", user.email)

        return Response({
            'message': 'User registered successfully',
            'user': UserSerializer(user, context={'request': request}).data,
            'tokens': issue_tokens(user),
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    Login with email and password to get JWT tokens

    POST Body:
    {
        "email": "jane@example.com",
        "password": "password123"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            logger.warning("Login failed for %s", request.data.get('email'))
            raise UnauthorizedError("Invalid credentials")

        user = serializer.validated_data

        return Response({
            "message": "Login successful",
            "user": UserSerializer(user, context={'request': request}).data,
            "tokens": issue_tokens(user),
        }, status=status.HTTP_200_OK)


class RefreshTokenView(APIView):
    """
    Refresh JWT access token

    POST Body:
    {
        "refresh": "your_refresh_token"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        refresh_token = request.data.get('refresh')

        if not refresh_token:
            raise InvalidInputError("Refresh token is required")

        try:
            refresh = RefreshToken(refresh_token)
            return Response({
                'access': str(refresh.access_token)
            })
        except TokenError:
            raise UnauthorizedError("Invalid refresh token")


class ProfileView(APIView):
    """
    GET -> authenticated user's profile
    PUT -> partial update of name, password, latitude, longitude
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            'success': True,
            'data': UserSerializer(request.user, context={'request': request}).data,
        })

    def put(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User updated: %s", user.email)

        return Response({
            'success': True,
            'message': 'User updated successfully',
            'data': UserSerializer(user, context={'request': request}).data,
        })
