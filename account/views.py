# views.py
import logging

from rest_framework.response import Response
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import authenticate, get_user_model

from account.serializers import UserLoginSerializer, UserProfileSerializer, UserChangePasswordSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


# Generate Token manually
def get_tokens_for_user(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token)
    }


class UserLoginView(APIView):
    authentication_classes = []
    permission_classes = []

    def post(self, request, format=None):
        serializer = UserLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data['email']
        password = serializer.validated_data['password']

        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            return Response(
                {'errors': {'non_field_error': ['Email or Password is not valid']}},
                status=status.HTTP_404_NOT_FOUND
            )

        if not user.is_active:
            return Response(
                {"error": "Account is deactivated"},
                status=status.HTTP_403_FORBIDDEN
            )

        user = authenticate(email=email, password=password)
        if user is None:
            logger.info("Failed login for %s", email)
            return Response(
                {'errors': {'non_field_error': ['Email or Password is not valid']}},
                status=status.HTTP_404_NOT_FOUND
            )

        token = get_tokens_for_user(user)
        return Response({
            'token': token,
            'userID': user.id,
            'role': user.role_name,
            'msg': 'Login success'
        }, status=status.HTTP_200_OK)


class UserProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, format=None):
        serializer = UserProfileSerializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)


class UserChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, format=None):
        """
        Change password endpoint

        Request Body:
        {
            "old_password": "current_password",
            "new_password": "new_password123",
            "confirm_password": "new_password123"
        }
        """
        serializer = UserChangePasswordSerializer(data=request.data, context={'user': request.user})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(
            {'message': 'Password changed successfully!'},
            status=status.HTTP_200_OK
        )
