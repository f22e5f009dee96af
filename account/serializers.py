# serializers.py
from rest_framework import serializers
from account.models import User


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(max_length=128, style={'input_type': 'password'}, write_only=True)


class UserProfileSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source='role_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role']


class UserChangePasswordSerializer(serializers.Serializer):
    old_password = serializers.CharField(max_length=255, style={'input_type': 'password'}, write_only=True)
    new_password = serializers.CharField(max_length=255, style={'input_type': 'password'}, write_only=True)
    confirm_password = serializers.CharField(max_length=255, style={'input_type': 'password'}, write_only=True)

    def validate(self, attrs):
        old_password = attrs.get('old_password')
        new_password = attrs.get('new_password')
        confirm_password = attrs.get('confirm_password')
        user = self.context.get('user')

        if not user.check_password(old_password):
            raise serializers.ValidationError({"old_password": "Old password is not correct"})

        if new_password != confirm_password:
            raise serializers.ValidationError({"confirm_password": "New Password and Confirm Password doesn't match"})

        if old_password == new_password:
            raise serializers.ValidationError({"new_password": "New password cannot be same as old password"})

        if len(new_password) < 8:
            raise serializers.ValidationError({"new_password": "Password must be at least 8 characters long"})

        return attrs

    def save(self):
        user = self.context['user']
        user.set_password(self.validated_data['new_password'])
        user.save()
        return user
