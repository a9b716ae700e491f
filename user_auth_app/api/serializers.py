from rest_framework import serializers
from django.contrib.auth.models import User
from django.contrib.auth import authenticate
from user_auth_app.models import UserProfile


class RegistrationSerializer(serializers.ModelSerializer):
    """
    Handles the registration of a new user.

    This serializer validates user input, confirms passwords, and creates a new
    `User`. The matching `UserProfile` is created by the post-save signal with
    the plain 'user' role; the registration only fills in the display name.
    Roles cannot be chosen at registration time.

    Input Fields:
        - username (str): The desired username. Must be unique.
        - email (str): The user's email address. Must be unique.
        - full_name (str, optional): The name shown next to reviews.
        - password (str): The user's password.
        - repeated_password (str): The password for confirmation. Must match 'password'.
    """
    repeated_password = serializers.CharField(
        style={'input_type': 'password'},
        write_only=True
    )
    full_name = serializers.CharField(write_only=True, required=False, allow_blank=True, max_length=150)

    class Meta:
        model = User
        fields = ['username', 'email', 'full_name', 'password', 'repeated_password']
        extra_kwargs = {
            'password': {'write_only': True}
        }

    def validate(self, data):
        """
        Checks that both passwords match and that the email is not taken yet.
        """
        if data['password'] != data['repeated_password']:
            raise serializers.ValidationError({'password': 'Passwords must match.'})

        if User.objects.filter(email=data['email']).exists():
            raise serializers.ValidationError({'email': 'This email address already exists.'})

        return data

    def create(self, validated_data):
        """
        Creates the user with a hashed password and stores the display name on the
        profile that the signal has just created.
        """
        user = User.objects.create_user(
            username=validated_data['username'],
            email=validated_data['email'],
            password=validated_data['password']
        )

        full_name = validated_data.get('full_name', '').strip()
        if full_name:
            UserProfile.objects.filter(user=user).update(full_name=full_name)

        return user


class CustomAuthTokenSerializer(serializers.Serializer):
    """
    Authenticates a user based on username and password.

    On success the authenticated user object is attached to the validated data
    so the view can issue a token for it.
    """
    username = serializers.CharField()
    password = serializers.CharField(
        label="Password",
        style={'input_type': 'password'},
        trim_whitespace=False
    )

    def validate(self, attrs):
        username = attrs.get('username')
        password = attrs.get('password')

        if not (username and password):
            msg = 'Must include "username" and "password".'
            raise serializers.ValidationError(msg, code='authorization')

        user = authenticate(
            request=self.context.get('request'),
            username=username,
            password=password
        )

        if not user:
            msg = 'Unable to log in with provided credentials.'
            raise serializers.ValidationError(msg, code='authorization')

        attrs['user'] = user
        return attrs


class RoleUpdateSerializer(serializers.Serializer):
    """Validates the payload of the admin-only role change endpoint."""
    role = serializers.ChoiceField(choices=UserProfile.Role.choices)
