from rest_framework import serializers
from django.contrib.auth import authenticate
from .models import User


class UserSerializer(serializers.ModelSerializer):
    images = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "latitude",
            "longitude",
            "images",
        ]
        read_only_fields = fields

    def get_images(self, obj):
        """
        Absolute image URLs when a request is available, storage-relative otherwise.
        """
        request = self.context.get("request")
        urls = []
        for image in obj.images.all():
            if request:
                urls.append(request.build_absolute_uri(image.image.url))
            else:
                urls.append(image.image.url)
        return urls


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(
            request=self.context.get("request"),
            email=data["email"],
            password=data["password"],
        )
        if not user:
            raise serializers.ValidationError("Invalid credentials")
        return user


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)

    class Meta:
        model = User
        fields = ['name', 'email', 'password', 'latitude', 'longitude']

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already exists")
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            name=validated_data['name'],
            latitude=validated_data['latitude'],
            longitude=validated_data['longitude'],
        )


class ProfileUpdateSerializer(serializers.Serializer):
    """Partial update of name, password and position"""
    name = serializers.CharField(required=False, max_length=150)
    password = serializers.CharField(required=False, write_only=True, min_length=6)
    latitude = serializers.FloatField(required=False, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, min_value=-180, max_value=180)

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
