from rest_framework import serializers

from .models import Like, Dislike


class LikeSerializer(serializers.ModelSerializer):
    """Like edge as returned to clients"""
    userId = serializers.UUIDField(source='user_id', read_only=True)
    likedById = serializers.UUIDField(source='liked_by_id', read_only=True)

    class Meta:
        model = Like
        fields = ['id', 'userId', 'likedById', 'created_at', 'updated_at']
        read_only_fields = fields


class DislikeSerializer(serializers.ModelSerializer):
    """Dislike edge as returned to clients"""
    userId = serializers.UUIDField(source='user_id', read_only=True)
    dislikedById = serializers.UUIDField(source='disliked_by_id', read_only=True)

    class Meta:
        model = Dislike
        fields = ['id', 'userId', 'dislikedById', 'created_at', 'updated_at']
        read_only_fields = fields


class PaginationSerializer(serializers.Serializer):
    """take/skip query parameters for edge listings"""
    take = serializers.IntegerField(required=False, default=20, min_value=0, max_value=100)
    skip = serializers.IntegerField(required=False, default=0, min_value=0)


class NearbyQuerySerializer(serializers.Serializer):
    radius_km = serializers.FloatField(required=False, min_value=0.001)


class NearbyUserSerializer(serializers.Serializer):
    """User plus distance, from a NearbyUser result"""
    id = serializers.UUIDField(source='user.id')
    name = serializers.CharField(source='user.name')
    email = serializers.EmailField(source='user.email')
    lat = serializers.FloatField(source='user.latitude')
    lon = serializers.FloatField(source='user.longitude')
    images = serializers.SerializerMethodField()
    distance_km = serializers.SerializerMethodField()

    def get_images(self, obj):
        request = self.context.get('request')
        urls = []
        for image in obj.user.images.all():
            url = image.image.url
            urls.append(request.build_absolute_uri(url) if request else url)
        return urls

    def get_distance_km(self, obj):
        return round(obj.distance_km, 3)
