from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from services.interactions import get_interaction_gateway
from .serializers import (
    LikeSerializer,
    DislikeSerializer,
    PaginationSerializer,
    NearbyQuerySerializer,
    NearbyUserSerializer,
)


# ==================== Likes ====================

class LikeView(APIView):
    """
    POST   likes/<user_id>/  -> like that user
    DELETE likes/<like_id>/  -> remove that like
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        result = get_interaction_gateway().like(request.user.email, pk)
        return Response({
            'success': True,
            'message': result.message,
            'data': LikeSerializer(result.edge).data,
        }, status=status.HTTP_201_CREATED)

    def delete(self, request, pk):
        result = get_interaction_gateway().remove_like(pk)
        return Response({'success': True, 'message': result.message})


class LikeListView(APIView):
    """GET: likes given by the authenticated user (?take=&skip=)"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        page = PaginationSerializer(data=request.query_params)
        page.is_valid(raise_exception=True)

        likes = get_interaction_gateway().likes_given(request.user.email, **page.validated_data)
        return Response({'success': True, 'data': LikeSerializer(likes, many=True).data})


# ==================== Dislikes ====================

class DislikeView(APIView):
    """
    POST   dislikes/<user_id>/     -> dislike that user (409 if already disliked)
    DELETE dislikes/<dislike_id>/  -> remove that dislike
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        result = get_interaction_gateway().dislike(request.user.email, pk)
        return Response({
            'success': True,
            'message': result.message,
            'data': DislikeSerializer(result.edge).data,
        }, status=status.HTTP_201_CREATED)

    def delete(self, request, pk):
        result = get_interaction_gateway().remove_dislike(pk)
        return Response({'success': True, 'message': result.message})


class DislikeListView(APIView):
    """GET: dislikes given by the authenticated user (?take=&skip=)"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        page = PaginationSerializer(data=request.query_params)
        page.is_valid(raise_exception=True)

        dislikes = get_interaction_gateway().dislikes_given(request.user.email, **page.validated_data)
        return Response({'success': True, 'data': DislikeSerializer(dislikes, many=True).data})


# ==================== Discovery ====================

class NearbyUsersView(APIView):
    """
    GET: users near the authenticated user, closest first.

    Optional ?radius_km= overrides the default NEARBY_RADIUS_KM.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        query = NearbyQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        nearby = get_interaction_gateway().nearby(
            request.user.email,
            query.validated_data.get('radius_km'),
        )
        serialized = NearbyUserSerializer(nearby, many=True, context={'request': request})

        return Response({
            'success': True,
            'count': len(serialized.data),
            'data': serialized.data,
        })
