from django.urls import path
from . import views

app_name = 'interactions'

urlpatterns = [
    # Discovery
    path('nearby/', views.NearbyUsersView.as_view(), name='nearby'),

    # Likes: POST takes the target user id, DELETE takes the like id
    path('likes/', views.LikeListView.as_view(), name='like-list'),
    path('likes/<str:pk>/', views.LikeView.as_view(), name='like'),

    # Dislikes: POST takes the target user id, DELETE takes the dislike id
    path('dislikes/', views.DislikeListView.as_view(), name='dislike-list'),
    path('dislikes/<str:pk>/', views.DislikeView.as_view(), name='dislike'),
]
