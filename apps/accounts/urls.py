from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [

    path('auth/', views.login_view, name='login'),
    path('auth/logout/', views.logout_view, name='logout'),
    path('dashboard/profile/', views.profile_view, name='profile'),
    path('dashboard/users/', views.user_list_view, name='user_list'),
    path('dashboard/users/create/', views.user_create_view, name='user_create'),
    path('dashboard/users/json/', views.user_list_json_view, name='user_list_json'),
    path('dashboard/users/<uuid:pk>/role/', views.user_update_role_view, name='user_update_role'),
]
