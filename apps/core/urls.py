from django.urls import path
from . import views


app_name = 'core'

urlpatterns = [
    path('', views.index_view, name='index'),
    path('dashboard/', views.dashboard_view, name='dashboard'),
    path('dashboard/settings/', views.settings_view, name='settings'),
    path('dashboard/performance/', views.team_performance_view, name='team_performance'),
    path('dashboard/performance/json/', views.team_performance_json_view, name='team_performance_json'),
]
