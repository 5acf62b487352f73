from django.urls import path
from . import views

app_name = 'leads'

urlpatterns = [
    path('leads/', views.lead_list_view, name='lead_list'),
    path('leads/create/', views.lead_create_view, name='lead_create'),
    path('leads/bulk-assign/', views.lead_bulk_assign_view, name='lead_bulk_assign'),
    path('leads/json/', views.lead_list_json_view, name='lead_list_json'),
    path('leads/<int:pk>/', views.lead_detail_view, name='lead_detail'),
    path('leads/<int:pk>/edit/', views.lead_edit_view, name='lead_edit'),
    path('leads/<int:pk>/update/', views.lead_update_view, name='lead_update'),
    path('leads/<int:pk>/delete/', views.lead_delete_view, name='lead_delete'),
    path('leads/<int:pk>/assign/', views.lead_assign_view, name='lead_assign'),
    path('leads/<int:pk>/activities/add/', views.lead_add_activity_view, name='lead_add_activity'),
    path('leads/<int:pk>/activities/json/', views.lead_activities_json_view, name='lead_activities_json'),
    path('leads/<int:pk>/json/', views.lead_json_view, name='lead_json'),
    path('leads/<int:pk>/quick-update/', views.lead_quick_update_view, name='lead_quick_update'),
    path('my-leads/', views.my_leads_view, name='my_leads'),
]
