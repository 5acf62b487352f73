from django.contrib import admin
from django.urls import path, include

# Main URL Configuration
# Routes all requests to appropriate apps

urlpatterns = [

    path('admin/', admin.site.urls),
    path('', include('apps.core.urls')),
    path('', include('apps.accounts.urls')),
    path('dashboard/', include('apps.leads.urls')),

]

# Unknown paths render the not-found page
handler404 = 'apps.core.views.page_not_found_view'
