"""
URL configuration for the local directory catalog project.

Every application exposes its endpoints through its own `api/urls.py`; they
are all mounted below `/api/`.
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('user_auth_app.api.urls')),
    path('api/', include('catalog_app.api.urls')),
    path('api/', include('reviews_app.api.urls')),
    path('api/', include('platform_stats_app.api.urls')),
]
