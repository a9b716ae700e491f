from django.urls import path

from .views import BaseInfoView, OwnerStatsView

urlpatterns = [
    path('base-info/', BaseInfoView.as_view(), name='base-info'),
    path('owner-stats/', OwnerStatsView.as_view(), name='owner-stats'),
]
