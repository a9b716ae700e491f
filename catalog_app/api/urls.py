from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import AreaViewSet, BusinessViewSet, CategoryViewSet, CityViewSet, TourismPlaceViewSet

router = DefaultRouter()
router.register(r'cities', CityViewSet, basename='city')
router.register(r'areas', AreaViewSet, basename='area')
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'businesses', BusinessViewSet, basename='business')
router.register(r'tourism', TourismPlaceViewSet, basename='tourism')

urlpatterns = [
    path('', include(router.urls)),
]
