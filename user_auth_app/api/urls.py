from django.urls import path
from .views import RegistrationView, CustomLoginView, UserRoleView

urlpatterns = [
    path('registration/', RegistrationView.as_view(), name='registration'),
    path('login/', CustomLoginView.as_view(), name='login'),
    path('users/<int:pk>/role/', UserRoleView.as_view(), name='user-role'),
]
