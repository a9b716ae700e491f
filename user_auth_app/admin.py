from django.contrib import admin
from .models import UserProfile


class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'full_name', 'role', 'created_at')
    list_filter = ('role',)
    search_fields = ('user__username', 'full_name')


admin.site.register(UserProfile, UserProfileAdmin)
