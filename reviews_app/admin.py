from django.contrib import admin
from .models import Review, ReviewImage, ReviewReply


class ReviewImageInline(admin.TabularInline):
    model = ReviewImage
    extra = 0


class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'business', 'tourism_place', 'rating', 'status', 'edit_count', 'is_deleted', 'created_at')
    list_filter = ('status', 'is_deleted', 'is_verified', 'rating')
    search_fields = ('title', 'content', 'user__username')
    inlines = [ReviewImageInline]


class ReviewReplyAdmin(admin.ModelAdmin):
    list_display = ('id', 'review', 'replied_by', 'created_at')


admin.site.register(Review, ReviewAdmin)
admin.site.register(ReviewReply, ReviewReplyAdmin)
