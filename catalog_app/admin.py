from django.contrib import admin
from .models import Area, Business, BusinessCategory, Category, City, TourismImage, TourismPlace


class AreaInline(admin.TabularInline):
    model = Area
    extra = 0
    prepopulated_fields = {'slug': ('name',)}


class CityAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'state', 'is_active')
    prepopulated_fields = {'slug': ('name',)}
    inlines = [AreaInline]


class CategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'feature_type', 'is_active', 'sort_order')
    list_filter = ('feature_type', 'is_active')
    prepopulated_fields = {'slug': ('name',)}


class BusinessCategoryInline(admin.TabularInline):
    model = BusinessCategory
    extra = 0


class BusinessAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'owner', 'city', 'status', 'is_featured', 'is_verified', 'created_at')
    list_filter = ('status', 'is_featured', 'is_verified')
    search_fields = ('name', 'slug')
    inlines = [BusinessCategoryInline]


class TourismImageInline(admin.TabularInline):
    model = TourismImage
    extra = 0
    fields = ('url', 'image_type', 'caption', 'is_featured', 'sort_order', 'is_active')


class TourismPlaceAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'category', 'city', 'status', 'is_featured', 'created_at')
    list_filter = ('status', 'is_featured')
    search_fields = ('name', 'slug')
    inlines = [TourismImageInline]


admin.site.register(City, CityAdmin)
admin.site.register(Category, CategoryAdmin)
admin.site.register(Business, BusinessAdmin)
admin.site.register(TourismPlace, TourismPlaceAdmin)
