from django.contrib import admin
from .models import Offer, UserProfile


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "price", "city", "author", "created_at")
    list_filter = ("type", "created_at")
    search_fields = ("title", "description", "tags", "city")


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "city", "postal_code", "nb_people_helped")
    search_fields = ("user__username", "user__email", "city")
