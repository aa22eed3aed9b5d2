from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver


class UserProfile(models.Model):
    # Link to Django's built-in User (for authentication)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")

    city = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=10, blank=True)
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    description = models.TextField(max_length=500, blank=True, null=True)
    nb_people_helped = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.email} Profile"

    @property
    def pseudo(self):
        return self.user.username

    @property
    def email(self):
        return self.user.email


class Offer(models.Model):
    class Type(models.TextChoices):
        OBJET = "objet", "Objet"
        SERVICE = "service", "Service"
        CONNAISSANCE = "connaissance", "Connaissance"

    type = models.CharField(max_length=20, choices=Type.choices, db_index=True)
    title = models.CharField(max_length=120)
    description = models.TextField(blank=True, default="")
    tags = models.CharField(max_length=250, blank=True, default="")  # simple CSV
    price = models.DecimalField(
        default=Decimal("0.00"),
        decimal_places=2,
        max_digits=8,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    city = models.CharField(max_length=100)
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name="offers")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def is_free(self):
        return self.price == 0

    @property
    def tag_list(self):
        """Split the comma-separated tags, dropping blanks."""
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]

    @property
    def paragraphs(self):
        return (self.description or "").split("\n")


# Signal to automatically create profile when User is created
@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    if created:
        UserProfile.objects.create(user=instance)


@receiver(post_save, sender=User)
def save_user_profile(sender, instance, **kwargs):
    if hasattr(instance, "profile"):
        instance.profile.save()
