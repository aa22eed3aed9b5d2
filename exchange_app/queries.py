"""Read helpers used by the offer pages. Absence is returned as None."""

from .models import Offer, UserProfile


def get_offer(offer_id):
    """Fetch an offer with its author summary, or None."""
    try:
        return Offer.objects.select_related("author", "author__profile").get(pk=offer_id)
    except (Offer.DoesNotExist, ValueError, TypeError):
        return None


def get_user_profile(user_id):
    """Fetch the full profile of a user, or None (including for a None id)."""
    if user_id is None:
        return None
    return UserProfile.objects.select_related("user").filter(user_id=user_id).first()


def get_newest_offers(offer_type=None, limit=None):
    offers = Offer.objects.select_related("author")
    if offer_type is not None:
        offers = offers.filter(type__iexact=offer_type)
    offers = offers.order_by("-created_at")
    if limit is not None:
        offers = offers[:limit]
    return offers
