"""
Decide what the contact panel of an offer page reveals to the viewer.

Three mutually exclusive outcomes:

* OWNER: the viewer wrote the offer. Only the delete control is exposed.
* CONTACT: a signed-in viewer who is not the author. Email (and phone when
  the author has one) are exposed.
* ANONYMOUS: nobody is signed in. Only a sign-in link is exposed.
"""

import enum
from typing import Optional

from django.conf import settings
from django.shortcuts import resolve_url
from django.urls import reverse
from django.utils.http import urlencode


class Disclosure(enum.Enum):
    OWNER = "owner"
    CONTACT = "contact"
    ANONYMOUS = "anonymous"


def get_viewer_id(request) -> Optional[int]:
    """Identity of the signed-in viewer, or None for anonymous requests."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return user.pk


def resolve_disclosure(viewer_id: Optional[int], author_id: Optional[int]) -> Disclosure:
    if viewer_id is None:
        return Disclosure.ANONYMOUS
    if author_id is not None and viewer_id == author_id:
        return Disclosure.OWNER
    return Disclosure.CONTACT


def build_contact_panel(disclosure: Disclosure, offer, profile=None) -> dict:
    """
    Build the template context for the contact/ownership panel.

    Each outcome only carries its own keys, so the template cannot show
    contact details to the owner or the delete control to anyone else.
    """
    if disclosure is Disclosure.OWNER:
        return {
            "state": disclosure.value,
            "delete_url": reverse("exchange_app:delete_offer", args=[offer.pk]),
        }

    if disclosure is Disclosure.CONTACT:
        phone = profile.phone_number if profile is not None else None
        return {
            "state": disclosure.value,
            "pseudo": offer.author.username,
            "email": offer.author.email,
            "phone": phone or None,
        }

    next_url = reverse("exchange_app:offer_detail", args=[offer.pk])
    return {
        "state": disclosure.value,
        "signin_url": f"{resolve_url(settings.LOGIN_URL)}?{urlencode({'next': next_url})}",
    }
