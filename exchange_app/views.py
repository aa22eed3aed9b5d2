# exchange_app/views.py
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.shortcuts import render, redirect, get_object_or_404
from django.views.decorators.http import require_POST
import logging

from .metadata import build_offer_metadata
from .models import Offer
from .queries import get_newest_offers, get_offer, get_user_profile
from .utils.disclosure import (
    Disclosure,
    build_contact_panel,
    get_viewer_id,
    resolve_disclosure,
)
from .utils.display import (
    format_price,
    format_published_at,
    format_type_badge,
    resolve_back_link,
)
from .utils.impact import OfferType, get_impact_profile

logger = logging.getLogger(__name__)

NEWEST_OFFERS_COUNT = 5


def home(request):
    sections = []
    for offer_type in (Offer.Type.OBJET, Offer.Type.SERVICE, Offer.Type.CONNAISSANCE):
        sections.append(
            {
                "label": offer_type.label,
                "back_link": resolve_back_link(offer_type.value),
                "offers": get_newest_offers(offer_type.value, limit=NEWEST_OFFERS_COUNT),
            }
        )
    return render(request, "home.html", {"sections": sections})


def offer_list(request, offer_type):
    """Display all offers of one section, newest first"""
    context = {
        "offer_type": offer_type,
        "title": Offer.Type(offer_type).label,
        "offers": get_newest_offers(offer_type),
    }
    return render(request, "offer_list.html", context)


def offer_detail(request, offer_id):
    """Display an offer with its impact panel and the author's contact panel"""
    try:
        offer = get_offer(offer_id)
        if offer is None:
            logger.warning(f"Offer {offer_id} not found")
            context = {"metadata": build_offer_metadata(None)}
            return render(request, "offer_not_found.html", context, status=404)

        author_profile = get_user_profile(offer.author_id)
        # request.user is lazy, the session and user are read here
        viewer_id = get_viewer_id(request)
    except DatabaseError as e:
        logger.error(f"Error loading offer {offer_id}: {str(e)}", exc_info=True)
        return render(request, "offer_unavailable.html", status=503)

    offer_type = OfferType.parse(offer.type)
    disclosure = resolve_disclosure(viewer_id, offer.author_id)

    # Summary embedded with the offer; helped count comes from the full profile
    summary = getattr(offer.author, "profile", None)
    author = {
        "pseudo": offer.author.username,
        "city": summary.city if summary else "",
        "postal_code": summary.postal_code if summary else "",
        "bio": summary.description if summary else None,
        "nb_people_helped": (author_profile.nb_people_helped if author_profile else 0) or 0,
    }

    context = {
        "offer": offer,
        "metadata": build_offer_metadata(offer, author_profile),
        "back_link": resolve_back_link(offer_type),
        "type_badge": format_type_badge(offer.type),
        "published_at": format_published_at(offer.created_at),
        "tags": offer.tag_list,
        "paragraphs": offer.paragraphs,
        "price_label": format_price(offer.price),
        "is_free": offer.is_free,
        "impact": get_impact_profile(offer_type),
        "author": author,
        "disclosure": disclosure.value,
        "contact_panel": build_contact_panel(disclosure, offer, author_profile),
    }
    return render(request, "offer_detail.html", context)


@login_required
@require_POST
def delete_offer(request, offer_id):
    """Delete an offer; only its author may do so"""
    offer = get_object_or_404(Offer, id=offer_id)

    if resolve_disclosure(request.user.pk, offer.author_id) is not Disclosure.OWNER:
        logger.warning(
            f"User {request.user.pk} tried to delete offer {offer.id} owned by {offer.author_id}"
        )
        messages.error(request, "Vous n'êtes pas autorisé à supprimer cette offre.")
        return redirect("exchange_app:offer_detail", offer_id=offer.id)

    back_link = resolve_back_link(offer.type)
    offer.delete()
    logger.info(f"Offer {offer_id} deleted by user {request.user.pk}")
    messages.success(request, "Votre offre a été supprimée.")
    return redirect(back_link.href)
