"""Title and description for the <head> of an offer page."""

from collections import namedtuple

from .queries import get_offer, get_user_profile

NOT_FOUND_TITLE = "Offre introuvable"
DEFAULT_DESCRIPTION = "Détail de l'annonce"
DESCRIPTION_LENGTH = 150

OfferMetadata = namedtuple("OfferMetadata", ["title", "description"])


def build_offer_metadata(offer, profile=None):
    if offer is None:
        return OfferMetadata(NOT_FOUND_TITLE, None)

    pseudo = profile.pseudo if profile is not None else offer.author.username
    description = (offer.description or "")[:DESCRIPTION_LENGTH] or DEFAULT_DESCRIPTION
    return OfferMetadata(f"{offer.title} {offer.city} - {pseudo}", description)


def resolve_offer_metadata(offer_id):
    """Look up the offer and its author and build the page metadata."""
    offer = get_offer(offer_id)
    if offer is None:
        return build_offer_metadata(None)
    return build_offer_metadata(offer, get_user_profile(offer.author_id))
