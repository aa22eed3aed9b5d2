from .utils.display import resolve_back_link
from .models import Offer


def offer_sections(request):
    """
    Expose the offer sections to all templates (e.g., navbar links).
    """
    return {
        "offer_sections": [
            {"label": choice.label, "href": resolve_back_link(choice.value).href}
            for choice in Offer.Type
        ],
    }
