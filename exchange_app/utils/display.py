from collections import namedtuple
from decimal import Decimal

from django.urls import reverse
from django.utils import dateformat, timezone, translation

from .impact import OfferType

FREE_LABEL = "Gratuit"
CURRENCY_SYMBOL = "€"
PUBLISHED_FORMAT = "j F Y à H:i"

BackLink = namedtuple("BackLink", ["href", "label"])

# (url name, label) per section; anything else goes back home
BACK_LINKS = {
    OfferType.OBJET: ("exchange_app:objets", "Retour à la liste des objets"),
    OfferType.CONNAISSANCE: ("exchange_app:connaissances", "Retour à la liste des connaissances"),
    OfferType.SERVICE: ("exchange_app:services", "Retour à la liste des services"),
}
HOME_BACK_LINK = ("exchange_app:home", "Retour à l'accueil")


def resolve_back_link(offer_type):
    """Return the (href, label) pair leading back to the offer's section."""
    if not isinstance(offer_type, OfferType):
        offer_type = OfferType.parse(offer_type)
    url_name, label = BACK_LINKS.get(offer_type, HOME_BACK_LINK)
    return BackLink(reverse(url_name), label)


def format_price(price):
    """
    Format a stored price for the price badge.

    Zero is shown as free; any other value is passed through as-is with the
    euro sign, without trailing decimal zeros (15 -> "15 €", 12.50 -> "12.5 €").
    """
    amount = Decimal(str(price))
    if amount == 0:
        return FREE_LABEL
    if amount == amount.to_integral_value():
        text = str(int(amount))
    else:
        text = format(amount.normalize(), "f")
    return f"{text} {CURRENCY_SYMBOL}"


def format_published_at(value, language="fr"):
    """Locale-formatted publish date, e.g. "5 mars 2025 à 14:07"."""
    with translation.override(language):
        return dateformat.format(timezone.localtime(value), PUBLISHED_FORMAT)


def format_type_badge(offer_type):
    return (offer_type or "").capitalize()
