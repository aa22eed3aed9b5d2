"""
Static impact figures shown on an offer page.

Each offer category maps to one illustrative profile (an icon, two stat
cards, a tip and a cited source). The figures are fixed demo values and are
not computed from the offer itself.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class OfferType(enum.Enum):
    OBJET = "objet"
    SERVICE = "service"
    CONNAISSANCE = "connaissance"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "OfferType":
        """Map a stored category string to a variant, case-insensitively.

        Anything that is not a known category (None, empty, typos) is UNKNOWN.
        """
        if value is None:
            return cls.UNKNOWN
        return _ALIASES.get(str(value).strip().lower(), cls.UNKNOWN)


_ALIASES = {
    "objet": OfferType.OBJET,
    "object": OfferType.OBJET,
    "service": OfferType.SERVICE,
    "connaissance": OfferType.CONNAISSANCE,
    "knowledge": OfferType.CONNAISSANCE,
}


@dataclass(frozen=True)
class ImpactStat:
    value: str
    label: str
    description: str


@dataclass(frozen=True)
class ImpactSource:
    text: str
    url: str


@dataclass(frozen=True)
class ImpactProfile:
    icon: str
    title: str
    stats: Tuple[ImpactStat, ImpactStat]
    tip: str
    source: ImpactSource


IMPACT_PROFILES = {
    OfferType.OBJET: ImpactProfile(
        icon="🌱",
        title="Impact environnemental évité",
        stats=(
            ImpactStat(
                value="~6.5 kg CO2",
                label="Émissions CO2 évitées",
                description="par rapport à un achat neuf moyen",
            ),
            ImpactStat(
                value="40-70%",
                label="Économie réalisée",
                description="du prix neuf en moyenne",
            ),
        ),
        tip=(
            "En choisissant la seconde main, vous participez à l'économie "
            "circulaire et réduisez les déchets électroniques."
        ),
        source=ImpactSource(
            text="Source : ADEME - Impact environnemental du numérique",
            url="https://www.ademe.fr/sites/default/files/assets/documents/guide-pratique-face-cachee-numerique.pdf",
        ),
    ),
    OfferType.SERVICE: ImpactProfile(
        icon="💰",
        title="Économies réalisées",
        stats=(
            ImpactStat(
                value="30-50%",
                label="Économie moyenne",
                description="par rapport aux services professionnels moyens",
            ),
            ImpactStat(
                value="Gratuit",
                label="Échange de compétences",
                description="possibilité de troc de services",
            ),
        ),
        tip="Les services entre particuliers favorisent le lien social et l'entraide locale.",
        source=ImpactSource(
            text="Source : Étude sur l'économie collaborative - INSEE",
            url="https://www.insee.fr/fr/statistiques/4238589",
        ),
    ),
    OfferType.CONNAISSANCE: ImpactProfile(
        icon="🧠",
        title="Valeur de l'apprentissage",
        stats=(
            ImpactStat(
                value="50-200€",
                label="Coût formation évité",
                description="par rapport aux formations payantes en moyenne",
            ),
            ImpactStat(
                value="100%",
                label="Apprentissage personnalisé",
                description="adapté à vos besoins spécifiques",
            ),
        ),
        tip="Partager ses connaissances renforce les compétences et crée du lien social.",
        source=ImpactSource(
            text="Source : Observatoire de la formation - Centre Inffo",
            url="https://www.centre-inffo.fr/",
        ),
    ),
    OfferType.UNKNOWN: ImpactProfile(
        icon="♻️",
        title="Impact positif",
        stats=(
            ImpactStat(
                value="Significative",
                label="Réduction des déchets",
                description="en donnant une seconde vie",
            ),
            ImpactStat(
                value="Renforcée",
                label="Économie locale",
                description="par les échanges de proximité",
            ),
        ),
        tip="Chaque geste compte pour un mode de vie plus durable.",
        source=ImpactSource(
            text="Source : ADEME - Guide de l'économie circulaire",
            url="https://www.ademe.fr/economie-circulaire",
        ),
    ),
}


def get_impact_profile(offer_type) -> ImpactProfile:
    """Return the impact profile for a category string or OfferType."""
    if not isinstance(offer_type, OfferType):
        offer_type = OfferType.parse(offer_type)
    return IMPACT_PROFILES[offer_type]
