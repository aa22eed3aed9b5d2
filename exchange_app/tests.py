import dataclasses
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.contrib.auth.models import User
from django.core.management import call_command
from django.db import DatabaseError
from django.test import Client, SimpleTestCase, TestCase
from django.urls import reverse

from .metadata import (
    DEFAULT_DESCRIPTION,
    NOT_FOUND_TITLE,
    resolve_offer_metadata,
)
from .models import Offer, UserProfile
from .queries import get_offer, get_user_profile
from .utils.disclosure import Disclosure, build_contact_panel, resolve_disclosure
from .utils.display import (
    format_price,
    format_published_at,
    format_type_badge,
    resolve_back_link,
)
from .utils.impact import IMPACT_PROFILES, OfferType, get_impact_profile


def create_member(username, password="testpass123", **profile_fields):
    """Helper function to create a user and fill in the auto-created profile"""
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.org",
        password=password,
    )
    for field, value in profile_fields.items():
        setattr(user.profile, field, value)
    user.profile.save()
    return user


def create_offer(author, **fields):
    data = {
        "type": Offer.Type.OBJET,
        "title": "Vélo de ville",
        "description": "Vélo en bon état.\nPneus neufs.",
        "tags": "vélo,mobilité",
        "price": Decimal("15.00"),
        "city": "Lyon",
    }
    data.update(fields)
    return Offer.objects.create(author=author, **data)


class ImpactProfileTests(SimpleTestCase):
    """Tests for the category -> impact profile lookup"""

    def test_known_categories_any_casing(self):
        """Each known category resolves regardless of letter casing"""
        cases = {
            "objet": OfferType.OBJET,
            "OBJET": OfferType.OBJET,
            "Object": OfferType.OBJET,
            "service": OfferType.SERVICE,
            "SeRvIcE": OfferType.SERVICE,
            "connaissance": OfferType.CONNAISSANCE,
            "CONNAISSANCE": OfferType.CONNAISSANCE,
            "knowledge": OfferType.CONNAISSANCE,
        }
        for value, expected in cases.items():
            with self.subTest(value=value):
                self.assertIs(get_impact_profile(value), IMPACT_PROFILES[expected])

    def test_unknown_values_fall_back_to_default(self):
        """Empty, None and unrecognised strings all give the default profile"""
        default = IMPACT_PROFILES[OfferType.UNKNOWN]
        for value in ["", None, "xyz", "objets", "serv ice", "   "]:
            with self.subTest(value=value):
                self.assertIs(get_impact_profile(value), default)
                self.assertEqual(default.icon, "♻️")

    def test_non_string_values_fall_back_to_default(self):
        """Values that are not strings never raise"""
        for value in [42, 0, object(), ["objet"]]:
            with self.subTest(value=value):
                self.assertIs(OfferType.parse(value), OfferType.UNKNOWN)
                self.assertIs(get_impact_profile(value), IMPACT_PROFILES[OfferType.UNKNOWN])

    def test_exactly_four_distinct_profiles(self):
        values = ["objet", "service", "connaissance", "xyz", "OBJET", "", None]
        profiles = {id(get_impact_profile(value)) for value in values}
        self.assertEqual(len(profiles), 4)
        self.assertEqual(len(IMPACT_PROFILES), 4)

    def test_objet_profile_values(self):
        profile = get_impact_profile("objet")
        self.assertEqual(profile.icon, "🌱")
        self.assertEqual(profile.title, "Impact environnemental évité")
        self.assertEqual(profile.stats[0].value, "~6.5 kg CO2")
        self.assertEqual(profile.stats[0].label, "Émissions CO2 évitées")
        self.assertEqual(profile.stats[1].value, "40-70%")

    def test_every_profile_has_two_stats_and_a_source(self):
        for offer_type, profile in IMPACT_PROFILES.items():
            with self.subTest(offer_type=offer_type):
                self.assertEqual(len(profile.stats), 2)
                self.assertTrue(profile.source.url.startswith("https://"))
                self.assertTrue(profile.tip)

    def test_profiles_are_immutable(self):
        profile = get_impact_profile("service")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            profile.icon = "x"

    def test_lookup_accepts_enum_variant(self):
        self.assertIs(get_impact_profile(OfferType.SERVICE), IMPACT_PROFILES[OfferType.SERVICE])


class BackLinkTests(SimpleTestCase):
    """Tests for the back-navigation table"""

    def test_known_sections(self):
        self.assertEqual(
            resolve_back_link("objet"), ("/objets/", "Retour à la liste des objets")
        )
        self.assertEqual(
            resolve_back_link("connaissance"),
            ("/connaissances/", "Retour à la liste des connaissances"),
        )
        self.assertEqual(
            resolve_back_link("service"), ("/services/", "Retour à la liste des services")
        )

    def test_case_insensitive(self):
        self.assertEqual(resolve_back_link("OBJET").href, "/objets/")

    def test_unknown_section_goes_home(self):
        for value in ["xyz", "", None]:
            with self.subTest(value=value):
                self.assertEqual(resolve_back_link(value), ("/", "Retour à l'accueil"))


class DisplayFormattingTests(SimpleTestCase):
    """Tests for price, date and badge formatting"""

    def test_zero_price_is_free(self):
        self.assertEqual(format_price(0), "Gratuit")
        self.assertEqual(format_price(Decimal("0.00")), "Gratuit")

    def test_price_is_passed_through(self):
        self.assertEqual(format_price(15), "15 €")
        self.assertEqual(format_price(Decimal("15.00")), "15 €")
        self.assertEqual(format_price(Decimal("12.50")), "12.5 €")
        self.assertEqual(format_price(15.5), "15.5 €")

    def test_published_at_in_french_local_time(self):
        """5 March 2025 13:07 UTC is 14:07 in Paris"""
        value = datetime(2025, 3, 5, 13, 7, tzinfo=dt_timezone.utc)
        with self.settings(TIME_ZONE="Europe/Paris"):
            self.assertEqual(format_published_at(value), "5 mars 2025 à 14:07")

    def test_type_badge_is_capitalised(self):
        self.assertEqual(format_type_badge("objet"), "Objet")
        self.assertEqual(format_type_badge("SERVICE"), "Service")
        self.assertEqual(format_type_badge(None), "")


class DisclosureDecisionTests(SimpleTestCase):
    """Tests for the viewer/author disclosure decision"""

    def test_same_ids_is_owner(self):
        self.assertIs(resolve_disclosure(7, 7), Disclosure.OWNER)

    def test_different_ids_is_contact(self):
        self.assertIs(resolve_disclosure(7, 8), Disclosure.CONTACT)

    def test_no_viewer_is_anonymous(self):
        self.assertIs(resolve_disclosure(None, 8), Disclosure.ANONYMOUS)
        self.assertIs(resolve_disclosure(None, None), Disclosure.ANONYMOUS)

    def test_missing_author_never_matches(self):
        self.assertIs(resolve_disclosure(7, None), Disclosure.CONTACT)

    def test_zero_id_is_still_a_viewer(self):
        self.assertIs(resolve_disclosure(0, 0), Disclosure.OWNER)
        self.assertIs(resolve_disclosure(0, 1), Disclosure.CONTACT)


class ContactPanelTests(TestCase):
    """Tests for what each disclosure state puts in the panel context"""

    def setUp(self):
        self.author = create_member("author", phone_number="06 12 34 56 78")
        self.offer = create_offer(self.author)

    def test_owner_panel_only_has_delete_control(self):
        panel = build_contact_panel(Disclosure.OWNER, self.offer, self.author.profile)
        self.assertEqual(
            panel["delete_url"], reverse("exchange_app:delete_offer", args=[self.offer.id])
        )
        self.assertNotIn("email", panel)
        self.assertNotIn("phone", panel)

    def test_contact_panel_has_email_and_phone(self):
        panel = build_contact_panel(Disclosure.CONTACT, self.offer, self.author.profile)
        self.assertEqual(panel["email"], "author@example.org")
        self.assertEqual(panel["phone"], "06 12 34 56 78")
        self.assertNotIn("delete_url", panel)

    def test_contact_panel_without_phone(self):
        self.author.profile.phone_number = ""
        self.author.profile.save()
        panel = build_contact_panel(Disclosure.CONTACT, self.offer, self.author.profile)
        self.assertIsNone(panel["phone"])

    def test_anonymous_panel_has_no_private_data(self):
        panel = build_contact_panel(Disclosure.ANONYMOUS, self.offer)
        self.assertEqual(set(panel), {"state", "signin_url"})
        self.assertTrue(panel["signin_url"].startswith(reverse("exchange_app:signin")))


class QueryTests(TestCase):
    """Tests for the offer and profile lookups"""

    def test_missing_offer_is_none(self):
        self.assertIsNone(get_offer(99999))

    def test_missing_profile_is_none(self):
        self.assertIsNone(get_user_profile(None))
        self.assertIsNone(get_user_profile(99999))

    def test_profile_auto_created(self):
        """The UserProfile is auto-created via signal"""
        user = create_member("someone")
        self.assertEqual(get_user_profile(user.id), user.profile)
        self.assertEqual(user.profile.nb_people_helped, 0)

    def test_tag_list_drops_blanks(self):
        author = create_member("tagger")
        offer = create_offer(author, tags="vélo, mobilité,,")
        self.assertEqual(offer.tag_list, ["vélo", "mobilité"])
        offer.tags = ""
        self.assertEqual(offer.tag_list, [])


class OfferMetadataTests(TestCase):
    """Tests for the document head metadata"""

    def setUp(self):
        self.author = create_member("camille")

    def test_missing_offer(self):
        metadata = resolve_offer_metadata(99999)
        self.assertEqual(metadata.title, NOT_FOUND_TITLE)
        self.assertEqual(metadata.title, "Offre introuvable")
        self.assertIsNone(metadata.description)

    def test_title_and_description(self):
        offer = create_offer(self.author, description="Un vélo.")
        metadata = resolve_offer_metadata(offer.id)
        self.assertEqual(metadata.title, "Vélo de ville Lyon - camille")
        self.assertEqual(metadata.description, "Un vélo.")

    def test_description_truncated_to_150_characters(self):
        offer = create_offer(self.author, description="a" * 400)
        metadata = resolve_offer_metadata(offer.id)
        self.assertEqual(metadata.description, "a" * 150)

    def test_empty_description_uses_fallback(self):
        offer = create_offer(self.author, description="")
        metadata = resolve_offer_metadata(offer.id)
        self.assertEqual(metadata.description, DEFAULT_DESCRIPTION)

    def test_missing_profile_falls_back_to_username(self):
        offer = create_offer(self.author)
        UserProfile.objects.filter(user=self.author).delete()
        metadata = resolve_offer_metadata(offer.id)
        self.assertEqual(metadata.title, "Vélo de ville Lyon - camille")


class OfferDetailViewTests(TestCase):
    """End-to-end tests for the offer detail page"""

    def setUp(self):
        self.client = Client()
        self.author = create_member(
            "author",
            city="Lyon",
            postal_code="69003",
            description="Je répare tout",
            phone_number="06 12 34 56 78",
            nb_people_helped=7,
        )
        self.visitor = create_member("visitor")

    def detail_url(self, offer_id):
        return reverse("exchange_app:offer_detail", args=[offer_id])

    def test_unknown_offer_renders_not_found(self):
        """Scenario: offer id unknown to the store"""
        with self.assertLogs("exchange_app.views", level="WARNING"):
            response = self.client.get(self.detail_url(99999))

        self.assertEqual(response.status_code, 404)
        self.assertTemplateUsed(response, "offer_not_found.html")
        self.assertEqual(response.context["metadata"].title, "Offre introuvable")
        self.assertContains(response, "<title>Offre introuvable</title>", status_code=404)

    def test_owner_sees_delete_control(self):
        """Scenario: objet offer viewed by its author"""
        offer = create_offer(self.author, type="objet")
        self.client.force_login(self.author)

        response = self.client.get(self.detail_url(offer.id))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["disclosure"], "owner")
        self.assertContains(response, "C'est votre annonce.")
        self.assertContains(response, "Supprimer l'offre")
        self.assertContains(response, reverse("exchange_app:delete_offer", args=[offer.id]))
        self.assertNotContains(response, "mailto:")
        self.assertNotContains(response, "06 12 34 56 78")
        # Impact panel for objects
        self.assertContains(response, "🌱")
        self.assertContains(response, "~6.5 kg CO2")

    def test_other_member_sees_email_without_phone(self):
        """Scenario: service offer, author without phone, other member viewing"""
        self.author.profile.phone_number = ""
        self.author.profile.save()
        offer = create_offer(self.author, type="service")
        self.client.force_login(self.visitor)

        response = self.client.get(self.detail_url(offer.id))

        self.assertEqual(response.context["disclosure"], "contact")
        self.assertContains(response, "mailto:author@example.org")
        self.assertNotContains(response, "Téléphone")
        self.assertNotContains(response, "Supprimer l'offre")
        self.assertContains(response, "💰")
        self.assertContains(response, "30-50%")

    def test_other_member_sees_phone_when_present(self):
        offer = create_offer(self.author, type="service")
        self.client.force_login(self.visitor)

        response = self.client.get(self.detail_url(offer.id))

        self.assertContains(response, "Téléphone")
        self.assertContains(response, "06 12 34 56 78")

    def test_anonymous_with_unknown_category(self):
        """Scenario: unrecognised category viewed anonymously"""
        offer = create_offer(self.author, type="xyz")

        response = self.client.get(self.detail_url(offer.id))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["disclosure"], "anonymous")
        self.assertEqual(response.context["back_link"].href, "/")
        self.assertIs(response.context["impact"], IMPACT_PROFILES[OfferType.UNKNOWN])
        self.assertContains(response, "♻️")
        self.assertContains(response, "Connectez-vous")
        self.assertNotContains(response, "mailto:")
        self.assertNotContains(response, "06 12 34 56 78")
        self.assertNotContains(response, "Supprimer l'offre")

    def test_signin_link_returns_to_offer(self):
        offer = create_offer(self.author)
        response = self.client.get(self.detail_url(offer.id))
        signin_url = response.context["contact_panel"]["signin_url"]
        self.assertEqual(signin_url, f"/auth/signin/?next=%2Foffre%2F{offer.id}%2F")

    def test_page_content(self):
        offer = create_offer(
            self.author,
            type="connaissance",
            description="Premier paragraphe\nSecond paragraphe",
            tags="couture, atelier",
        )
        Offer.objects.filter(pk=offer.pk).update(
            created_at=datetime(2025, 3, 5, 13, 7, tzinfo=dt_timezone.utc)
        )

        with self.settings(TIME_ZONE="Europe/Paris"):
            response = self.client.get(self.detail_url(offer.id))

        context = response.context
        self.assertEqual(context["type_badge"], "Connaissance")
        self.assertEqual(context["tags"], ["couture", "atelier"])
        self.assertEqual(context["paragraphs"], ["Premier paragraphe", "Second paragraphe"])
        self.assertEqual(context["price_label"], "15 €")
        self.assertEqual(context["published_at"], "5 mars 2025 à 14:07")
        self.assertEqual(
            context["back_link"], ("/connaissances/", "Retour à la liste des connaissances")
        )
        self.assertEqual(context["author"]["nb_people_helped"], 7)
        self.assertEqual(context["metadata"].title, "Vélo de ville Lyon - author")
        self.assertContains(response, "<p>Premier paragraphe</p>", html=True)
        self.assertContains(response, "Je répare tout")
        self.assertContains(response, "Lyon, 69003")
        self.assertContains(response, "🧠")

    def test_free_offer_badge(self):
        offer = create_offer(self.author, price=Decimal("0.00"))
        response = self.client.get(self.detail_url(offer.id))
        self.assertEqual(response.context["price_label"], "Gratuit")
        self.assertContains(response, "Gratuit")

    def test_helped_count_defaults_to_zero_without_profile(self):
        offer = create_offer(self.author)
        UserProfile.objects.filter(user=self.author).delete()

        response = self.client.get(self.detail_url(offer.id))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["author"]["nb_people_helped"], 0)

    def test_store_failure_renders_unavailable(self):
        """A database error while reading is logged and shown as 503"""
        with mock.patch(
            "exchange_app.views.get_offer", side_effect=DatabaseError("database is locked")
        ):
            with self.assertLogs("exchange_app.views", level="ERROR"):
                response = self.client.get(self.detail_url(1))

        self.assertEqual(response.status_code, 503)
        self.assertTemplateUsed(response, "offer_unavailable.html")

    def test_profile_failure_renders_unavailable(self):
        """A database error while reading the author profile is shown as 503"""
        offer = create_offer(self.author)
        with mock.patch(
            "exchange_app.views.get_user_profile",
            side_effect=DatabaseError("database is locked"),
        ):
            with self.assertLogs("exchange_app.views", level="ERROR"):
                response = self.client.get(self.detail_url(offer.id))

        self.assertEqual(response.status_code, 503)
        self.assertTemplateUsed(response, "offer_unavailable.html")

    def test_session_failure_renders_unavailable(self):
        """A database error while resolving the signed-in viewer is shown as 503"""
        offer = create_offer(self.author)
        self.client.force_login(self.visitor)
        with mock.patch(
            "django.contrib.auth.get_user", side_effect=DatabaseError("database is locked")
        ):
            with self.assertLogs("exchange_app.views", level="ERROR"):
                response = self.client.get(self.detail_url(offer.id))

        self.assertEqual(response.status_code, 503)
        self.assertTemplateUsed(response, "offer_unavailable.html")
        self.assertNotContains(response, "mailto:", status_code=503)

    def test_non_numeric_id_is_404(self):
        response = self.client.get("/offre/abc/")
        self.assertEqual(response.status_code, 404)


class DeleteOfferTests(TestCase):
    """Tests for deleting offers"""

    def setUp(self):
        self.client = Client()
        self.owner = create_member("owner")
        self.other_user = create_member("other")
        self.offer = create_offer(self.owner, type="objet")
        self.url = reverse("exchange_app:delete_offer", args=[self.offer.id])

    def test_delete_requires_login(self):
        """Unauthenticated users are redirected to sign in"""
        response = self.client.post(self.url)

        self.assertEqual(response.status_code, 302)
        self.assertIn("signin", response.url.lower())
        self.assertEqual(Offer.objects.count(), 1)

    def test_delete_success_by_owner(self):
        self.client.force_login(self.owner)

        with self.assertLogs("exchange_app.views", level="INFO"):
            response = self.client.post(self.url)

        self.assertRedirects(response, "/objets/", fetch_redirect_response=False)
        self.assertEqual(Offer.objects.count(), 0)

    def test_delete_denied_for_non_owner(self):
        self.client.force_login(self.other_user)

        response = self.client.post(self.url, follow=True)

        self.assertEqual(Offer.objects.count(), 1)
        messages_list = list(response.context.get("messages", []))
        self.assertTrue(any("autorisé" in str(m) for m in messages_list))

    def test_delete_nonexistent_offer_returns_404(self):
        self.client.force_login(self.owner)
        url = reverse("exchange_app:delete_offer", args=[99999])

        response = self.client.post(url)

        self.assertEqual(response.status_code, 404)

    def test_delete_requires_post(self):
        self.client.force_login(self.owner)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 405)
        self.assertEqual(Offer.objects.count(), 1)


class SectionPagesTests(TestCase):
    """Tests for the home page and the per-section lists"""

    def setUp(self):
        self.author = create_member("author")
        self.velo = create_offer(self.author, type="objet", title="Vélo")
        self.cours = create_offer(self.author, type="connaissance", title="Cours de guitare")

    def test_section_lists_only_show_their_type(self):
        response = self.client.get(reverse("exchange_app:objets"))
        self.assertEqual(list(response.context["offers"]), [self.velo])

        response = self.client.get(reverse("exchange_app:connaissances"))
        self.assertEqual(list(response.context["offers"]), [self.cours])

        response = self.client.get(reverse("exchange_app:services"))
        self.assertEqual(list(response.context["offers"]), [])

    def test_home_lists_every_section(self):
        response = self.client.get(reverse("exchange_app:home"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context["sections"]), 3)
        self.assertEqual(len(response.context["offer_sections"]), 3)
        self.assertContains(response, "Cours de guitare")

    def test_requests_are_timed(self):
        with self.assertLogs("exchange_app.middleware", level="INFO") as logs:
            self.client.get(reverse("exchange_app:home"))
        self.assertTrue(any("GET" in line and "200" in line for line in logs.output))


class SeedOffersCommandTests(TestCase):
    def test_seed_creates_demo_offers_once(self):
        call_command("seed_offers", stdout=StringIO())
        call_command("seed_offers", stdout=StringIO())

        self.assertEqual(Offer.objects.count(), 3)
        camille = User.objects.get(username="camille")
        self.assertEqual(camille.profile.nb_people_helped, 12)
