from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from exchange_app.models import Offer

DEMO_USERS = [
    {
        "username": "camille",
        "email": "camille@example.org",
        "city": "Lyon",
        "postal_code": "69003",
        "phone_number": "06 12 34 56 78",
        "description": "J'aime réparer et donner une seconde vie aux objets.",
        "nb_people_helped": 12,
    },
    {
        "username": "hugo",
        "email": "hugo@example.org",
        "city": "Nantes",
        "postal_code": "44000",
        "phone_number": "",
        "description": "",
        "nb_people_helped": 3,
    },
]

DEMO_OFFERS = [
    {
        "author": "camille",
        "type": Offer.Type.OBJET,
        "title": "Vélo de ville",
        "description": "Vélo en bon état.\nPneus neufs, révision faite.",
        "tags": "vélo,mobilité",
        "price": Decimal("40.00"),
        "city": "Lyon",
    },
    {
        "author": "hugo",
        "type": Offer.Type.SERVICE,
        "title": "Aide au déménagement",
        "description": "Disponible le week-end pour porter des cartons.",
        "tags": "entraide",
        "price": Decimal("0.00"),
        "city": "Nantes",
    },
    {
        "author": "camille",
        "type": Offer.Type.CONNAISSANCE,
        "title": "Initiation à la couture",
        "description": "Deux heures pour apprendre les bases de la machine à coudre.",
        "tags": "couture,atelier",
        "price": Decimal("15.00"),
        "city": "Lyon",
    },
]


class Command(BaseCommand):
    help = "Create demo users and offers for local development."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            default="troc-demo",
            help="Password given to the demo users (default: troc-demo).",
        )

    def handle(self, *args, **options):
        User = get_user_model()
        users = {}
        for data in DEMO_USERS:
            data = dict(data)
            username = data.pop("username")
            email = data.pop("email")
            user, created = User.objects.get_or_create(username=username, defaults={"email": email})
            if created:
                user.set_password(options["password"])
                user.save()
            # The profile is auto-created via signal, update it
            for field, value in data.items():
                setattr(user.profile, field, value)
            user.profile.save()
            users[username] = user

        if Offer.objects.exists():
            self.stdout.write(self.style.WARNING("Offers already present; skipping."))
            return

        for data in DEMO_OFFERS:
            data = dict(data)
            Offer.objects.create(author=users[data.pop("author")], **data)

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(DEMO_OFFERS)} offers."))
