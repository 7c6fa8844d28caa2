import logging
import math
import random
import uuid

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

logger = logging.getLogger(__name__)
User = get_user_model()

FIRST_NAMES = [
    "Alex", "Sam", "Jordan", "Taylor", "Morgan", "Riley", "Casey", "Jamie",
    "Avery", "Quinn", "Robin", "Charlie", "Drew", "Kai", "Noa", "Sasha",
]
LAST_NAMES = [
    "Smith", "Garcia", "Müller", "Rossi", "Kowalski", "Novak", "Silva",
    "Kim", "Nguyen", "Haddad", "Okafor", "Larsen", "Dubois", "Ivanova",
]


def _random_position(rng, center_lat, center_lon, spread_km):
    """Uniform point within spread_km of the center, or anywhere if no center."""
    if center_lat is None or center_lon is None:
        return rng.uniform(-90, 90), rng.uniform(-180, 180)

    distance = spread_km * math.sqrt(rng.random())
    bearing = rng.uniform(0, 2 * math.pi)
    lat = center_lat + (distance * math.cos(bearing)) / 111.32
    cos_lat = max(abs(math.cos(math.radians(center_lat))), 1e-6)
    lon = center_lon + (distance * math.sin(bearing)) / (111.32 * cos_lat)

    lat = max(-90.0, min(90.0, lat))
    lon = ((lon + 180.0) % 360.0) - 180.0
    return lat, lon


class Command(BaseCommand):
    help = "Create random users for local testing of nearby discovery."

    def add_arguments(self, parser):
        parser.add_argument(
            "--count",
            type=int,
            default=100,
            help="Number of users to create (default: 100).",
        )
        parser.add_argument(
            "--lat",
            type=float,
            help="Center latitude. Without --lat/--lon users are spread over the whole globe.",
        )
        parser.add_argument(
            "--lon",
            type=float,
            help="Center longitude.",
        )
        parser.add_argument(
            "--spread-km",
            type=float,
            default=20.0,
            help="Maximum distance from the center in km (default: 20).",
        )
        parser.add_argument(
            "--password",
            default="password123",
            help="Password set on every seeded user (default: password123).",
        )
        parser.add_argument(
            "--seed",
            type=int,
            help="Random seed for reproducible data.",
        )

    def handle(self, *args, **options):
        count = options["count"]
        center_lat = options["lat"]
        center_lon = options["lon"]
        spread_km = options["spread_km"]

        if count <= 0:
            raise CommandError("--count must be positive")
        if (center_lat is None) != (center_lon is None):
            raise CommandError("--lat and --lon must be given together")
        if spread_km <= 0:
            raise CommandError("--spread-km must be positive")

        rng = random.Random(options["seed"])
        batch = uuid.uuid4().hex[:6]

        with transaction.atomic():
            for n in range(count):
                lat, lon = _random_position(rng, center_lat, center_lon, spread_km)
                User.objects.create_user(
                    email=f"seed-{batch}-{n}@example.com",
                    password=options["password"],
                    name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                    latitude=round(lat, 6),
                    longitude=round(lon, 6),
                )

        logger.info("Seeded %d users (batch %s)", count, batch)
        self.stdout.write(
            self.style.SUCCESS(f"Seeded {count} users successfully (emails seed-{batch}-*@example.com).")
        )
