from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.products.models import Product
from modules.promotions.constants import DayOfWeek, PromotionType
from modules.promotions.models import Promotion, PromotionWeeklyRule


class Command(BaseCommand):
    help = "Seed database with a small food-truck menu for development."

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_products()
        promotions_created = self._seed_promotions(products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"promotions={promotions_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="manager").exists():
            User.objects.create_user(
                "manager", password="manager123", is_staff=True
            )
            created += 1
        if not User.objects.filter(username="user").exists():
            User.objects.create_user("user", password="user123")
            created += 1
        return created

    def _seed_products(self) -> dict[str, Product]:
        self.stdout.write("Creating products...")
        products: dict[str, Product] = {}
        menu = [
            ("Classic Burger", "Beef patty, cheddar, pickles", Decimal("28.90")),
            ("Veggie Burger", "Chickpea patty, tomato, lettuce", Decimal("26.90")),
            ("Fries", "Hand-cut, sea salt", Decimal("12.00")),
            ("Onion Rings", "Beer-battered", Decimal("14.00")),
            ("Lemonade", "Fresh squeezed", Decimal("8.50")),
            ("Soda", "Can, 350ml", Decimal("6.00")),
        ]
        for name, description, price in menu:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={"description": description, "price": price, "is_active": True},
            )
            products[name] = product
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_promotions(self, products: dict[str, Product]) -> int:
        self.stdout.write("Creating promotions...")
        created = 0
        today = timezone.localdate()

        combo, was_created = Promotion.objects.get_or_create(
            name="Burger Week Combo",
            defaults={
                "description": "Classic burger, fries and a soda",
                "price": Decimal("39.90"),
                "type": PromotionType.TEMPORARY,
                "starts_at": today,
                "ends_at": today + timedelta(days=7),
            },
        )
        if was_created:
            combo.products.set(
                [products["Classic Burger"], products["Fries"], products["Soda"]]
            )
            created += 1

        happy_hour, was_created = Promotion.objects.get_or_create(
            name="Happy Hour Rings",
            defaults={
                "description": "Onion rings and lemonade on weekday evenings",
                "price": Decimal("18.00"),
                "type": PromotionType.RECURRING,
            },
        )
        if was_created:
            happy_hour.products.set([products["Onion Rings"], products["Lemonade"]])
            PromotionWeeklyRule.objects.bulk_create(
                PromotionWeeklyRule(
                    promotion=happy_hour,
                    day_of_week=day,
                    start_time=time(17, 0),
                    end_time=time(19, 0),
                )
                for day in (DayOfWeek.MONDAY, DayOfWeek.WEDNESDAY, DayOfWeek.FRIDAY)
            )
            created += 1

        self.stdout.write(self.style.SUCCESS("Creating promotions... Done!"))
        return created
