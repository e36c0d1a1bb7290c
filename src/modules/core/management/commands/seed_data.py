from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.clients.models import Client
from modules.core.exceptions import DomainError
from modules.materials.models import Material
from modules.orders.dtos import CreateOrderDTO
from modules.orders.models import Order
from modules.orders.views import build_order_service
from modules.stock.models import StockRecord
from modules.vehicles.constants import VehicleStatus
from modules.vehicles.models import Vehicle


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        clients = self._seed_clients()
        materials = self._seed_materials()
        vehicles = self._seed_vehicles()
        orders_created = self._seed_orders(clients, materials)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"clients={len(clients)}, "
                f"materials={len(materials)}, "
                f"vehicles={len(vehicles)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="operador").exists():
            User.objects.create_user("operador", password="operador123", is_staff=True)
            created += 1
        if not User.objects.filter(username="cliente").exists():
            User.objects.create_user("cliente", password="cliente123")
            created += 1
        return created

    def _seed_clients(self) -> list[Client]:
        self.stdout.write("Creating clients...")
        User = get_user_model()
        seed_clients = [
            ("Constructora Andina", "andina@example.com", "71234567", "Av. Blanco Galindo km 4, Cercado"),
            ("Edificaciones Sacaba", "sacaba@example.com", "72345678", "Calle Bolívar 120, Sacaba"),
            ("Obras Quillacollo", "quilla@example.com", "63456789", "Av. Martín Cárdenas 55, Quillacollo"),
            ("Inmobiliaria Centro", "centro@example.com", "74567890", "Calle España 300, Centro"),
        ]
        clients: list[Client] = []
        for name, email, phone, address in seed_clients:
            client, _ = Client.objects.get_or_create(
                email=email,
                defaults={"name": name, "phone": phone, "address": address},
            )
            clients.append(client)

        portal_user = User.objects.filter(username="cliente").first()
        if portal_user and not Client.objects.filter(user=portal_user).exists():
            clients[0].user = portal_user
            clients[0].save(update_fields=["user"])
        self.stdout.write(self.style.SUCCESS("Creating clients... Done!"))
        return clients

    def _seed_materials(self) -> list[Material]:
        self.stdout.write("Creating materials and stock...")
        catalog = [
            ("Arena fina", Decimal("120.00"), Decimal("60"), Decimal("20")),
            ("Arena gruesa", Decimal("110.00"), Decimal("45"), Decimal("20")),
            ("Grava 3/4", Decimal("150.00"), Decimal("30"), Decimal("15")),
            ("Ripio", Decimal("95.00"), Decimal("80"), Decimal("25")),
            ("Piedra manzana", Decimal("135.00"), Decimal("12"), Decimal("10")),
            ("Tierra vegetal", Decimal("80.00"), Decimal("25"), Decimal("10")),
        ]
        materials: list[Material] = []
        for name, price, available, minimum in catalog:
            material, _ = Material.objects.get_or_create(
                name=name,
                defaults={"price_per_unit": price, "description": f"{name} por m³"},
            )
            StockRecord.objects.get_or_create(
                material=material,
                defaults={"available_quantity": available, "minimum_quantity": minimum},
            )
            materials.append(material)
        self.stdout.write(self.style.SUCCESS("Creating materials and stock... Done!"))
        return materials

    def _seed_vehicles(self) -> list[Vehicle]:
        self.stdout.write("Creating vehicles...")
        fleet = [
            ("ABC123", "Volvo", "FMX", Decimal("10")),
            ("BCD234", "Mercedes-Benz", "Actros", Decimal("15")),
            ("CDE345", "Scania", "P410", Decimal("25")),
            ("DEF456", "Hino", "500", Decimal("8")),
            ("EFG567", "Volvo", "FMX", Decimal("12")),
        ]
        vehicles: list[Vehicle] = []
        for plate, brand, model, capacity in fleet:
            vehicle, _ = Vehicle.objects.get_or_create(
                plate=plate,
                defaults={
                    "brand": brand,
                    "model": model,
                    "capacity_m3": capacity,
                    "status": VehicleStatus.AVAILABLE,
                },
            )
            vehicles.append(vehicle)
        self.stdout.write(self.style.SUCCESS("Creating vehicles... Done!"))
        return vehicles

    def _seed_orders(self, clients: list[Client], materials: list[Material]) -> int:
        if Order.objects.exists():
            self.stdout.write("Orders already present, skipping.")
            return 0

        self.stdout.write("Creating orders...")
        service = build_order_service()
        staff_id = get_user_model().objects.filter(username="admin").values_list("id", flat=True).first()
        created = 0
        for index in range(8):
            client = random.choice(clients)
            material = random.choice(materials)
            dto = CreateOrderDTO(
                material_id=material.id,
                quantity=Decimal(random.choice(["4", "6", "8", "9", "12"])),
                delivery_address=client.address,
                contact_phone=client.phone,
            )
            try:
                with transaction.atomic():
                    order = service.create_order(dto, client_id=client.id, actor_id=staff_id)
                    if index % 2 == 0:
                        service.confirm_order(order.id, actor_id=staff_id)
                    if index % 4 == 0:
                        service.assign_vehicle(order.id, actor_id=staff_id)
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order {index}: {exc.message}"))
                continue
            created += 1
        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
