import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("pendiente", "Pendiente"),
    ("confirmado", "Confirmado"),
    ("asignado", "Asignado"),
    ("en_transito", "En tránsito"),
    ("entregado", "Entregado"),
    ("cancelado", "Cancelado"),
]


class Migration(migrations.Migration):
    """Create orders, their status history and the tracking sequence."""

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
        ("materials", "0001_initial"),
        ("vehicles", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="TrackingSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("prefix", models.CharField(max_length=10, unique=True)),
                ("last_value", models.PositiveIntegerField(default=0)),
            ],
            options={
                "db_table": "tracking_sequences",
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tracking_code", models.CharField(editable=False, max_length=20, unique=True)),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=10)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("delivery_address", models.TextField()),
                ("delivery_latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("delivery_longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("contact_phone", models.CharField(blank=True, default="", max_length=20)),
                ("requested_delivery_date", models.DateField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=STATUS_CHOICES, default="pendiente", max_length=20)),
                ("estimated_delivery_minutes", models.PositiveIntegerField(blank=True, null=True)),
                ("assignment_justification", models.TextField(blank=True, default="")),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="clients.client")),
                ("material", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="materials.material")),
                ("vehicle", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="vehicles.vehicle")),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                    models.Index(fields=["client", "-created_at"], name="orders_client_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(quantity__gt=0), name="orders_quantity_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("old_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=20, null=True)),
                ("new_status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("notes", models.TextField(blank=True, default="")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_history", to="orders.order")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "order_status_history",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["order", "created_at"], name="osh_order_created_idx"),
                ],
            },
        ),
    ]
