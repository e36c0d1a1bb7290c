from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create the stock table (one record per material)."""

    initial = True

    dependencies = [
        ("materials", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StockRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("available_quantity", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("minimum_quantity", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("last_updated", models.DateTimeField(default=django.utils.timezone.now)),
                ("material", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="stock", to="materials.material")),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "stock",
                "ordering": ["material__name", "id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(available_quantity__gte=0), name="stock_available_non_negative"),
                    models.CheckConstraint(condition=models.Q(minimum_quantity__gte=0), name="stock_minimum_non_negative"),
                ],
            },
        ),
    ]
