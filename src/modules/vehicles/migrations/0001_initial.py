from django.db import migrations, models


class Migration(migrations.Migration):
    """Create the vehicles table."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("plate", models.CharField(max_length=10, unique=True)),
                ("brand", models.CharField(blank=True, default="", max_length=60)),
                ("model", models.CharField(blank=True, default="", max_length=60)),
                ("capacity_m3", models.DecimalField(decimal_places=2, max_digits=6)),
                ("status", models.CharField(choices=[("disponible", "Disponible"), ("en_uso", "En uso"), ("mantenimiento", "Mantenimiento"), ("averiado", "Averiado")], default="disponible", max_length=20)),
                ("last_latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("last_longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("last_location_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "vehicles",
                "ordering": ["capacity_m3", "id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(capacity_m3__gt=0), name="vehicles_capacity_positive"),
                ],
                "indexes": [
                    models.Index(fields=["status", "capacity_m3"], name="vehicles_status_capacity_idx"),
                ],
            },
        ),
    ]
