from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Producto",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("codigo_producto", models.CharField(max_length=50, unique=True)),
                ("nombre", models.CharField(max_length=200)),
                ("descripcion", models.TextField(blank=True)),
                (
                    "tipo",
                    models.CharField(
                        choices=[("PRODUCTO", "Producto"), ("SERVICIO", "Servicio")],
                        db_index=True,
                        default="PRODUCTO",
                        max_length=16,
                    ),
                ),
                ("estatus", models.BooleanField(db_index=True, default=True)),
                ("stock", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
            ],
            options={
                "ordering": ["nombre"],
                "indexes": [models.Index(fields=["tipo", "estatus"], name="producto_tipo_estatus_idx")],
            },
        ),
    ]
