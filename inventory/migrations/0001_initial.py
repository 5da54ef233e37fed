from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

MOVIMIENTO_TIPOS = [
    ("INGRESO", "Ingreso"),
    ("SALIDA", "Salida"),
    ("AJUSTE_POSITIVO", "Ajuste positivo"),
    ("AJUSTE_NEGATIVO", "Ajuste negativo"),
    ("TRANSFERENCIA_ENVIO", "Transferencia (envío)"),
    ("TRANSFERENCIA_RECEPCION", "Transferencia (recepción)"),
]

MOVIMIENTO_ORIGENES = [
    ("COMPRA", "Compra"),
    ("ORDEN_TRABAJO", "Orden de trabajo"),
    ("FACTURACION", "Facturación"),
    ("AJUSTE_MANUAL", "Ajuste manual"),
    ("TRANSFERENCIA", "Transferencia"),
    ("OTRO", "Otro"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Almacen",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("nombre", models.CharField(max_length=120)),
                ("descripcion", models.CharField(blank=True, max_length=255)),
                ("activo", models.BooleanField(db_index=True, default=True)),
            ],
            options={
                "verbose_name": "Almacén",
                "verbose_name_plural": "Almacenes",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="AlmacenUbicacion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("codigo", models.CharField(max_length=40)),
                ("descripcion", models.CharField(blank=True, max_length=255)),
                ("activo", models.BooleanField(default=True)),
                (
                    "almacen",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ubicaciones",
                        to="inventory.almacen",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ubicación",
                "verbose_name_plural": "Ubicaciones",
                "ordering": ["almacen", "codigo"],
                "constraints": [
                    models.UniqueConstraint(fields=("almacen", "codigo"), name="unique_ubicacion_codigo_por_almacen")
                ],
            },
        ),
        migrations.CreateModel(
            name="InventarioProducto",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("stock_disponible", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("stock_comprometido", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("stock_minimo", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("stock_maximo", models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True)),
                ("costo_promedio", models.DecimalField(decimal_places=6, default=Decimal("0"), max_digits=16)),
                (
                    "almacen",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventarios",
                        to="inventory.almacen",
                    ),
                ),
                (
                    "producto",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventarios",
                        to="catalog.producto",
                    ),
                ),
                (
                    "ubicacion",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventarios",
                        to="inventory.almacenubicacion",
                    ),
                ),
            ],
            options={
                "ordering": ["producto", "almacen", "ubicacion"],
                "indexes": [
                    models.Index(fields=["producto"], name="inventario_producto_idx"),
                    models.Index(fields=["almacen"], name="inventario_almacen_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(stock_disponible__gte=0), name="inventario_disponible_non_negative"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(stock_comprometido__gte=0), name="inventario_comprometido_non_negative"
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(ubicacion__isnull=False),
                        fields=("producto", "almacen", "ubicacion"),
                        name="unique_inventario_producto_almacen_ubicacion",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(ubicacion__isnull=True),
                        fields=("producto", "almacen"),
                        name="unique_inventario_producto_almacen_sin_ubicacion",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MovimientoInventario",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tipo", models.CharField(choices=MOVIMIENTO_TIPOS, db_index=True, max_length=32)),
                ("cantidad", models.DecimalField(decimal_places=4, max_digits=14)),
                ("costo_unitario", models.DecimalField(decimal_places=6, default=Decimal("0"), max_digits=16)),
                ("referencia_origen", models.CharField(blank=True, max_length=120, null=True)),
                ("origen_tipo", models.CharField(blank=True, choices=MOVIMIENTO_ORIGENES, max_length=32, null=True)),
                ("observaciones", models.TextField(blank=True, null=True)),
                (
                    "inventario",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movimientos",
                        to="inventory.inventarioproducto",
                    ),
                ),
                (
                    "producto",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movimientos",
                        to="catalog.producto",
                    ),
                ),
                (
                    "usuario",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movimientos_inventario",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["producto", "created_at"], name="movimiento_producto_fecha_idx"),
                    models.Index(fields=["referencia_origen"], name="movimiento_referencia_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(cantidad__gt=0), name="movimiento_cantidad_positive")
                ],
            },
        ),
        migrations.CreateModel(
            name="MovimientoTransferencia",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "estado",
                    models.CharField(
                        choices=[
                            ("PENDIENTE_RECEPCION", "Pendiente de recepción"),
                            ("COMPLETADA", "Completada"),
                            ("ANULADA", "Anulada"),
                        ],
                        db_index=True,
                        default="PENDIENTE_RECEPCION",
                        max_length=24,
                    ),
                ),
                (
                    "movimiento_envio",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transferencia_envio",
                        to="inventory.movimientoinventario",
                    ),
                ),
                (
                    "movimiento_recepcion",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transferencia_recepcion",
                        to="inventory.movimientoinventario",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="ReservaInventario",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("cantidad", models.DecimalField(decimal_places=4, max_digits=14)),
                (
                    "estado",
                    models.CharField(
                        choices=[
                            ("PENDIENTE", "Pendiente"),
                            ("CONFIRMADA", "Confirmada"),
                            ("LIBERADA", "Liberada"),
                            ("CANCELADA", "Cancelada"),
                        ],
                        default="PENDIENTE",
                        max_length=16,
                    ),
                ),
                ("motivo", models.CharField(blank=True, max_length=500, null=True)),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("transaccion_id", models.PositiveBigIntegerField(blank=True, db_index=True, null=True)),
                ("detalle_transaccion_id", models.PositiveBigIntegerField(blank=True, null=True)),
                (
                    "inventario",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservas",
                        to="inventory.inventarioproducto",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["estado", "created_at"], name="reserva_estado_fecha_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(cantidad__gt=0), name="reserva_cantidad_positive")
                ],
            },
        ),
        migrations.CreateModel(
            name="BitacoraInventario",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("accion", models.CharField(db_index=True, max_length=64)),
                ("descripcion", models.CharField(blank=True, max_length=255, null=True)),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "movimiento",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bitacora",
                        to="inventory.movimientoinventario",
                    ),
                ),
                (
                    "usuario",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bitacora_inventario",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Bitácora de inventario",
                "verbose_name_plural": "Bitácora de inventario",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
