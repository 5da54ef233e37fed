"""Catalog app models.

Products and services offered by the shop. Stock is tracked per warehouse by
the inventory app; ``Producto.stock`` only caches the sum of available stock.
"""

from decimal import Decimal

from common.choices import ProductoTipo
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Producto(TimeStampedModel):
    """Product or service master record."""

    TIPO_PRODUCTO = ProductoTipo.PRODUCTO
    TIPO_SERVICIO = ProductoTipo.SERVICIO
    TIPO_CHOICES = ProductoTipo.choices

    codigo_producto = models.CharField(max_length=50, unique=True)
    nombre = models.CharField(max_length=200)
    descripcion = models.TextField(blank=True)
    tipo = models.CharField(max_length=16, choices=TIPO_CHOICES, default=TIPO_PRODUCTO, db_index=True)
    estatus = models.BooleanField(default=True, db_index=True)
    # Denormalized sum of InventarioProducto.stock_disponible (see inventory.stock_sync)
    stock = models.DecimalField(max_digits=20, decimal_places=4, default=Decimal("0"))

    class Meta:
        ordering = ["nombre"]
        indexes = [
            models.Index(fields=["tipo", "estatus"], name="producto_tipo_estatus_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.codigo_producto} - {self.nombre}"
