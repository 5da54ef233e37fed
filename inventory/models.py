"""Inventory models (multi-warehouse).

Stock is tracked per (producto, almacen, ubicacion) in ``InventarioProducto``.
Movements, transfers and reservations are the history that explains how each
ledger row reached its current values.
"""

from decimal import Decimal

from common.choices import MovimientoOrigen, MovimientoTipo, ReservaEstado, TransferenciaEstado
from django.conf import settings
from django.db import models

CANTIDAD_DIGITS = {"max_digits": 14, "decimal_places": 4}
COSTO_DIGITS = {"max_digits": 16, "decimal_places": 6}


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Almacen(TimeStampedModel):
    nombre = models.CharField(max_length=120)
    descripcion = models.CharField(max_length=255, blank=True)
    activo = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["nombre"]
        verbose_name = "Almacén"
        verbose_name_plural = "Almacenes"

    def __str__(self) -> str:  # pragma: no cover
        return self.nombre


class AlmacenUbicacion(TimeStampedModel):
    """Shelf/bin inside a warehouse."""

    almacen = models.ForeignKey(Almacen, related_name="ubicaciones", on_delete=models.CASCADE)
    codigo = models.CharField(max_length=40)
    descripcion = models.CharField(max_length=255, blank=True)
    activo = models.BooleanField(default=True)

    class Meta:
        ordering = ["almacen", "codigo"]
        constraints = [
            models.UniqueConstraint(fields=["almacen", "codigo"], name="unique_ubicacion_codigo_por_almacen"),
        ]
        verbose_name = "Ubicación"
        verbose_name_plural = "Ubicaciones"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.almacen_id}:{self.codigo}"


class InventarioProducto(TimeStampedModel):
    # Ledger row: the single source of truth for stock of a product at a place
    producto = models.ForeignKey("catalog.Producto", related_name="inventarios", on_delete=models.PROTECT)
    almacen = models.ForeignKey(Almacen, related_name="inventarios", on_delete=models.PROTECT)
    ubicacion = models.ForeignKey(
        AlmacenUbicacion, related_name="inventarios", null=True, blank=True, on_delete=models.PROTECT
    )
    stock_disponible = models.DecimalField(default=Decimal("0"), **CANTIDAD_DIGITS)
    stock_comprometido = models.DecimalField(default=Decimal("0"), **CANTIDAD_DIGITS)
    stock_minimo = models.DecimalField(default=Decimal("0"), **CANTIDAD_DIGITS)
    stock_maximo = models.DecimalField(null=True, blank=True, **CANTIDAD_DIGITS)
    costo_promedio = models.DecimalField(default=Decimal("0"), **COSTO_DIGITS)

    class Meta:
        ordering = ["producto", "almacen", "ubicacion"]
        constraints = [
            models.CheckConstraint(
                name="inventario_disponible_non_negative", condition=models.Q(stock_disponible__gte=0)
            ),
            models.CheckConstraint(
                name="inventario_comprometido_non_negative", condition=models.Q(stock_comprometido__gte=0)
            ),
            models.UniqueConstraint(
                fields=["producto", "almacen", "ubicacion"],
                condition=models.Q(ubicacion__isnull=False),
                name="unique_inventario_producto_almacen_ubicacion",
            ),
            models.UniqueConstraint(
                fields=["producto", "almacen"],
                condition=models.Q(ubicacion__isnull=True),
                name="unique_inventario_producto_almacen_sin_ubicacion",
            ),
        ]
        indexes = [
            models.Index(fields=["producto"], name="inventario_producto_idx"),
            models.Index(fields=["almacen"], name="inventario_almacen_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return (
            f"Inventario<{self.producto_id}@{self.almacen_id}/{self.ubicacion_id or '-'}> "
            f"d={self.stock_disponible} c={self.stock_comprometido}"
        )


class MovimientoInventario(TimeStampedModel):
    TIPO_CHOICES = MovimientoTipo.choices

    tipo = models.CharField(max_length=32, choices=TIPO_CHOICES, db_index=True)
    producto = models.ForeignKey("catalog.Producto", related_name="movimientos", on_delete=models.PROTECT)
    inventario = models.ForeignKey(InventarioProducto, related_name="movimientos", on_delete=models.PROTECT)
    cantidad = models.DecimalField(**CANTIDAD_DIGITS)
    costo_unitario = models.DecimalField(default=Decimal("0"), **COSTO_DIGITS)
    referencia_origen = models.CharField(max_length=120, blank=True, null=True)
    origen_tipo = models.CharField(max_length=32, choices=MovimientoOrigen.choices, blank=True, null=True)
    observaciones = models.TextField(blank=True, null=True)
    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name="movimientos_inventario", on_delete=models.PROTECT
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="movimiento_cantidad_positive", condition=models.Q(cantidad__gt=0)),
        ]
        indexes = [
            models.Index(fields=["producto", "created_at"], name="movimiento_producto_fecha_idx"),
            models.Index(fields=["referencia_origen"], name="movimiento_referencia_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.tipo} {self.cantidad} for {self.inventario_id}"


class MovimientoTransferencia(TimeStampedModel):
    """Pairs the envío and recepción legs of a warehouse-to-warehouse move."""

    ESTADO_PENDIENTE_RECEPCION = TransferenciaEstado.PENDIENTE_RECEPCION
    ESTADO_COMPLETADA = TransferenciaEstado.COMPLETADA
    ESTADO_ANULADA = TransferenciaEstado.ANULADA
    ESTADO_CHOICES = TransferenciaEstado.choices

    movimiento_envio = models.OneToOneField(
        MovimientoInventario, related_name="transferencia_envio", on_delete=models.PROTECT
    )
    movimiento_recepcion = models.OneToOneField(
        MovimientoInventario, related_name="transferencia_recepcion", on_delete=models.PROTECT
    )
    estado = models.CharField(max_length=24, choices=ESTADO_CHOICES, default=ESTADO_PENDIENTE_RECEPCION, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Transferencia#{self.id} {self.estado}"


class ReservaInventario(TimeStampedModel):
    ESTADO_PENDIENTE = ReservaEstado.PENDIENTE
    ESTADO_CONFIRMADA = ReservaEstado.CONFIRMADA
    ESTADO_LIBERADA = ReservaEstado.LIBERADA
    ESTADO_CANCELADA = ReservaEstado.CANCELADA
    ESTADO_CHOICES = ReservaEstado.choices

    inventario = models.ForeignKey(InventarioProducto, related_name="reservas", on_delete=models.PROTECT)
    cantidad = models.DecimalField(**CANTIDAD_DIGITS)
    estado = models.CharField(max_length=16, choices=ESTADO_CHOICES, default=ESTADO_PENDIENTE)
    motivo = models.CharField(max_length=500, blank=True, null=True)
    metadata = models.JSONField(null=True, blank=True)
    # External work order / invoice line references, no FK
    transaccion_id = models.PositiveBigIntegerField(null=True, blank=True, db_index=True)
    detalle_transaccion_id = models.PositiveBigIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="reserva_cantidad_positive", condition=models.Q(cantidad__gt=0)),
        ]
        indexes = [
            models.Index(fields=["estado", "created_at"], name="reserva_estado_fecha_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Reserva<{self.inventario_id}> qty={self.cantidad} estado={self.estado}"


class BitacoraInventario(models.Model):
    """Append-only audit trail of inventory actions."""

    movimiento = models.ForeignKey(MovimientoInventario, related_name="bitacora", on_delete=models.CASCADE)
    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="bitacora_inventario", on_delete=models.SET_NULL
    )
    accion = models.CharField(max_length=64, db_index=True)
    descripcion = models.CharField(max_length=255, blank=True, null=True)
    metadata = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Bitácora de inventario"
        verbose_name_plural = "Bitácora de inventario"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.accion} mov={self.movimiento_id}"


# EOF
