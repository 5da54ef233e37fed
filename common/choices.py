"""Shared enumerations and choices used across apps."""

from django.db import models


class ProductoTipo(models.TextChoices):
    PRODUCTO = "PRODUCTO", "Producto"
    SERVICIO = "SERVICIO", "Servicio"


class MovimientoTipo(models.TextChoices):
    INGRESO = "INGRESO", "Ingreso"
    SALIDA = "SALIDA", "Salida"
    AJUSTE_POSITIVO = "AJUSTE_POSITIVO", "Ajuste positivo"
    AJUSTE_NEGATIVO = "AJUSTE_NEGATIVO", "Ajuste negativo"
    TRANSFERENCIA_ENVIO = "TRANSFERENCIA_ENVIO", "Transferencia (envío)"
    TRANSFERENCIA_RECEPCION = "TRANSFERENCIA_RECEPCION", "Transferencia (recepción)"


class MovimientoOrigen(models.TextChoices):
    """Business origin of a movement (purchase, work order, ...)."""

    COMPRA = "COMPRA", "Compra"
    ORDEN_TRABAJO = "ORDEN_TRABAJO", "Orden de trabajo"
    FACTURACION = "FACTURACION", "Facturación"
    AJUSTE_MANUAL = "AJUSTE_MANUAL", "Ajuste manual"
    TRANSFERENCIA = "TRANSFERENCIA", "Transferencia"
    OTRO = "OTRO", "Otro"


class TransferenciaEstado(models.TextChoices):
    PENDIENTE_RECEPCION = "PENDIENTE_RECEPCION", "Pendiente de recepción"
    COMPLETADA = "COMPLETADA", "Completada"
    ANULADA = "ANULADA", "Anulada"


class ReservaEstado(models.TextChoices):
    """Reservation lifecycle; only PENDIENTE may transition."""

    PENDIENTE = "PENDIENTE", "Pendiente"
    CONFIRMADA = "CONFIRMADA", "Confirmada"
    LIBERADA = "LIBERADA", "Liberada"
    CANCELADA = "CANCELADA", "Cancelada"
