"""Reservation services: commit available stock now, settle it later.

A reservation moves quantity from ``stock_disponible`` to ``stock_comprometido``.
Only PENDIENTE reservations may transition; CONFIRMADA consumes the committed
quantity while LIBERADA/CANCELADA hand it back to the available pool.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .errors import InventarioError
from .models import InventarioProducto, ReservaInventario
from .services import (
    DECIMAL_ZERO,
    assert_stock_dentro_de_limite,
    obtener_inventario,
    parse_cantidad,
    validar_almacen,
    validar_producto,
    validar_ubicacion,
)
from .stock_sync import sync_producto_stock

logger = logging.getLogger("taller.inventory")

DEFAULT_TTL_HOURS = 48
MAX_TTL_HOURS = 720
DEFAULT_RELEASE_LIMIT = 100
MAX_RELEASE_LIMIT = 500
DEFAULT_RELEASE_MOTIVO = "Liberación automática por reserva caducada"


def _clamp(value, default: int, maximum: int) -> int:
    """Positive int capped at ``maximum``; anything unusable falls back to ``default``."""
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    if value <= 0:
        return default
    return min(value, maximum)


def reserva_detallada(reserva_id: int) -> ReservaInventario:
    return ReservaInventario.objects.select_related(
        "inventario__producto", "inventario__almacen", "inventario__ubicacion"
    ).get(id=reserva_id)


def reservar_stock(
    *,
    producto_id: int,
    almacen_id: int,
    usuario_id: int,
    cantidad,
    ubicacion_id: int | None = None,
    transaccion_id: int | None = None,
    detalle_transaccion_id: int | None = None,
    motivo: str | None = None,
    metadata=None,
) -> ReservaInventario:
    """Commit ``cantidad`` of available stock to a new PENDIENTE reservation."""
    cantidad = parse_cantidad(cantidad, "La cantidad a reservar debe ser mayor a cero")

    with transaction.atomic():
        validar_producto(producto_id)
        validar_almacen(almacen_id)
        validar_ubicacion(almacen_id, ubicacion_id)

        inventario = obtener_inventario(producto_id, almacen_id, ubicacion_id)
        if inventario is None or inventario.stock_disponible < cantidad:
            raise InventarioError("Stock insuficiente para realizar la reserva solicitada", 409, "STOCK_INSUFICIENTE")

        inventario.stock_disponible = inventario.stock_disponible - cantidad
        inventario.stock_comprometido = inventario.stock_comprometido + cantidad
        inventario.save(update_fields=["stock_disponible", "stock_comprometido", "updated_at"])

        reserva = ReservaInventario.objects.create(
            inventario=inventario,
            cantidad=cantidad,
            motivo=motivo,
            metadata=metadata,
            transaccion_id=transaccion_id,
            detalle_transaccion_id=detalle_transaccion_id,
        )
        sync_producto_stock(producto_id)

    logger.info(
        "inventario.reserva_creada",
        extra={
            "event": "inventario.reserva_creada",
            "reserva_id": reserva.id,
            "inventario_id": inventario.id,
            "producto_id": producto_id,
            "cantidad": str(cantidad),
            "usuario_id": usuario_id,
        },
    )
    return reserva_detallada(reserva.id)


def cambiar_estado_reserva(
    *, reserva_id: int, estado_destino: str, usuario_id: int | None = None, motivo: str | None = None, metadata=None
) -> ReservaInventario:
    """Move a PENDIENTE reservation to a terminal state and settle the committed stock.

    Must be called inside ``transaction.atomic``; the public wrappers below do that.
    """
    reserva = ReservaInventario.objects.select_for_update().filter(id=reserva_id).first()
    if reserva is None:
        raise InventarioError("La reserva indicada no existe", 404, "RESERVA_NO_ENCONTRADA")
    if reserva.estado != ReservaInventario.ESTADO_PENDIENTE:
        raise InventarioError("La reserva ya fue gestionada previamente", 409, "RESERVA_NO_PENDIENTE")

    inventario = InventarioProducto.objects.select_for_update().get(id=reserva.inventario_id)
    comprometido = inventario.stock_comprometido - reserva.cantidad
    disponible = inventario.stock_disponible
    if estado_destino in (ReservaInventario.ESTADO_LIBERADA, ReservaInventario.ESTADO_CANCELADA):
        disponible = disponible + reserva.cantidad
    elif estado_destino != ReservaInventario.ESTADO_CONFIRMADA:
        raise ValueError(f"Unsupported reservation state: {estado_destino}")

    if comprometido < DECIMAL_ZERO:
        raise InventarioError(
            "La reserva supera el stock comprometido disponible", 409, "STOCK_COMPROMETIDO_INVALIDO"
        )

    assert_stock_dentro_de_limite(disponible)

    inventario.stock_disponible = disponible
    inventario.stock_comprometido = comprometido
    inventario.save(update_fields=["stock_disponible", "stock_comprometido", "updated_at"])

    estado_anterior = reserva.estado
    reserva.estado = estado_destino
    reserva.motivo = motivo if motivo is not None else reserva.motivo
    reserva.metadata = metadata if metadata is not None else reserva.metadata
    reserva.save(update_fields=["estado", "motivo", "metadata", "updated_at"])
    sync_producto_stock(inventario.producto_id)

    logger.info(
        "inventario.reserva_actualizada",
        extra={
            "event": "inventario.reserva_actualizada",
            "reserva_id": reserva.id,
            "estado_anterior": estado_anterior,
            "estado": estado_destino,
            "cantidad": str(reserva.cantidad),
            "usuario_id": usuario_id,
        },
    )
    return reserva


def confirmar_reserva(
    *, reserva_id: int, usuario_id: int | None = None, motivo=None, metadata=None
) -> ReservaInventario:
    with transaction.atomic():
        cambiar_estado_reserva(
            reserva_id=reserva_id,
            estado_destino=ReservaInventario.ESTADO_CONFIRMADA,
            usuario_id=usuario_id,
            motivo=motivo,
            metadata=metadata,
        )
    return reserva_detallada(reserva_id)


def liberar_reserva(*, reserva_id: int, usuario_id: int | None = None, motivo=None, metadata=None) -> ReservaInventario:
    with transaction.atomic():
        cambiar_estado_reserva(
            reserva_id=reserva_id,
            estado_destino=ReservaInventario.ESTADO_LIBERADA,
            usuario_id=usuario_id,
            motivo=motivo,
            metadata=metadata,
        )
    return reserva_detallada(reserva_id)


def cancelar_reserva(
    *, reserva_id: int, usuario_id: int | None = None, motivo=None, metadata=None
) -> ReservaInventario:
    with transaction.atomic():
        cambiar_estado_reserva(
            reserva_id=reserva_id,
            estado_destino=ReservaInventario.ESTADO_CANCELADA,
            usuario_id=usuario_id,
            motivo=motivo,
            metadata=metadata,
        )
    return reserva_detallada(reserva_id)


def liberar_reservas_caducadas(
    *,
    limit: int | None = None,
    ttl_hours: int | None = None,
    motivo: str | None = None,
    triggered_by: int | None = None,
    metadata: dict | None = None,
    dry_run: bool = False,
) -> dict:
    """Release PENDIENTE reservations older than the TTL, oldest first.

    Each reservation is released in its own transaction; a failure is logged
    and reported in ``errores`` without stopping the batch.
    """
    ttl_hours = _clamp(
        ttl_hours if ttl_hours is not None else getattr(settings, "INVENTARIO_RESERVA_TTL_HOURS", None),
        DEFAULT_TTL_HOURS,
        MAX_TTL_HOURS,
    )
    limit = _clamp(
        limit if limit is not None else getattr(settings, "INVENTARIO_RESERVA_RELEASE_LIMIT", None),
        DEFAULT_RELEASE_LIMIT,
        MAX_RELEASE_LIMIT,
    )
    motivo = motivo or getattr(settings, "INVENTARIO_RESERVA_MOTIVO", None) or DEFAULT_RELEASE_MOTIVO
    if triggered_by is None:
        triggered_by = getattr(settings, "INVENTARIO_SYSTEM_USER_ID", None)

    cutoff = timezone.now() - timedelta(hours=ttl_hours)
    reserva_ids = list(
        ReservaInventario.objects.filter(estado=ReservaInventario.ESTADO_PENDIENTE, created_at__lt=cutoff)
        .order_by("created_at", "id")
        .values_list("id", flat=True)[:limit]
    )

    resultado = {"encontrados": len(reserva_ids), "liberados": 0, "errores": [], "cutoff": cutoff}
    if dry_run or not reserva_ids:
        logger.info(
            "inventario.reservas_caducadas",
            extra={
                "event": "inventario.reservas_caducadas",
                "encontrados": resultado["encontrados"],
                "liberados": 0,
                "dry_run": dry_run,
                "cutoff": cutoff,
            },
        )
        return resultado

    release_metadata = {
        **(metadata or {}),
        "autoRelease": True,
        "triggeredBy": triggered_by,
        "ttlHours": ttl_hours,
        "cutoff": cutoff.isoformat(),
    }
    for reserva_id in reserva_ids:
        try:
            liberar_reserva(
                reserva_id=reserva_id,
                usuario_id=triggered_by,
                motivo=motivo,
                metadata=release_metadata,
            )
        except Exception as exc:
            logger.exception(
                "inventario.reserva_liberacion_fallida",
                extra={"event": "inventario.reserva_liberacion_fallida", "reserva_id": reserva_id},
            )
            resultado["errores"].append({"reserva_id": reserva_id, "error": str(exc)})
        else:
            resultado["liberados"] += 1

    logger.info(
        "inventario.reservas_caducadas",
        extra={
            "event": "inventario.reservas_caducadas",
            "encontrados": resultado["encontrados"],
            "liberados": resultado["liberados"],
            "errores": len(resultado["errores"]),
            "dry_run": False,
            "cutoff": cutoff,
        },
    )
    return resultado


# EOF
