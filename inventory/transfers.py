"""Two-phase warehouse-to-warehouse transfers.

Origin stock leaves at creation; destination stock only appears once the
recepción leg is confirmed. Voiding a pending transfer restores the origin.
"""

import logging

from common.choices import MovimientoOrigen, MovimientoTipo
from django.db import transaction

from .errors import InventarioError
from .models import InventarioProducto, MovimientoInventario, MovimientoTransferencia
from .services import (
    DECIMAL_ZERO,
    assert_stock_dentro_de_limite,
    bloquear_inventarios,
    parse_cantidad,
    registrar_bitacora,
    validar_almacen,
    validar_producto,
    validar_ubicacion,
)
from .stock_sync import sync_producto_stock

logger = logging.getLogger("taller.inventory")

_LEG_RELATED = (
    "movimiento_envio__producto",
    "movimiento_envio__usuario",
    "movimiento_envio__inventario__almacen",
    "movimiento_envio__inventario__ubicacion",
    "movimiento_recepcion__producto",
    "movimiento_recepcion__usuario",
    "movimiento_recepcion__inventario__almacen",
    "movimiento_recepcion__inventario__ubicacion",
)


def transferencia_detallada(transferencia_id: int) -> MovimientoTransferencia:
    return MovimientoTransferencia.objects.select_related(*_LEG_RELATED).get(id=transferencia_id)


def _cargar_transferencia(transferencia_id: int) -> MovimientoTransferencia:
    transferencia = (
        MovimientoTransferencia.objects.select_for_update()
        .select_related("movimiento_envio", "movimiento_recepcion")
        .filter(id=transferencia_id)
        .first()
    )
    if transferencia is None:
        raise InventarioError("La transferencia solicitada no existe", 404, "TRANSFERENCIA_NO_ENCONTRADA")
    return transferencia


def _bloquear_inventario(inventario_id: int) -> InventarioProducto:
    return InventarioProducto.objects.select_for_update().get(id=inventario_id)


def _stock_origen_insuficiente() -> InventarioError:
    return InventarioError(
        "Stock insuficiente en el almacén de origen para completar la transferencia",
        409,
        "STOCK_ORIGEN_INSUFICIENTE",
    )


def _unir_notas(*partes) -> str | None:
    return " - ".join(p for p in partes if p) or None


def _log_transferencia(event: str, transferencia: MovimientoTransferencia, usuario_id: int, **extra) -> None:
    logger.info(
        event,
        extra={
            "event": event,
            "transferencia_id": transferencia.id,
            "estado": transferencia.estado,
            "usuario_id": usuario_id,
            **extra,
        },
    )


def crear_transferencia(
    *,
    producto_id: int,
    origen_almacen_id: int,
    destino_almacen_id: int,
    usuario_id: int,
    cantidad,
    origen_ubicacion_id: int | None = None,
    destino_ubicacion_id: int | None = None,
    referencia: str | None = None,
    observaciones: str | None = None,
    metadata=None,
) -> MovimientoTransferencia:
    """Decrement the origin and open a PENDIENTE_RECEPCION transfer with both legs."""
    cantidad = parse_cantidad(cantidad, "La cantidad de la transferencia debe ser mayor a cero")
    if origen_almacen_id == destino_almacen_id and (origen_ubicacion_id or None) == (destino_ubicacion_id or None):
        raise InventarioError(
            "La transferencia debe dirigirse a un destino distinto al origen", 422, "TRANSFERENCIA_DESTINO_INVALIDO"
        )

    with transaction.atomic():
        validar_producto(producto_id)
        validar_almacen(origen_almacen_id)
        validar_almacen(destino_almacen_id)
        validar_ubicacion(origen_almacen_id, origen_ubicacion_id)
        validar_ubicacion(destino_almacen_id, destino_ubicacion_id)

        origen_id = (
            InventarioProducto.objects.filter(
                producto_id=producto_id, almacen_id=origen_almacen_id, ubicacion_id=origen_ubicacion_id or None
            )
            .values_list("id", flat=True)
            .first()
        )
        if origen_id is None:
            raise _stock_origen_insuficiente()
        destino_id = InventarioProducto.objects.get_or_create(
            producto_id=producto_id, almacen_id=destino_almacen_id, ubicacion_id=destino_ubicacion_id or None
        )[0].id

        # Both rows are locked in id order, whichever side is the origin
        filas = bloquear_inventarios(origen_id, destino_id)
        origen = filas[origen_id]
        destino = filas[destino_id]
        if origen.stock_disponible < cantidad:
            raise _stock_origen_insuficiente()

        origen.stock_disponible = origen.stock_disponible - cantidad
        origen.save(update_fields=["stock_disponible", "updated_at"])

        costo = origen.costo_promedio or DECIMAL_ZERO
        envio = MovimientoInventario.objects.create(
            tipo=MovimientoTipo.TRANSFERENCIA_ENVIO,
            producto_id=producto_id,
            inventario=origen,
            cantidad=cantidad,
            costo_unitario=costo,
            referencia_origen=referencia,
            origen_tipo=MovimientoOrigen.TRANSFERENCIA,
            observaciones=observaciones,
            usuario_id=usuario_id,
        )
        recepcion = MovimientoInventario.objects.create(
            tipo=MovimientoTipo.TRANSFERENCIA_RECEPCION,
            producto_id=producto_id,
            inventario=destino,
            cantidad=cantidad,
            costo_unitario=costo,
            referencia_origen=referencia,
            origen_tipo=MovimientoOrigen.TRANSFERENCIA,
            observaciones="Pendiente de recepción",
            usuario_id=usuario_id,
        )
        transferencia = MovimientoTransferencia.objects.create(
            movimiento_envio=envio,
            movimiento_recepcion=recepcion,
            estado=MovimientoTransferencia.ESTADO_PENDIENTE_RECEPCION,
        )

        registrar_bitacora(
            movimiento=envio,
            usuario_id=usuario_id,
            accion="TRANSFERENCIA_ENVIO",
            descripcion="Transferencia registrada desde almacén origen",
            metadata={
                "cantidad": str(cantidad),
                "destino": {"almacenId": destino_almacen_id, "ubicacionId": destino_ubicacion_id},
                "referencia": referencia,
                "metadata": metadata,
            },
        )
        registrar_bitacora(
            movimiento=recepcion,
            usuario_id=usuario_id,
            accion="TRANSFERENCIA_PENDIENTE",
            descripcion="Transferencia pendiente de recepción en almacén destino",
            metadata={
                "cantidad": str(cantidad),
                "origen": {"almacenId": origen_almacen_id, "ubicacionId": origen_ubicacion_id},
                "referencia": referencia,
                "metadata": metadata,
            },
        )
        sync_producto_stock(producto_id)

    _log_transferencia(
        "inventario.transferencia_creada",
        transferencia,
        usuario_id,
        producto_id=producto_id,
        cantidad=str(cantidad),
        origen_almacen_id=origen_almacen_id,
        destino_almacen_id=destino_almacen_id,
    )
    return transferencia_detallada(transferencia.id)


def confirmar_transferencia(
    *, transferencia_id: int, usuario_id: int, observaciones: str | None = None, metadata=None
) -> MovimientoTransferencia:
    """Land the recepción leg: destination availability grows by the transferred quantity."""
    with transaction.atomic():
        transferencia = _cargar_transferencia(transferencia_id)
        if transferencia.estado == MovimientoTransferencia.ESTADO_ANULADA:
            raise InventarioError("No es posible confirmar una transferencia anulada", 409, "TRANSFERENCIA_ANULADA")
        if transferencia.estado == MovimientoTransferencia.ESTADO_COMPLETADA:
            raise InventarioError("La transferencia ya fue confirmada", 409, "TRANSFERENCIA_COMPLETADA")

        envio = transferencia.movimiento_envio
        recepcion = transferencia.movimiento_recepcion
        cantidad = recepcion.cantidad

        destino = _bloquear_inventario(recepcion.inventario_id)
        assert_stock_dentro_de_limite(destino.stock_disponible + cantidad)
        destino.stock_disponible = destino.stock_disponible + cantidad
        destino.save(update_fields=["stock_disponible", "updated_at"])

        recepcion.observaciones = observaciones or "Recepción confirmada"
        recepcion.usuario_id = usuario_id
        recepcion.save(update_fields=["observaciones", "usuario", "updated_at"])

        transferencia.estado = MovimientoTransferencia.ESTADO_COMPLETADA
        transferencia.save(update_fields=["estado", "updated_at"])

        bitacora_metadata = {"cantidad": str(cantidad), "transferenciaId": transferencia.id, "metadata": metadata}
        registrar_bitacora(
            movimiento=envio,
            usuario_id=usuario_id,
            accion="TRANSFERENCIA_COMPLETADA",
            descripcion="Transferencia confirmada por almacén destino",
            metadata=bitacora_metadata,
        )
        registrar_bitacora(
            movimiento=recepcion,
            usuario_id=usuario_id,
            accion="TRANSFERENCIA_RECEPCION",
            descripcion="Recepción de transferencia completada",
            metadata=bitacora_metadata,
        )
        sync_producto_stock(envio.producto_id)

    _log_transferencia("inventario.transferencia_confirmada", transferencia, usuario_id, cantidad=str(cantidad))
    return transferencia_detallada(transferencia.id)


def anular_transferencia(
    *, transferencia_id: int, usuario_id: int, motivo: str | None = None, metadata=None
) -> MovimientoTransferencia:
    """Void a pending transfer and give the quantity back to the origin ledger row."""
    with transaction.atomic():
        transferencia = _cargar_transferencia(transferencia_id)
        if transferencia.estado == MovimientoTransferencia.ESTADO_COMPLETADA:
            raise InventarioError(
                "No es posible anular una transferencia ya completada", 409, "TRANSFERENCIA_COMPLETADA"
            )
        if transferencia.estado == MovimientoTransferencia.ESTADO_ANULADA:
            raise InventarioError("La transferencia ya fue anulada", 409, "TRANSFERENCIA_ANULADA")

        envio = transferencia.movimiento_envio
        recepcion = transferencia.movimiento_recepcion
        cantidad = envio.cantidad

        origen = _bloquear_inventario(envio.inventario_id)
        assert_stock_dentro_de_limite(origen.stock_disponible + cantidad)
        origen.stock_disponible = origen.stock_disponible + cantidad
        origen.save(update_fields=["stock_disponible", "updated_at"])

        envio.observaciones = _unir_notas(envio.observaciones, "Transferencia anulada", motivo)
        envio.save(update_fields=["observaciones", "updated_at"])
        recepcion.observaciones = _unir_notas(recepcion.observaciones, "Transferencia anulada", motivo)
        recepcion.usuario_id = usuario_id
        recepcion.save(update_fields=["observaciones", "usuario", "updated_at"])

        transferencia.estado = MovimientoTransferencia.ESTADO_ANULADA
        transferencia.save(update_fields=["estado", "updated_at"])

        bitacora_metadata = {"cantidad": str(cantidad), "motivo": motivo, "metadata": metadata}
        registrar_bitacora(
            movimiento=envio,
            usuario_id=usuario_id,
            accion="TRANSFERENCIA_ANULADA",
            descripcion="Transferencia anulada y stock restaurado en origen",
            metadata=bitacora_metadata,
        )
        registrar_bitacora(
            movimiento=recepcion,
            usuario_id=usuario_id,
            accion="TRANSFERENCIA_ANULADA_DESTINO",
            descripcion="Transferencia anulada antes de recepción",
            metadata=bitacora_metadata,
        )
        sync_producto_stock(envio.producto_id)

    _log_transferencia(
        "inventario.transferencia_anulada", transferencia, usuario_id, cantidad=str(cantidad), motivo=motivo
    )
    return transferencia_detallada(transferencia.id)


# EOF
