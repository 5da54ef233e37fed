"""Inventory services: ledger access, validation and transactional stock movements.

Every public mutation runs in one ``transaction.atomic`` block and locks the
ledger row with ``select_for_update`` before reading it, so concurrent writers
on the same (producto, almacen, ubicacion) serialize at the database.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from catalog.models import Producto
from common.choices import MovimientoTipo
from django.db import transaction

from .errors import InventarioError
from .models import Almacen, AlmacenUbicacion, BitacoraInventario, InventarioProducto, MovimientoInventario
from .stock_sync import sync_producto_stock

logger = logging.getLogger("taller.inventory")

DECIMAL_ZERO = Decimal("0")
ESCALA_CANTIDAD = Decimal("0.0001")
ESCALA_COSTO = Decimal("0.000001")
# Integer digits allowed by InventarioProducto's DecimalFields (14 digits, 4 decimals)
LIMITE_CANTIDAD = Decimal("1e10")


def to_decimal(value) -> Decimal:
    """Parse a string/number into an exact Decimal.

    Floats go through ``repr`` so 0.1 becomes Decimal("0.1"), not its binary
    expansion. Booleans, blanks and non-finite values are rejected.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise InventarioError("El valor numérico indicado no es válido", 422, "CANTIDAD_INVALIDA")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InventarioError("El valor numérico indicado no es válido", 422, "CANTIDAD_INVALIDA")
    else:
        raise InventarioError("El valor numérico indicado no es válido", 422, "CANTIDAD_INVALIDA")

    if not result.is_finite():
        raise InventarioError("El valor numérico indicado no es válido", 422, "CANTIDAD_INVALIDA")
    return result


def assert_positive_cantidad(cantidad: Decimal, mensaje: str) -> None:
    if cantidad <= DECIMAL_ZERO:
        raise InventarioError(mensaje, 422, "CANTIDAD_INVALIDA")


def parse_cantidad(value, mensaje: str) -> Decimal:
    """to_decimal + scale to the ledger precision + positivity check."""
    cantidad = to_decimal(value)
    if abs(cantidad) >= LIMITE_CANTIDAD:
        raise InventarioError("La cantidad indicada excede el máximo permitido", 422, "CANTIDAD_INVALIDA")
    cantidad = cantidad.quantize(ESCALA_CANTIDAD, rounding=ROUND_HALF_UP)
    assert_positive_cantidad(cantidad, mensaje)
    return cantidad


def assert_stock_dentro_de_limite(stock: Decimal) -> None:
    """Reject a resulting ledger balance the stock columns cannot hold."""
    if stock >= LIMITE_CANTIDAD:
        raise InventarioError(
            "El stock resultante excede el máximo permitido por almacén", 422, "CANTIDAD_INVALIDA"
        )


def parse_costo(value) -> Decimal:
    try:
        costo = to_decimal(value)
    except InventarioError:
        raise InventarioError("El costo unitario indicado no es válido", 422, "COSTO_INVALIDO")
    if costo < DECIMAL_ZERO:
        raise InventarioError("El costo unitario no puede ser negativo", 422, "COSTO_INVALIDO")
    if costo >= LIMITE_CANTIDAD:
        raise InventarioError("El costo unitario excede el máximo permitido", 422, "COSTO_INVALIDO")
    return costo.quantize(ESCALA_COSTO, rounding=ROUND_HALF_UP)


def costo_promedio_ponderado(
    stock_anterior: Decimal, costo_anterior: Decimal, cantidad: Decimal, costo_unitario: Decimal
) -> Decimal:
    """Weighted-average unit cost after an inflow, at cost precision."""
    if stock_anterior <= DECIMAL_ZERO:
        return costo_unitario.quantize(ESCALA_COSTO, rounding=ROUND_HALF_UP)
    total = stock_anterior + cantidad
    promedio = (stock_anterior * costo_anterior + cantidad * costo_unitario) / total
    return promedio.quantize(ESCALA_COSTO, rounding=ROUND_HALF_UP)


# Validators


def validar_producto(producto_id: int) -> Producto:
    try:
        producto = Producto.objects.only("id", "estatus").get(id=producto_id)
    except Producto.DoesNotExist:
        raise InventarioError("El producto indicado no existe", 404, "PRODUCTO_NO_ENCONTRADO")
    if not producto.estatus:
        raise InventarioError("El producto indicado está inactivo", 409, "PRODUCTO_INACTIVO")
    return producto


def validar_almacen(almacen_id: int) -> Almacen:
    try:
        almacen = Almacen.objects.only("id", "activo").get(id=almacen_id)
    except Almacen.DoesNotExist:
        raise InventarioError("El almacén indicado no existe", 404, "ALMACEN_NO_ENCONTRADO")
    if not almacen.activo:
        raise InventarioError("El almacén indicado está inactivo", 409, "ALMACEN_INACTIVO")
    return almacen


def validar_ubicacion(almacen_id: int, ubicacion_id: int | None) -> None:
    if not ubicacion_id:
        return
    ubicacion = AlmacenUbicacion.objects.filter(id=ubicacion_id).only("almacen_id", "activo").first()
    if ubicacion is None or ubicacion.almacen_id != almacen_id:
        raise InventarioError(
            "La ubicación indicada no pertenece al almacén seleccionado", 400, "UBICACION_INVALIDA"
        )
    if not ubicacion.activo:
        raise InventarioError("La ubicación indicada está inactiva", 409, "UBICACION_INACTIVA")


def _validar_destino(producto_id: int, almacen_id: int, ubicacion_id: int | None) -> None:
    validar_producto(producto_id)
    validar_almacen(almacen_id)
    validar_ubicacion(almacen_id, ubicacion_id)


# Ledger access


def obtener_inventario(
    producto_id: int, almacen_id: int, ubicacion_id: int | None = None
) -> InventarioProducto | None:
    """Return the locked ledger row for the triple, or None if it does not exist yet."""
    return (
        InventarioProducto.objects.select_for_update()
        .filter(producto_id=producto_id, almacen_id=almacen_id, ubicacion_id=ubicacion_id or None)
        .first()
    )


def obtener_o_crear_inventario(
    producto_id: int, almacen_id: int, ubicacion_id: int | None = None
) -> InventarioProducto:
    """Return the locked ledger row, creating it with zero stock on first use."""
    inventario, _ = InventarioProducto.objects.select_for_update().get_or_create(
        producto_id=producto_id,
        almacen_id=almacen_id,
        ubicacion_id=ubicacion_id or None,
    )
    return inventario


def bloquear_inventarios(*inventario_ids: int) -> dict[int, InventarioProducto]:
    """Lock several ledger rows, always in ascending id order."""
    filas = InventarioProducto.objects.select_for_update().filter(id__in=set(inventario_ids)).order_by("id")
    return {fila.id: fila for fila in filas}


def registrar_bitacora(
    *, movimiento: MovimientoInventario, usuario_id: int | None, accion: str, descripcion: str, metadata=None
) -> BitacoraInventario:
    return BitacoraInventario.objects.create(
        movimiento=movimiento,
        usuario_id=usuario_id,
        accion=accion,
        descripcion=descripcion,
        metadata=metadata,
    )


def movimiento_detallado(movimiento_id: int) -> MovimientoInventario:
    return MovimientoInventario.objects.select_related(
        "producto", "usuario", "inventario__almacen", "inventario__ubicacion"
    ).get(id=movimiento_id)


def _log_movimiento(movimiento: MovimientoInventario) -> None:
    logger.info(
        "inventario.movimiento_registrado",
        extra={
            "event": "inventario.movimiento_registrado",
            "movimiento_id": movimiento.id,
            "tipo": movimiento.tipo,
            "producto_id": movimiento.producto_id,
            "inventario_id": movimiento.inventario_id,
            "cantidad": str(movimiento.cantidad),
            "usuario_id": movimiento.usuario_id,
        },
    )


# Movements


def registrar_ingreso(
    *,
    producto_id: int,
    almacen_id: int,
    usuario_id: int,
    cantidad,
    costo_unitario,
    ubicacion_id: int | None = None,
    referencia: str | None = None,
    observaciones: str | None = None,
    origen_tipo: str | None = None,
) -> MovimientoInventario:
    """Receive stock: increase availability and recompute the average cost."""
    cantidad = parse_cantidad(cantidad, "La cantidad del ingreso debe ser mayor a cero")
    costo_unitario = parse_costo(costo_unitario)

    with transaction.atomic():
        _validar_destino(producto_id, almacen_id, ubicacion_id)
        inventario = obtener_o_crear_inventario(producto_id, almacen_id, ubicacion_id)

        assert_stock_dentro_de_limite(inventario.stock_disponible + cantidad)
        inventario.costo_promedio = costo_promedio_ponderado(
            inventario.stock_disponible, inventario.costo_promedio or DECIMAL_ZERO, cantidad, costo_unitario
        )
        inventario.stock_disponible = inventario.stock_disponible + cantidad
        inventario.save(update_fields=["stock_disponible", "costo_promedio", "updated_at"])

        movimiento = MovimientoInventario.objects.create(
            tipo=MovimientoTipo.INGRESO,
            producto_id=producto_id,
            inventario=inventario,
            cantidad=cantidad,
            costo_unitario=costo_unitario,
            referencia_origen=referencia,
            origen_tipo=origen_tipo,
            observaciones=observaciones,
            usuario_id=usuario_id,
        )
        registrar_bitacora(
            movimiento=movimiento,
            usuario_id=usuario_id,
            accion="INGRESO",
            descripcion="Ingreso manual de inventario",
            metadata={
                "referencia": referencia,
                "origenTipo": origen_tipo,
                "cantidad": str(cantidad),
                "costoUnitario": str(costo_unitario),
            },
        )
        sync_producto_stock(producto_id)

    _log_movimiento(movimiento)
    return movimiento_detallado(movimiento.id)


def registrar_salida(
    *,
    producto_id: int,
    almacen_id: int,
    usuario_id: int,
    cantidad,
    ubicacion_id: int | None = None,
    referencia: str | None = None,
    observaciones: str | None = None,
    origen_tipo: str | None = None,
) -> MovimientoInventario:
    """Consume stock at the current average cost. Never creates a ledger row."""
    cantidad = parse_cantidad(cantidad, "La cantidad de la salida debe ser mayor a cero")

    with transaction.atomic():
        _validar_destino(producto_id, almacen_id, ubicacion_id)
        inventario = obtener_inventario(producto_id, almacen_id, ubicacion_id)
        if inventario is None or inventario.stock_disponible < cantidad:
            raise InventarioError(
                "Stock insuficiente para registrar la salida solicitada", 409, "STOCK_INSUFICIENTE"
            )

        inventario.stock_disponible = inventario.stock_disponible - cantidad
        inventario.save(update_fields=["stock_disponible", "updated_at"])

        movimiento = MovimientoInventario.objects.create(
            tipo=MovimientoTipo.SALIDA,
            producto_id=producto_id,
            inventario=inventario,
            cantidad=cantidad,
            costo_unitario=inventario.costo_promedio or DECIMAL_ZERO,
            referencia_origen=referencia,
            origen_tipo=origen_tipo,
            observaciones=observaciones,
            usuario_id=usuario_id,
        )
        registrar_bitacora(
            movimiento=movimiento,
            usuario_id=usuario_id,
            accion="SALIDA",
            descripcion="Salida manual de inventario",
            metadata={"referencia": referencia, "origenTipo": origen_tipo, "cantidad": str(cantidad)},
        )
        sync_producto_stock(producto_id)

    _log_movimiento(movimiento)
    return movimiento_detallado(movimiento.id)


def registrar_ajuste(
    *,
    producto_id: int,
    almacen_id: int,
    usuario_id: int,
    cantidad,
    motivo: str,
    es_positivo: bool,
    ubicacion_id: int | None = None,
    referencia: str | None = None,
    observaciones: str | None = None,
    origen_tipo: str | None = None,
    evidencia_url: str | None = None,
) -> MovimientoInventario:
    """Manual correction. Positive adjustments keep the average cost unchanged."""
    cantidad = parse_cantidad(cantidad, "La cantidad del ajuste debe ser mayor a cero")
    motivo = (motivo or "").strip()
    if not motivo:
        raise InventarioError("El motivo del ajuste es obligatorio", 422, "MOTIVO_REQUERIDO")

    tipo = MovimientoTipo.AJUSTE_POSITIVO if es_positivo else MovimientoTipo.AJUSTE_NEGATIVO
    descripcion = "Ajuste positivo de inventario" if es_positivo else "Ajuste negativo de inventario"

    with transaction.atomic():
        _validar_destino(producto_id, almacen_id, ubicacion_id)
        if es_positivo:
            inventario = obtener_o_crear_inventario(producto_id, almacen_id, ubicacion_id)
            assert_stock_dentro_de_limite(inventario.stock_disponible + cantidad)
            inventario.stock_disponible = inventario.stock_disponible + cantidad
        else:
            inventario = obtener_inventario(producto_id, almacen_id, ubicacion_id)
            if inventario is None or inventario.stock_disponible < cantidad:
                raise InventarioError(
                    "Stock insuficiente para aplicar el ajuste negativo solicitado", 409, "STOCK_INSUFICIENTE"
                )
            inventario.stock_disponible = inventario.stock_disponible - cantidad
        inventario.save(update_fields=["stock_disponible", "updated_at"])

        notas = [observaciones, motivo, f"Evidencia: {evidencia_url}" if evidencia_url else None]
        movimiento = MovimientoInventario.objects.create(
            tipo=tipo,
            producto_id=producto_id,
            inventario=inventario,
            cantidad=cantidad,
            costo_unitario=inventario.costo_promedio or DECIMAL_ZERO,
            referencia_origen=referencia,
            origen_tipo=origen_tipo,
            observaciones=" - ".join(n for n in notas if n) or None,
            usuario_id=usuario_id,
        )
        registrar_bitacora(
            movimiento=movimiento,
            usuario_id=usuario_id,
            accion=str(tipo),
            descripcion=descripcion,
            metadata={
                "referencia": referencia,
                "origenTipo": origen_tipo,
                "cantidad": str(cantidad),
                "motivo": motivo,
                "evidenciaUrl": evidencia_url,
            },
        )
        sync_producto_stock(producto_id)

    _log_movimiento(movimiento)
    return movimiento_detallado(movimiento.id)


# EOF
