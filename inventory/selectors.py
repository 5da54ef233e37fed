"""Read-side queries for inventory (multi-warehouse)."""

from decimal import Decimal

from django.db.models import F, Sum

from .models import InventarioProducto, MovimientoInventario, MovimientoTransferencia, ReservaInventario


def list_movimientos():
    return MovimientoInventario.objects.select_related(
        "producto", "usuario", "inventario__almacen", "inventario__ubicacion"
    ).order_by("-created_at", "-id")


def list_transferencias():
    return MovimientoTransferencia.objects.select_related(
        "movimiento_envio__producto",
        "movimiento_envio__usuario",
        "movimiento_envio__inventario__almacen",
        "movimiento_envio__inventario__ubicacion",
        "movimiento_recepcion__producto",
        "movimiento_recepcion__usuario",
        "movimiento_recepcion__inventario__almacen",
        "movimiento_recepcion__inventario__ubicacion",
    ).order_by("-created_at", "-id")


def list_reservas():
    return ReservaInventario.objects.select_related(
        "inventario__producto", "inventario__almacen", "inventario__ubicacion"
    ).order_by("-created_at", "-id")


def inventarios_criticos(producto_id: int | None = None):
    """Ledger rows whose available stock is at or below their configured minimum."""
    qs = InventarioProducto.objects.filter(stock_minimo__gt=0, stock_disponible__lte=F("stock_minimo"))
    if producto_id is not None:
        qs = qs.filter(producto_id=producto_id)
    return qs.select_related("almacen", "ubicacion").order_by("almacen_id", "ubicacion_id")


def resumen_stock_producto(producto_id: int) -> dict:
    """Per-location ledger rows for a product plus its totals and critical rows."""
    qs = (
        InventarioProducto.objects.filter(producto_id=producto_id)
        .select_related("almacen", "ubicacion")
        .order_by("almacen_id", "ubicacion_id")
    )
    totales = qs.aggregate(disponible=Sum("stock_disponible"), comprometido=Sum("stock_comprometido"))
    inventarios = [
        {
            "inventario_id": inv.id,
            "almacen_id": inv.almacen_id,
            "almacen": inv.almacen.nombre,
            "ubicacion_id": inv.ubicacion_id,
            "ubicacion": inv.ubicacion.codigo if inv.ubicacion else None,
            "stock_disponible": inv.stock_disponible,
            "stock_comprometido": inv.stock_comprometido,
            "stock_minimo": inv.stock_minimo,
            "stock_maximo": inv.stock_maximo,
            "costo_promedio": inv.costo_promedio,
            "critico": inv.stock_minimo > 0 and inv.stock_disponible <= inv.stock_minimo,
        }
        for inv in qs
    ]
    return {
        "producto_id": producto_id,
        "total_disponible": totales["disponible"] or Decimal("0"),
        "total_comprometido": totales["comprometido"] or Decimal("0"),
        "inventarios": inventarios,
        "criticos": [row["inventario_id"] for row in inventarios if row["critico"]],
    }


# EOF
