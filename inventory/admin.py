"""Admin registrations for inventory app.

Ledger quantities are read-only here; stock only changes through the services.
"""

from django.contrib import admin

from .models import (
    Almacen,
    AlmacenUbicacion,
    BitacoraInventario,
    InventarioProducto,
    MovimientoInventario,
    MovimientoTransferencia,
    ReservaInventario,
)


class AlmacenUbicacionInline(admin.TabularInline):
    model = AlmacenUbicacion
    extra = 0


@admin.register(Almacen)
class AlmacenAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "activo", "updated_at")
    list_filter = ("activo",)
    search_fields = ("nombre",)
    inlines = [AlmacenUbicacionInline]


@admin.register(InventarioProducto)
class InventarioProductoAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "producto",
        "almacen",
        "ubicacion",
        "stock_disponible",
        "stock_comprometido",
        "stock_minimo",
        "costo_promedio",
        "updated_at",
    )
    list_filter = ("almacen",)
    search_fields = ("producto__codigo_producto", "producto__nombre")
    readonly_fields = ("stock_disponible", "stock_comprometido", "costo_promedio")


class HistorialAdminMixin:
    """Rows written only by the inventory services: no add or delete from the admin."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(MovimientoInventario)
class MovimientoInventarioAdmin(HistorialAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "tipo",
        "producto",
        "inventario",
        "cantidad",
        "costo_unitario",
        "referencia_origen",
        "created_at",
    )
    list_filter = ("tipo", "origen_tipo")
    search_fields = ("producto__codigo_producto", "referencia_origen")

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(MovimientoTransferencia)
class MovimientoTransferenciaAdmin(HistorialAdminMixin, admin.ModelAdmin):
    list_display = ("id", "estado", "movimiento_envio", "movimiento_recepcion", "created_at")
    list_filter = ("estado",)
    # State changes go through confirmar_transferencia / anular_transferencia
    readonly_fields = ("estado", "movimiento_envio", "movimiento_recepcion")

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(ReservaInventario)
class ReservaInventarioAdmin(HistorialAdminMixin, admin.ModelAdmin):
    list_display = ("id", "inventario", "cantidad", "estado", "transaccion_id", "created_at")
    list_filter = ("estado",)
    search_fields = ("motivo",)
    readonly_fields = ("inventario", "cantidad", "estado", "transaccion_id", "detalle_transaccion_id", "metadata")


@admin.register(BitacoraInventario)
class BitacoraInventarioAdmin(HistorialAdminMixin, admin.ModelAdmin):
    list_display = ("id", "accion", "movimiento", "usuario", "created_at")
    list_filter = ("accion",)

    def has_change_permission(self, request, obj=None):
        return False


# EOF
