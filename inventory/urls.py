"""Inventory URL routes (v1)."""

from django.urls import path

from .views import (
    InventoryHealthView,
    MovimientoListCreateView,
    ReservaDetailView,
    ReservaListCreateView,
    StockResumenView,
    TransferenciaDetailView,
    TransferenciaListCreateView,
)

app_name = "inventory"

urlpatterns = [
    path("health/", InventoryHealthView.as_view(), name="inventory-health"),
    path("movimientos/", MovimientoListCreateView.as_view(), name="movimiento-list"),
    path("transferencias/", TransferenciaListCreateView.as_view(), name="transferencia-list"),
    path("transferencias/<int:transferencia_id>/", TransferenciaDetailView.as_view(), name="transferencia-detail"),
    path("reservas/", ReservaListCreateView.as_view(), name="reserva-list"),
    path("reservas/<int:reserva_id>/", ReservaDetailView.as_view(), name="reserva-detail"),
    path("stock/<int:producto_id>/", StockResumenView.as_view(), name="stock-resumen"),
]

# EOF
