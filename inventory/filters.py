"""django-filter FilterSets for the inventory list endpoints."""

from django_filters import rest_framework as filters

from .models import MovimientoInventario, MovimientoTransferencia, ReservaInventario


class MovimientoFilterSet(filters.FilterSet):
    tipo = filters.ChoiceFilter(choices=MovimientoInventario.TIPO_CHOICES)
    producto = filters.NumberFilter(field_name="producto_id")
    almacen = filters.NumberFilter(field_name="inventario__almacen_id")
    referencia = filters.CharFilter(field_name="referencia_origen", lookup_expr="iexact")
    created_after = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = MovimientoInventario
        fields = ["tipo", "producto", "almacen", "referencia", "created_after", "created_before"]


class TransferenciaFilterSet(filters.FilterSet):
    estado = filters.ChoiceFilter(choices=MovimientoTransferencia.ESTADO_CHOICES)
    producto = filters.NumberFilter(field_name="movimiento_envio__producto_id")
    origen_almacen = filters.NumberFilter(field_name="movimiento_envio__inventario__almacen_id")
    destino_almacen = filters.NumberFilter(field_name="movimiento_recepcion__inventario__almacen_id")

    class Meta:
        model = MovimientoTransferencia
        fields = ["estado", "producto", "origen_almacen", "destino_almacen"]


class ReservaFilterSet(filters.FilterSet):
    estado = filters.ChoiceFilter(choices=ReservaInventario.ESTADO_CHOICES)
    producto = filters.NumberFilter(field_name="inventario__producto_id")
    almacen = filters.NumberFilter(field_name="inventario__almacen_id")
    transaccion = filters.NumberFilter(field_name="transaccion_id")
    created_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = ReservaInventario
        fields = ["estado", "producto", "almacen", "transaccion", "created_before"]


# EOF
