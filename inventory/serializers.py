"""Serializers for the inventory domain.

Read serializers render ledger history; write serializers validate the request
shape and hand off to the transactional services.
"""

from common.choices import MovimientoOrigen, MovimientoTipo
from rest_framework import serializers

from .models import MovimientoInventario, MovimientoTransferencia, ReservaInventario
from .reservations import cancelar_reserva, confirmar_reserva, liberar_reserva, reservar_stock
from .services import registrar_ajuste, registrar_ingreso, registrar_salida
from .transfers import anular_transferencia, confirmar_transferencia, crear_transferencia


class MovimientoSerializer(serializers.ModelSerializer):
    """Read-only movement with its warehouse/location resolved."""

    codigo_producto = serializers.CharField(source="producto.codigo_producto", read_only=True)
    almacen_id = serializers.IntegerField(source="inventario.almacen_id", read_only=True)
    ubicacion_id = serializers.IntegerField(source="inventario.ubicacion_id", read_only=True, allow_null=True)
    usuario = serializers.CharField(source="usuario.get_username", read_only=True)

    class Meta:
        model = MovimientoInventario
        fields = [
            "id",
            "tipo",
            "producto",
            "codigo_producto",
            "inventario",
            "almacen_id",
            "ubicacion_id",
            "cantidad",
            "costo_unitario",
            "referencia_origen",
            "origen_tipo",
            "observaciones",
            "usuario",
            "created_at",
        ]
        read_only_fields = fields


class TransferenciaSerializer(serializers.ModelSerializer):
    movimiento_envio = MovimientoSerializer(read_only=True)
    movimiento_recepcion = MovimientoSerializer(read_only=True)

    class Meta:
        model = MovimientoTransferencia
        fields = ["id", "estado", "movimiento_envio", "movimiento_recepcion", "created_at", "updated_at"]
        read_only_fields = fields


class ReservaSerializer(serializers.ModelSerializer):
    producto = serializers.IntegerField(source="inventario.producto_id", read_only=True)
    almacen_id = serializers.IntegerField(source="inventario.almacen_id", read_only=True)
    ubicacion_id = serializers.IntegerField(source="inventario.ubicacion_id", read_only=True, allow_null=True)

    class Meta:
        model = ReservaInventario
        fields = [
            "id",
            "inventario",
            "producto",
            "almacen_id",
            "ubicacion_id",
            "cantidad",
            "estado",
            "motivo",
            "metadata",
            "transaccion_id",
            "detalle_transaccion_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InventarioResumenSerializer(serializers.Serializer):
    inventario_id = serializers.IntegerField()
    almacen_id = serializers.IntegerField()
    almacen = serializers.CharField()
    ubicacion_id = serializers.IntegerField(allow_null=True)
    ubicacion = serializers.CharField(allow_null=True)
    stock_disponible = serializers.DecimalField(max_digits=14, decimal_places=4)
    stock_comprometido = serializers.DecimalField(max_digits=14, decimal_places=4)
    stock_minimo = serializers.DecimalField(max_digits=14, decimal_places=4)
    stock_maximo = serializers.DecimalField(max_digits=14, decimal_places=4, allow_null=True)
    costo_promedio = serializers.DecimalField(max_digits=16, decimal_places=6)
    critico = serializers.BooleanField()


class StockResumenSerializer(serializers.Serializer):
    producto_id = serializers.IntegerField()
    total_disponible = serializers.DecimalField(max_digits=20, decimal_places=4)
    total_comprometido = serializers.DecimalField(max_digits=20, decimal_places=4)
    inventarios = InventarioResumenSerializer(many=True)
    criticos = serializers.ListField(child=serializers.IntegerField())


# Write serializers


class MovimientoCreateSerializer(serializers.Serializer):
    """Register an INGRESO, SALIDA or AJUSTE_* movement.

    ``cantidad``/``costo_unitario`` are taken as text so numbers and numeric
    strings reach the service untouched; exact parsing happens there.
    """

    TIPOS = [
        MovimientoTipo.INGRESO,
        MovimientoTipo.SALIDA,
        MovimientoTipo.AJUSTE_POSITIVO,
        MovimientoTipo.AJUSTE_NEGATIVO,
    ]

    tipo = serializers.ChoiceField(choices=TIPOS)
    producto_id = serializers.IntegerField()
    almacen_id = serializers.IntegerField()
    ubicacion_id = serializers.IntegerField(required=False, allow_null=True)
    cantidad = serializers.CharField()
    costo_unitario = serializers.CharField(required=False)
    referencia = serializers.CharField(max_length=120, required=False, allow_null=True, allow_blank=True)
    observaciones = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    origen_tipo = serializers.ChoiceField(choices=MovimientoOrigen.choices, required=False, allow_null=True)
    motivo = serializers.CharField(required=False, allow_blank=True)
    evidencia_url = serializers.URLField(required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        if attrs["tipo"] == MovimientoTipo.INGRESO and "costo_unitario" not in attrs:
            raise serializers.ValidationError({"costo_unitario": "This field is required for INGRESO."})
        return attrs

    def create(self, validated_data):  # type: ignore[override]
        usuario_id = self.context["request"].user.id
        tipo = validated_data["tipo"]
        common = {
            "producto_id": validated_data["producto_id"],
            "almacen_id": validated_data["almacen_id"],
            "ubicacion_id": validated_data.get("ubicacion_id"),
            "usuario_id": usuario_id,
            "cantidad": validated_data["cantidad"],
            "referencia": validated_data.get("referencia") or None,
            "observaciones": validated_data.get("observaciones") or None,
            "origen_tipo": validated_data.get("origen_tipo") or None,
        }
        if tipo == MovimientoTipo.INGRESO:
            return registrar_ingreso(costo_unitario=validated_data["costo_unitario"], **common)
        if tipo == MovimientoTipo.SALIDA:
            return registrar_salida(**common)
        return registrar_ajuste(
            motivo=validated_data.get("motivo", ""),
            es_positivo=tipo == MovimientoTipo.AJUSTE_POSITIVO,
            evidencia_url=validated_data.get("evidencia_url") or None,
            **common,
        )


class TransferenciaCreateSerializer(serializers.Serializer):
    producto_id = serializers.IntegerField()
    origen_almacen_id = serializers.IntegerField()
    origen_ubicacion_id = serializers.IntegerField(required=False, allow_null=True)
    destino_almacen_id = serializers.IntegerField()
    destino_ubicacion_id = serializers.IntegerField(required=False, allow_null=True)
    cantidad = serializers.CharField()
    referencia = serializers.CharField(max_length=120, required=False, allow_null=True, allow_blank=True)
    observaciones = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    metadata = serializers.JSONField(required=False, allow_null=True)

    def create(self, validated_data):  # type: ignore[override]
        return crear_transferencia(
            usuario_id=self.context["request"].user.id,
            producto_id=validated_data["producto_id"],
            origen_almacen_id=validated_data["origen_almacen_id"],
            origen_ubicacion_id=validated_data.get("origen_ubicacion_id"),
            destino_almacen_id=validated_data["destino_almacen_id"],
            destino_ubicacion_id=validated_data.get("destino_ubicacion_id"),
            cantidad=validated_data["cantidad"],
            referencia=validated_data.get("referencia") or None,
            observaciones=validated_data.get("observaciones") or None,
            metadata=validated_data.get("metadata"),
        )


class TransferenciaAccionSerializer(serializers.Serializer):
    accion = serializers.ChoiceField(choices=["confirmar", "anular"])
    motivo = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    observaciones = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    metadata = serializers.JSONField(required=False, allow_null=True)

    def update(self, instance, validated_data):  # type: ignore[override]
        usuario_id = self.context["request"].user.id
        if validated_data["accion"] == "confirmar":
            return confirmar_transferencia(
                transferencia_id=instance.id,
                usuario_id=usuario_id,
                observaciones=validated_data.get("observaciones") or None,
                metadata=validated_data.get("metadata"),
            )
        return anular_transferencia(
            transferencia_id=instance.id,
            usuario_id=usuario_id,
            motivo=validated_data.get("motivo") or None,
            metadata=validated_data.get("metadata"),
        )


class ReservaCreateSerializer(serializers.Serializer):
    producto_id = serializers.IntegerField()
    almacen_id = serializers.IntegerField()
    ubicacion_id = serializers.IntegerField(required=False, allow_null=True)
    cantidad = serializers.CharField()
    transaccion_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    detalle_transaccion_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    motivo = serializers.CharField(max_length=500, required=False, allow_null=True, allow_blank=True)
    metadata = serializers.JSONField(required=False, allow_null=True)

    def create(self, validated_data):  # type: ignore[override]
        return reservar_stock(
            usuario_id=self.context["request"].user.id,
            producto_id=validated_data["producto_id"],
            almacen_id=validated_data["almacen_id"],
            ubicacion_id=validated_data.get("ubicacion_id"),
            cantidad=validated_data["cantidad"],
            transaccion_id=validated_data.get("transaccion_id"),
            detalle_transaccion_id=validated_data.get("detalle_transaccion_id"),
            motivo=validated_data.get("motivo") or None,
            metadata=validated_data.get("metadata"),
        )


class ReservaAccionSerializer(serializers.Serializer):
    ACCIONES = {
        "confirmar": confirmar_reserva,
        "liberar": liberar_reserva,
        "cancelar": cancelar_reserva,
    }

    accion = serializers.ChoiceField(choices=list(ACCIONES))
    motivo = serializers.CharField(max_length=500, required=False, allow_null=True, allow_blank=True)
    metadata = serializers.JSONField(required=False, allow_null=True)

    def update(self, instance, validated_data):  # type: ignore[override]
        handler = self.ACCIONES[validated_data["accion"]]
        return handler(
            reserva_id=instance.id,
            usuario_id=self.context["request"].user.id,
            motivo=validated_data.get("motivo") or None,
            metadata=validated_data.get("metadata"),
        )


# EOF
