"""DRF views for inventory movements, transfers, reservations and stock."""

from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.permissions import SAFE_METHODS, AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import selectors
from .errors import InventarioError
from .filters import MovimientoFilterSet, ReservaFilterSet, TransferenciaFilterSet
from .models import MovimientoTransferencia, ReservaInventario
from .serializers import (
    MovimientoCreateSerializer,
    MovimientoSerializer,
    ReservaAccionSerializer,
    ReservaCreateSerializer,
    ReservaSerializer,
    StockResumenSerializer,
    TransferenciaAccionSerializer,
    TransferenciaCreateSerializer,
    TransferenciaSerializer,
)

InventarioErrorSerializer = inline_serializer(
    name="InventarioError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)


def error_response(exc: InventarioError) -> Response:
    return Response(exc.as_dict(), status=exc.status_code)


class InventarioThrottleMixin:
    """Reads and writes throttle under separate scopes."""

    def get_throttles(self):
        self.throttle_scope = "inventario" if self.request.method in SAFE_METHODS else "inventario_write"
        return super().get_throttles()


class InventoryHealthView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = []

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Inventory health",
        description="Simple healthcheck endpoint for the inventory app",
        examples=[OpenApiExample("Health OK", value={"status": "ok", "app": "inventario"})],
    )
    def get(self, request):
        return Response({"status": "ok", "app": "inventario"})


class MovimientoListCreateView(InventarioThrottleMixin, generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MovimientoSerializer
    filterset_class = MovimientoFilterSet

    def get_queryset(self):
        return selectors.list_movimientos()

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List movements",
        description="List stock movements. Filters: tipo, producto, almacen, referencia, created_after/before (ISO).",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Register movement",
        description=(
            "Registers an INGRESO, SALIDA, AJUSTE_POSITIVO or AJUSTE_NEGATIVO movement. "
            "Stock, average cost and the product stock cache are updated in one transaction."
        ),
        request=MovimientoCreateSerializer,
        responses={201: MovimientoSerializer, 404: InventarioErrorSerializer, 409: InventarioErrorSerializer},
        examples=[
            OpenApiExample(
                "Ingreso",
                value={
                    "tipo": "INGRESO",
                    "producto_id": 1,
                    "almacen_id": 1,
                    "cantidad": "5",
                    "costo_unitario": "12.50",
                },
                request_only=True,
            ),
            OpenApiExample(
                "Stock insuficiente",
                value={
                    "detail": "Stock insuficiente para registrar la salida solicitada",
                    "code": "STOCK_INSUFICIENTE",
                },
                response_only=True,
                status_codes=["409"],
            ),
        ],
    )
    def post(self, request):
        serializer = MovimientoCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            movimiento = serializer.save()
        except InventarioError as exc:
            return error_response(exc)
        return Response(MovimientoSerializer(movimiento).data, status=status.HTTP_201_CREATED)


class TransferenciaListCreateView(InventarioThrottleMixin, generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = TransferenciaSerializer
    filterset_class = TransferenciaFilterSet

    def get_queryset(self):
        return selectors.list_transferencias()

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List transfers",
        description="List warehouse transfers. Filters: estado, producto, origen_almacen, destino_almacen.",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Create transfer",
        description="Decrements origin stock and opens a transfer pending reception at the destination.",
        request=TransferenciaCreateSerializer,
        responses={
            201: TransferenciaSerializer,
            404: InventarioErrorSerializer,
            409: InventarioErrorSerializer,
            422: InventarioErrorSerializer,
        },
    )
    def post(self, request):
        serializer = TransferenciaCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            transferencia = serializer.save()
        except InventarioError as exc:
            return error_response(exc)
        return Response(TransferenciaSerializer(transferencia).data, status=status.HTTP_201_CREATED)


class TransferenciaDetailView(InventarioThrottleMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Confirm or void transfer",
        description="`accion=confirmar` lands stock at the destination; `accion=anular` restores the origin.",
        request=TransferenciaAccionSerializer,
        responses={200: TransferenciaSerializer, 404: InventarioErrorSerializer, 409: InventarioErrorSerializer},
        examples=[OpenApiExample("Confirmar", value={"accion": "confirmar"}, request_only=True)],
    )
    def patch(self, request, transferencia_id: int):
        try:
            transferencia = MovimientoTransferencia.objects.only("id").get(id=transferencia_id)
        except MovimientoTransferencia.DoesNotExist:
            return error_response(
                InventarioError("La transferencia solicitada no existe", 404, "TRANSFERENCIA_NO_ENCONTRADA")
            )
        serializer = TransferenciaAccionSerializer(
            instance=transferencia, data=request.data, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)
        try:
            transferencia = serializer.save()
        except InventarioError as exc:
            return error_response(exc)
        return Response(TransferenciaSerializer(transferencia).data, status=status.HTTP_200_OK)


class ReservaListCreateView(InventarioThrottleMixin, generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReservaSerializer
    filterset_class = ReservaFilterSet

    def get_queryset(self):
        return selectors.list_reservas()

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List reservations",
        description="List stock reservations. Filters: estado, producto, almacen, transaccion, created_before (ISO).",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Reserve stock",
        description="Moves quantity from available to committed stock under a PENDIENTE reservation.",
        request=ReservaCreateSerializer,
        responses={201: ReservaSerializer, 404: InventarioErrorSerializer, 409: InventarioErrorSerializer},
    )
    def post(self, request):
        serializer = ReservaCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            reserva = serializer.save()
        except InventarioError as exc:
            return error_response(exc)
        return Response(ReservaSerializer(reserva).data, status=status.HTTP_201_CREATED)


class ReservaDetailView(InventarioThrottleMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Confirm, release or cancel reservation",
        description="Only PENDIENTE reservations can transition; other states answer 409 RESERVA_NO_PENDIENTE.",
        request=ReservaAccionSerializer,
        responses={200: ReservaSerializer, 404: InventarioErrorSerializer, 409: InventarioErrorSerializer},
        examples=[
            OpenApiExample("Liberar", value={"accion": "liberar", "motivo": "Orden cancelada"}, request_only=True)
        ],
    )
    def patch(self, request, reserva_id: int):
        try:
            reserva = ReservaInventario.objects.only("id").get(id=reserva_id)
        except ReservaInventario.DoesNotExist:
            return error_response(InventarioError("La reserva indicada no existe", 404, "RESERVA_NO_ENCONTRADA"))
        serializer = ReservaAccionSerializer(instance=reserva, data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            reserva = serializer.save()
        except InventarioError as exc:
            return error_response(exc)
        return Response(ReservaSerializer(reserva).data, status=status.HTTP_200_OK)


class StockResumenView(InventarioThrottleMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Product stock summary",
        description="Ledger rows per warehouse/location, totals and rows at or below minimum stock.",
        responses={200: StockResumenSerializer},
    )
    def get(self, request, producto_id: int):
        data = selectors.resumen_stock_producto(producto_id)
        return Response(StockResumenSerializer(data).data, status=status.HTTP_200_OK)


# EOF
