from decimal import Decimal

import pytest
from catalog.models import Producto
from catalog.tests.factories import UserFactory
from common.choices import MovimientoOrigen, MovimientoTipo
from inventory.errors import InventarioError
from inventory.models import BitacoraInventario, InventarioProducto, MovimientoTransferencia
from inventory.tests.factories import AlmacenFactory, AlmacenUbicacionFactory, InventarioProductoFactory
from inventory.transfers import anular_transferencia, confirmar_transferencia, crear_transferencia


def _destino(inv):
    return InventarioProducto.objects.filter(producto_id=inv.producto_id).exclude(id=inv.id).first()


@pytest.fixture
def origen():
    return InventarioProductoFactory(stock_disponible=Decimal("10"), costo_promedio=Decimal("4.5"))


@pytest.mark.django_db
def test_crear_transferencia_moves_stock_out_of_origin_immediately(origen):
    user = UserFactory()
    destino_almacen = AlmacenFactory()

    t = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=destino_almacen.id,
        usuario_id=user.id,
        cantidad="4",
        referencia="TR-1",
        metadata={"solicitante": "taller"},
    )

    assert t.estado == MovimientoTransferencia.ESTADO_PENDIENTE_RECEPCION
    assert t.movimiento_envio.tipo == MovimientoTipo.TRANSFERENCIA_ENVIO
    assert t.movimiento_recepcion.tipo == MovimientoTipo.TRANSFERENCIA_RECEPCION
    assert t.movimiento_envio.cantidad == t.movimiento_recepcion.cantidad == Decimal("4")
    assert t.movimiento_envio.costo_unitario == Decimal("4.5")
    assert t.movimiento_envio.origen_tipo == MovimientoOrigen.TRANSFERENCIA
    assert t.movimiento_recepcion.observaciones == "Pendiente de recepción"
    assert t.movimiento_recepcion.referencia_origen == "TR-1"

    origen.refresh_from_db()
    destino = _destino(origen)
    assert origen.stock_disponible == Decimal("6")
    # Destination row exists but receives nothing until confirmation
    assert destino.almacen_id == destino_almacen.id
    assert destino.stock_disponible == Decimal("0")
    assert Producto.objects.get(id=origen.producto_id).stock == Decimal("6")

    acciones = set(BitacoraInventario.objects.values_list("accion", flat=True))
    assert acciones == {"TRANSFERENCIA_ENVIO", "TRANSFERENCIA_PENDIENTE"}
    envio_audit = BitacoraInventario.objects.get(accion="TRANSFERENCIA_ENVIO")
    assert envio_audit.metadata["destino"]["almacenId"] == destino_almacen.id
    assert envio_audit.metadata["metadata"] == {"solicitante": "taller"}


@pytest.mark.django_db
def test_crear_transferencia_conserves_total_stock(origen):
    user = UserFactory()
    destino = InventarioProductoFactory(producto=origen.producto, stock_disponible=Decimal("3"))
    before = origen.stock_disponible + destino.stock_disponible

    crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=destino.almacen_id,
        usuario_id=user.id,
        cantidad="2.5",
    )

    origen.refresh_from_db()
    destino.refresh_from_db()
    # In-transit stock has left the origin; the destination has not yet received it
    assert origen.stock_disponible == Decimal("7.5")
    assert destino.stock_disponible == Decimal("3")
    assert origen.stock_disponible + destino.stock_disponible + Decimal("2.5") == before


@pytest.mark.django_db
def test_crear_transferencia_insufficient_origin(origen):
    user = UserFactory()
    destino_almacen = AlmacenFactory()

    with pytest.raises(InventarioError) as excinfo:
        crear_transferencia(
            producto_id=origen.producto_id,
            origen_almacen_id=origen.almacen_id,
            destino_almacen_id=destino_almacen.id,
            usuario_id=user.id,
            cantidad="11",
        )

    assert excinfo.value.code == "STOCK_ORIGEN_INSUFICIENTE"
    assert excinfo.value.status_code == 409
    origen.refresh_from_db()
    assert origen.stock_disponible == Decimal("10")
    assert MovimientoTransferencia.objects.count() == 0
    # Rolled back together with the failed transfer
    assert not InventarioProducto.objects.filter(almacen=destino_almacen).exists()


@pytest.mark.django_db
def test_crear_transferencia_requires_distinct_destination(origen):
    user = UserFactory()

    with pytest.raises(InventarioError) as excinfo:
        crear_transferencia(
            producto_id=origen.producto_id,
            origen_almacen_id=origen.almacen_id,
            destino_almacen_id=origen.almacen_id,
            usuario_id=user.id,
            cantidad="1",
        )
    assert excinfo.value.code == "TRANSFERENCIA_DESTINO_INVALIDO"
    assert excinfo.value.status_code == 422


@pytest.mark.django_db
def test_transfer_between_locations_of_same_warehouse(origen):
    user = UserFactory()
    estante = AlmacenUbicacionFactory(almacen=origen.almacen)

    t = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=origen.almacen_id,
        destino_ubicacion_id=estante.id,
        usuario_id=user.id,
        cantidad="1",
    )
    confirmar_transferencia(transferencia_id=t.id, usuario_id=user.id)

    destino = InventarioProducto.objects.get(producto_id=origen.producto_id, ubicacion=estante)
    assert destino.stock_disponible == Decimal("1")
    assert Producto.objects.get(id=origen.producto_id).stock == Decimal("10")


@pytest.mark.django_db
def test_confirmar_transferencia_lands_stock_at_destination(origen):
    user = UserFactory()
    receptor = UserFactory()
    destino_almacen = AlmacenFactory()
    t = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=destino_almacen.id,
        usuario_id=user.id,
        cantidad="4",
    )

    t = confirmar_transferencia(transferencia_id=t.id, usuario_id=receptor.id, metadata={"guia": "G-9"})

    assert t.estado == MovimientoTransferencia.ESTADO_COMPLETADA
    assert t.movimiento_recepcion.observaciones == "Recepción confirmada"
    assert t.movimiento_recepcion.usuario_id == receptor.id
    origen.refresh_from_db()
    assert origen.stock_disponible == Decimal("6")
    assert _destino(origen).stock_disponible == Decimal("4")
    assert Producto.objects.get(id=origen.producto_id).stock == Decimal("10")
    assert BitacoraInventario.objects.filter(accion="TRANSFERENCIA_COMPLETADA").count() == 1
    recepcion_audit = BitacoraInventario.objects.get(accion="TRANSFERENCIA_RECEPCION")
    assert recepcion_audit.metadata["transferenciaId"] == t.id

    with pytest.raises(InventarioError) as excinfo:
        confirmar_transferencia(transferencia_id=t.id, usuario_id=receptor.id)
    assert excinfo.value.code == "TRANSFERENCIA_COMPLETADA"
    assert _destino(origen).stock_disponible == Decimal("4")


@pytest.mark.django_db
def test_anular_transferencia_restores_origin(origen):
    user = UserFactory()
    destino_almacen = AlmacenFactory()
    t = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=destino_almacen.id,
        usuario_id=user.id,
        cantidad="4",
        observaciones="Envío semanal",
    )

    t = anular_transferencia(transferencia_id=t.id, usuario_id=user.id, motivo="Error de captura")

    assert t.estado == MovimientoTransferencia.ESTADO_ANULADA
    assert t.movimiento_envio.observaciones == "Envío semanal - Transferencia anulada - Error de captura"
    assert t.movimiento_recepcion.observaciones == "Pendiente de recepción - Transferencia anulada - Error de captura"
    origen.refresh_from_db()
    assert origen.stock_disponible == Decimal("10")
    assert _destino(origen).stock_disponible == Decimal("0")
    assert Producto.objects.get(id=origen.producto_id).stock == Decimal("10")
    assert set(
        BitacoraInventario.objects.filter(accion__startswith="TRANSFERENCIA_ANULADA").values_list("accion", flat=True)
    ) == {"TRANSFERENCIA_ANULADA", "TRANSFERENCIA_ANULADA_DESTINO"}

    with pytest.raises(InventarioError) as anulada:
        anular_transferencia(transferencia_id=t.id, usuario_id=user.id)
    assert anulada.value.code == "TRANSFERENCIA_ANULADA"

    with pytest.raises(InventarioError) as confirm:
        confirmar_transferencia(transferencia_id=t.id, usuario_id=user.id)
    assert confirm.value.code == "TRANSFERENCIA_ANULADA"
    origen.refresh_from_db()
    assert origen.stock_disponible == Decimal("10")


@pytest.mark.django_db
def test_anular_completed_transfer_fails_without_touching_stock(origen):
    user = UserFactory()
    destino_almacen = AlmacenFactory()
    t = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=destino_almacen.id,
        usuario_id=user.id,
        cantidad="4",
    )
    confirmar_transferencia(transferencia_id=t.id, usuario_id=user.id)

    with pytest.raises(InventarioError) as excinfo:
        anular_transferencia(transferencia_id=t.id, usuario_id=user.id)

    assert excinfo.value.code == "TRANSFERENCIA_COMPLETADA"
    assert excinfo.value.status_code == 409
    origen.refresh_from_db()
    assert origen.stock_disponible == Decimal("6")
    assert _destino(origen).stock_disponible == Decimal("4")


@pytest.mark.django_db
def test_missing_transfer():
    user = UserFactory()
    with pytest.raises(InventarioError) as excinfo:
        confirmar_transferencia(transferencia_id=424242, usuario_id=user.id)
    assert excinfo.value.code == "TRANSFERENCIA_NO_ENCONTRADA"
    assert excinfo.value.status_code == 404


@pytest.mark.django_db
def test_confirmar_rejects_a_destination_balance_the_ledger_row_cannot_hold(origen):
    user = UserFactory()
    destino = InventarioProductoFactory(producto=origen.producto, stock_disponible=Decimal("9999999999"))
    t = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=destino.almacen_id,
        usuario_id=user.id,
        cantidad="1",
    )

    with pytest.raises(InventarioError) as excinfo:
        confirmar_transferencia(transferencia_id=t.id, usuario_id=user.id)

    assert excinfo.value.code == "CANTIDAD_INVALIDA"
    assert excinfo.value.status_code == 422
    destino.refresh_from_db()
    assert destino.stock_disponible == Decimal("9999999999")
    assert MovimientoTransferencia.objects.get(id=t.id).estado == MovimientoTransferencia.ESTADO_PENDIENTE_RECEPCION

    # Still pending, so it can be voided back into the origin
    anular_transferencia(transferencia_id=t.id, usuario_id=user.id)
    origen.refresh_from_db()
    assert origen.stock_disponible == Decimal("10")


@pytest.mark.django_db
def test_return_transfer_reuses_both_ledger_rows(origen):
    user = UserFactory()
    # The return leg has the newer row as origin and the older one as destination
    destino_almacen = AlmacenFactory()
    ida = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=origen.almacen_id,
        destino_almacen_id=destino_almacen.id,
        usuario_id=user.id,
        cantidad="4",
    )
    confirmar_transferencia(transferencia_id=ida.id, usuario_id=user.id)

    vuelta = crear_transferencia(
        producto_id=origen.producto_id,
        origen_almacen_id=destino_almacen.id,
        destino_almacen_id=origen.almacen_id,
        usuario_id=user.id,
        cantidad="3",
    )
    confirmar_transferencia(transferencia_id=vuelta.id, usuario_id=user.id)

    origen.refresh_from_db()
    assert origen.stock_disponible == Decimal("9")
    assert _destino(origen).stock_disponible == Decimal("1")
    assert vuelta.movimiento_recepcion.inventario_id == origen.id
