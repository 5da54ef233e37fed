from decimal import Decimal

import pytest
from catalog.tests.factories import UserFactory
from common.choices import MovimientoTipo
from django.db import IntegrityError
from inventory.models import AlmacenUbicacion, InventarioProducto, MovimientoInventario
from inventory.tests.factories import AlmacenUbicacionFactory, InventarioProductoFactory


@pytest.mark.django_db
def test_one_ledger_row_per_product_and_warehouse_without_location():
    inv = InventarioProductoFactory()
    with pytest.raises(IntegrityError):
        InventarioProducto.objects.create(producto=inv.producto, almacen=inv.almacen)


@pytest.mark.django_db
def test_one_ledger_row_per_product_and_location():
    ubicacion = AlmacenUbicacionFactory()
    inv = InventarioProductoFactory(almacen=ubicacion.almacen, ubicacion=ubicacion)
    # A row without location coexists with the located one
    InventarioProducto.objects.create(producto=inv.producto, almacen=inv.almacen)
    with pytest.raises(IntegrityError):
        InventarioProducto.objects.create(producto=inv.producto, almacen=inv.almacen, ubicacion=ubicacion)


@pytest.mark.django_db
def test_ledger_stock_cannot_be_negative():
    inv = InventarioProductoFactory()
    with pytest.raises(IntegrityError):
        InventarioProducto.objects.filter(id=inv.id).update(stock_disponible=Decimal("-1"))


@pytest.mark.django_db
def test_committed_stock_cannot_be_negative():
    inv = InventarioProductoFactory()
    with pytest.raises(IntegrityError):
        InventarioProducto.objects.filter(id=inv.id).update(stock_comprometido=Decimal("-0.0001"))


@pytest.mark.django_db
def test_movement_quantity_must_be_positive():
    inv = InventarioProductoFactory()
    with pytest.raises(IntegrityError):
        MovimientoInventario.objects.create(
            tipo=MovimientoTipo.INGRESO,
            producto=inv.producto,
            inventario=inv,
            cantidad=Decimal("0"),
            costo_unitario=Decimal("1"),
            usuario=UserFactory(),
        )


@pytest.mark.django_db
def test_location_code_unique_per_warehouse():
    ubicacion = AlmacenUbicacionFactory(codigo="R-01")
    AlmacenUbicacionFactory(codigo="R-01")
    with pytest.raises(IntegrityError):
        AlmacenUbicacion.objects.create(almacen=ubicacion.almacen, codigo="R-01")
