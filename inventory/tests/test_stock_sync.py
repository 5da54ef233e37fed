from decimal import Decimal

import pytest
from catalog.tests.factories import ProductoFactory
from inventory.selectors import inventarios_criticos, resumen_stock_producto
from inventory.stock_sync import sync_producto_stock
from inventory.tests.factories import AlmacenUbicacionFactory, InventarioProductoFactory


@pytest.mark.django_db
def test_sync_writes_sum_of_available_stock_and_is_idempotent():
    producto = ProductoFactory()
    InventarioProductoFactory(producto=producto, stock_disponible=Decimal("2.5"), stock_comprometido=Decimal("4"))
    InventarioProductoFactory(producto=producto, stock_disponible=Decimal("7"))
    # Other products never leak into the total
    InventarioProductoFactory(stock_disponible=Decimal("100"))

    first = sync_producto_stock(producto.id)
    producto.refresh_from_db()
    assert first == Decimal("9.5")
    assert producto.stock == Decimal("9.5")

    second = sync_producto_stock(producto.id)
    producto.refresh_from_db()
    assert second == first
    assert producto.stock == Decimal("9.5")


@pytest.mark.django_db
def test_sync_without_ledger_rows_writes_zero():
    producto = ProductoFactory()
    producto.stock = Decimal("3")
    producto.save()

    assert sync_producto_stock(producto.id) == Decimal("0")
    producto.refresh_from_db()
    assert producto.stock == Decimal("0")


@pytest.mark.django_db
def test_resumen_stock_groups_rows_and_flags_critical():
    producto = ProductoFactory()
    central = InventarioProductoFactory(
        producto=producto, stock_disponible=Decimal("2"), stock_comprometido=Decimal("1"), stock_minimo=Decimal("5")
    )
    estante = AlmacenUbicacionFactory()
    InventarioProductoFactory(
        producto=producto,
        almacen=estante.almacen,
        ubicacion=estante,
        stock_disponible=Decimal("8"),
        stock_minimo=Decimal("5"),
    )

    resumen = resumen_stock_producto(producto.id)

    assert resumen["total_disponible"] == Decimal("10")
    assert resumen["total_comprometido"] == Decimal("1")
    assert len(resumen["inventarios"]) == 2
    assert resumen["criticos"] == [central.id]
    assert {row["ubicacion"] for row in resumen["inventarios"]} == {None, estante.codigo}
    assert [inv.id for inv in inventarios_criticos(producto.id)] == [central.id]


@pytest.mark.django_db
def test_resumen_for_product_without_stock():
    producto = ProductoFactory()
    resumen = resumen_stock_producto(producto.id)
    assert resumen["total_disponible"] == Decimal("0")
    assert resumen["inventarios"] == []
    assert resumen["criticos"] == []
