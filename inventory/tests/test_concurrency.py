import threading
from decimal import Decimal
from typing import List

import pytest
from catalog.models import Producto
from catalog.tests.factories import UserFactory
from django.db import close_old_connections, connection
from inventory.errors import InventarioError
from inventory.models import InventarioProducto, MovimientoInventario, ReservaInventario
from inventory.reservations import reservar_stock
from inventory.services import registrar_salida
from inventory.tests.factories import InventarioProductoFactory
from inventory.transfers import crear_transferencia


def _run_in_threads(target, args_list):
    barrier = threading.Barrier(len(args_list))
    threads = [threading.Thread(target=target, args=(barrier, *args)) for args in args_list]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


def _salida_worker(
    barrier: threading.Barrier, inv, user_id: int, qty: str, successes: List[str], errors: List[Exception]
):
    # Each thread uses its own DB connection
    close_old_connections()
    barrier.wait()
    try:
        registrar_salida(producto_id=inv.producto_id, almacen_id=inv.almacen_id, usuario_id=user_id, cantidad=qty)
        successes.append(qty)
    except InventarioError as exc:
        errors.append(exc)
    finally:
        connection.close()


def _reserva_worker(
    barrier: threading.Barrier, inv, user_id: int, qty: str, successes: List[str], errors: List[Exception]
):
    close_old_connections()
    barrier.wait()
    try:
        reservar_stock(producto_id=inv.producto_id, almacen_id=inv.almacen_id, usuario_id=user_id, cantidad=qty)
        successes.append(qty)
    except InventarioError as exc:
        errors.append(exc)
    finally:
        connection.close()


def _transferencia_worker(
    barrier: threading.Barrier, origen, destino, user_id: int, successes: List[str], errors: List[Exception]
):
    close_old_connections()
    barrier.wait()
    try:
        crear_transferencia(
            producto_id=origen.producto_id,
            origen_almacen_id=origen.almacen_id,
            destino_almacen_id=destino.almacen_id,
            usuario_id=user_id,
            cantidad="1",
        )
        successes.append("1")
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        connection.close()


@pytest.mark.django_db
def test_sequential_salidas_cannot_overdraw():
    user = UserFactory()
    inv = InventarioProductoFactory(stock_disponible=Decimal("5"))

    registrar_salida(producto_id=inv.producto_id, almacen_id=inv.almacen_id, usuario_id=user.id, cantidad="3")
    with pytest.raises(InventarioError):
        registrar_salida(producto_id=inv.producto_id, almacen_id=inv.almacen_id, usuario_id=user.id, cantidad="3")

    inv.refresh_from_db()
    assert inv.stock_disponible == Decimal("2")
    assert MovimientoInventario.objects.filter(inventario=inv).count() == 1


@pytest.mark.django_db(transaction=True)
def test_threaded_competing_salidas_never_go_negative():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    user = UserFactory()
    inv = InventarioProductoFactory(stock_disponible=Decimal("5"))
    successes: List[str] = []
    errors: List[Exception] = []

    _run_in_threads(_salida_worker, [(inv, user.id, "3", successes, errors), (inv, user.id, "3", successes, errors)])

    # Exactly one should succeed; the other sees the updated balance under the row lock
    assert len(successes) == 1
    assert len(errors) == 1
    assert errors[0].code == "STOCK_INSUFICIENTE"
    inv.refresh_from_db()
    assert inv.stock_disponible == Decimal("2")
    assert Producto.objects.get(id=inv.producto_id).stock == Decimal("2")


@pytest.mark.django_db(transaction=True)
def test_threaded_competing_reservations_do_not_overbook():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    user1 = UserFactory()
    user2 = UserFactory()
    inv = InventarioProductoFactory(stock_disponible=Decimal("3"))
    successes: List[str] = []
    errors: List[Exception] = []

    _run_in_threads(
        _reserva_worker, [(inv, user1.id, "3", successes, errors), (inv, user2.id, "3", successes, errors)]
    )

    assert len(successes) == 1
    assert len(errors) == 1
    inv = InventarioProducto.objects.get(id=inv.id)
    assert inv.stock_disponible == Decimal("0")
    assert inv.stock_comprometido == Decimal("3")
    assert ReservaInventario.objects.filter(inventario=inv, estado=ReservaInventario.ESTADO_PENDIENTE).count() == 1


@pytest.mark.django_db(transaction=True)
def test_threaded_many_small_salidas_account_for_every_unit():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    user = UserFactory()
    inv = InventarioProductoFactory(stock_disponible=Decimal("4"))
    successes: List[str] = []
    errors: List[Exception] = []

    _run_in_threads(_salida_worker, [(inv, user.id, "1", successes, errors) for _ in range(6)])

    assert len(successes) == 4
    assert len(errors) == 2
    inv.refresh_from_db()
    assert inv.stock_disponible == Decimal("0")
    assert MovimientoInventario.objects.filter(inventario=inv).count() == 4


@pytest.mark.django_db(transaction=True)
def test_threaded_opposite_transfers_both_complete():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    user = UserFactory()
    a = InventarioProductoFactory(stock_disponible=Decimal("10"))
    b = InventarioProductoFactory(producto=a.producto, stock_disponible=Decimal("10"))
    successes: List[str] = []
    errors: List[Exception] = []

    _run_in_threads(
        _transferencia_worker,
        [(a, b, user.id, successes, errors), (b, a, user.id, successes, errors)] * 3,
    )

    # Neither side is aborted as a deadlock victim
    assert errors == []
    assert len(successes) == 6
    a.refresh_from_db()
    b.refresh_from_db()
    assert a.stock_disponible == Decimal("7")
    assert b.stock_disponible == Decimal("7")
