"""Keep ``Producto.stock`` in step with the per-warehouse ledger."""

from decimal import Decimal

from catalog.models import Producto
from django.db.models import Sum

from .models import InventarioProducto


def sync_producto_stock(producto_id: int) -> Decimal:
    """Write SUM(stock_disponible) of all ledger rows onto the product.

    Must run inside the caller's atomic block so the cache commits together
    with the ledger change. Returns the written total.
    """
    total = InventarioProducto.objects.filter(producto_id=producto_id).aggregate(total=Sum("stock_disponible"))[
        "total"
    ]
    total = total if total is not None else Decimal("0")
    Producto.objects.filter(id=producto_id).update(stock=total)
    return total


# EOF
