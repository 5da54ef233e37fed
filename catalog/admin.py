"""Admin registration for catalog models."""

from django.contrib import admin

from .models import Producto


@admin.register(Producto)
class ProductoAdmin(admin.ModelAdmin):
    list_display = ("codigo_producto", "nombre", "tipo", "estatus", "stock", "updated_at")
    search_fields = ("codigo_producto", "nombre")
    list_filter = ("tipo", "estatus")
    # Written by inventory operations only
    readonly_fields = ("stock",)
