"""
URL configuration for config project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .health import health

admin.site.site_header = "Taller Admin"
admin.site.index_title = "Admin"


class ScopedTokenObtainPairView(TokenObtainPairView):
    throttle_scope = "token"


class ScopedTokenRefreshView(TokenRefreshView):
    throttle_scope = "token"


urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    # JWT auth
    path("api/v1/auth/token/", ScopedTokenObtainPairView.as_view(), name="token-obtain"),
    path("api/v1/auth/token/refresh/", ScopedTokenRefreshView.as_view(), name="token-refresh"),
    # Versioned v1 routes only
    path("api/v1/inventario/", include("inventory.urls")),
]
