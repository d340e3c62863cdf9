# config/urls.py

from __future__ import annotations

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from core import views as core_views

api_v1 = [
    path("order/", include("orders.urls")),
    path("refunds/", include("refunds.urls")),
    path("complaints/", include("complaints.urls")),
    path("cart/", include("cart.urls")),
    path("", include("products.urls")),
    path("admin/", include("dashboards.urls")),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", core_views.health),
    path("api/v1/", include(api_v1)),
]

handler400 = "core.views.error_400"
handler403 = "core.views.error_403"
handler404 = "core.views.error_404"
handler500 = "core.views.error_500"

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
