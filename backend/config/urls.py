"""
URL configuration for the logistics back-office API.

Every app contributes its routes under ``/api/``; the Django admin stays at
``/admin/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "AAL Logistics Admin Panel"
admin.site.site_title = "AAL Logistics Admin Portal"
admin.site.index_title = "Back-office administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('backend.core.urls')),
    path('api/', include('backend.parties.urls')),
    path('api/', include('backend.catalog.urls')),
    path('api/', include('backend.jobs.urls')),
    path('api/', include('backend.invoicing.urls')),
    path('api/', include('backend.expenses.urls')),
    path('api/', include('backend.reports.urls')),
]
