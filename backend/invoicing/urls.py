from django.urls import path

from .views import invoice_list_create, invoice_detail, invoice_preview, job_invoice_create

urlpatterns = [
    path('invoices/', invoice_list_create, name='invoice-list-create'),
    path('invoices/preview/', invoice_preview, name='invoice-preview'),
    path('invoices/<int:pk>/', invoice_detail, name='invoice-detail'),
    path('jobs/<int:pk>/invoice/', job_invoice_create, name='job-invoice-create'),
]
