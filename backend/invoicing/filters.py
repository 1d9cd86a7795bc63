import django_filters

from .models import Invoice


class InvoiceFilter(django_filters.FilterSet):
    client_id = django_filters.NumberFilter(field_name='client_id')
    job_id = django_filters.NumberFilter(field_name='job_id')
    status = django_filters.ChoiceFilter(field_name='status', choices=Invoice.STATUS_CHOICES)
    date_from = django_filters.DateFilter(field_name='invoice_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='invoice_date', lookup_expr='lte')

    class Meta:
        model = Invoice
        fields = ['client_id', 'job_id', 'status', 'date_from', 'date_to']
