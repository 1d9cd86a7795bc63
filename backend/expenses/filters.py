import django_filters

from .models import Expense


class ExpenseFilter(django_filters.FilterSet):
    job_id = django_filters.NumberFilter(field_name='job_id')
    supplier_id = django_filters.NumberFilter(field_name='supplier_id')
    currency = django_filters.CharFilter(field_name='currency', lookup_expr='iexact')

    class Meta:
        model = Expense
        fields = ['job_id', 'supplier_id', 'currency']
