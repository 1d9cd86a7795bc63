import django_filters
from django.db.models import Q

from .models import LogisticsJob


class LogisticsJobFilter(django_filters.FilterSet):
    """Query filters for the job list: ?type=&status=&client_id="""
    type = django_filters.ChoiceFilter(field_name='job_type', choices=LogisticsJob.JOB_TYPE_CHOICES)
    status = django_filters.ChoiceFilter(field_name='status', choices=LogisticsJob.STATUS_CHOICES)
    client_id = django_filters.NumberFilter(field_name='client_id')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = LogisticsJob
        fields = ['type', 'status', 'client_id', 'search']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(job_number__icontains=value) | Q(title__icontains=value) | Q(client__name__icontains=value)
        )
