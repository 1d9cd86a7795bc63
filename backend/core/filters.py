import django_filters

from .models import User


class UserFilter(django_filters.FilterSet):
    role = django_filters.CharFilter(method='filter_role', label='Role')
    is_active = django_filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = User
        fields = ['role', 'is_active']

    def filter_role(self, queryset, name, value):
        return queryset.filter(role=value.strip().upper())
