from django.urls import path

from .views import (
    login, CustomTokenRefreshView,
    user_list_create, user_detail,
    profile, audit_log_list,
)

urlpatterns = [
    # Auth endpoints
    path('auth/', login, name='login'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    path('profile/', profile, name='profile'),
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]
