from django.urls import path

from .views import expense_list_create, expense_detail, job_expenses

urlpatterns = [
    path('expenses/', expense_list_create, name='expense-list-create'),
    path('expenses/<int:pk>/', expense_detail, name='expense-detail'),
    path('jobs/<int:pk>/expenses/', job_expenses, name='job-expenses'),
]
