from django.urls import path

from .views import job_list_create, job_detail, job_charges

urlpatterns = [
    path('jobs/', job_list_create, name='job-list-create'),
    path('jobs/<int:pk>/', job_detail, name='job-detail'),
    path('jobs/<int:pk>/charges/', job_charges, name='job-charges'),
]
