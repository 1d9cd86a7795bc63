import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.responses import list_response, mutation_response, validation_error_response, missing_id_response
from backend.core.utils import create_audit_log, changes_from, require_fields, get_object_or_not_found
from .charges import CHARGES_CURRENCY, calculate_freight_charges
from .filters import LogisticsJobFilter
from .models import LogisticsJob
from .serializers import LogisticsJobSerializer, LogisticsJobDetailSerializer

logger = logging.getLogger(__name__)


def job_queryset():
    return LogisticsJob.objects.select_related('client', 'user').prefetch_related('expenses', 'invoices')


# LogisticsJob views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def job_list_create(request):
    """List jobs (filters: type, status, client_id) or open a new job; ``?id=`` addresses one job"""
    job_id = request.query_params.get('id')
    if job_id and request.method != 'POST':
        return _job_detail(request, job_id)
    if request.method in ('PUT', 'PATCH', 'DELETE'):
        return missing_id_response('Job')

    if request.method == 'GET':
        filterset = LogisticsJobFilter(request.query_params, queryset=job_queryset().order_by('-created_at'))
        if not filterset.is_valid():
            return Response({'error': 'Validation failed', 'details': filterset.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        jobs = LogisticsJobSerializer(filterset.qs, many=True).data
        return list_response('jobs', jobs, filters={
            'type': request.query_params.get('type'),
            'status': request.query_params.get('status'),
            'client_id': request.query_params.get('client_id'),
        })

    require_fields(request.data, ['title', 'client', 'job_type'])
    serializer = LogisticsJobSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    try:
        job = serializer.save(user=request.user)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Job {job.job_number} created for client {job.client_id} by user {request.user.id}")
    create_audit_log(request=request, action='job_create', model_name='LogisticsJob', object_id=job.id,
                     object_reference=job.job_number,
                     changes={'job_type': job.job_type, 'client': job.client_id, 'title': job.title})
    job = job_queryset().get(pk=job.pk)
    return mutation_response('Job created successfully', 'job', LogisticsJobSerializer(job).data,
                             status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def job_detail(request, pk):
    return _job_detail(request, pk)


def _job_detail(request, pk):
    job = get_object_or_not_found(job_queryset(), pk, 'Job')

    if request.method == 'GET':
        return Response({'job': LogisticsJobDetailSerializer(job).data, 'success': True})

    if request.method in ('PUT', 'PATCH'):
        serializer = LogisticsJobSerializer(job, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        job = serializer.save()
        create_audit_log(request=request, action='update', model_name='LogisticsJob', object_id=job.id,
                         object_reference=job.job_number, changes=changes_from(serializer.validated_data))
        job = job_queryset().get(pk=job.pk)
        return mutation_response('Job updated successfully', 'job', LogisticsJobSerializer(job).data)

    # Expenses and invoices keep their denormalised job number
    data = LogisticsJobSerializer(job).data
    job_pk, job_number = job.pk, job.job_number
    job.delete()
    create_audit_log(request=request, action='delete', model_name='LogisticsJob', object_id=job_pk,
                     object_reference=job_number)
    return mutation_response('Job deleted successfully', 'job', data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def job_charges(request, pk):
    """Freight charge estimate for a job, by freight mode"""
    job = get_object_or_not_found(job_queryset(), pk, 'Job')
    charges = calculate_freight_charges(job)
    return Response({
        'job_number': job.job_number,
        'freight_mode': job.freight_mode,
        'currency': CHARGES_CURRENCY,
        'charges': charges,
        'total': sum((charge['amount'] for charge in charges), Decimal('0.00')),
        'success': True,
    })
