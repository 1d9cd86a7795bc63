import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.responses import list_response, mutation_response, validation_error_response, missing_id_response
from backend.core.utils import create_audit_log, changes_from, require_fields, get_object_or_not_found
from backend.jobs.charges import CHARGES_CURRENCY, booking_number_for, charge_line_items
from backend.jobs.models import LogisticsJob
from .aggregation import summarize_services, build_line_items, number_to_words
from .filters import InvoiceFilter
from .models import Invoice
from .serializers import InvoiceSerializer, InvoicePreviewSerializer, create_invoice_with_items

logger = logging.getLogger(__name__)


def invoice_queryset():
    return Invoice.objects.select_related('client', 'job', 'user').prefetch_related('line_items')


# Invoice views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_list_create(request):
    """List invoices (filters: client_id, status) or create one with its line items"""
    invoice_id = request.query_params.get('id')
    if invoice_id and request.method != 'POST':
        return _invoice_detail(request, invoice_id)
    if request.method in ('PUT', 'PATCH', 'DELETE'):
        return missing_id_response('Invoice')

    if request.method == 'GET':
        filterset = InvoiceFilter(request.query_params, queryset=invoice_queryset().order_by('-created_at'))
        if not filterset.is_valid():
            return Response({'error': 'Validation failed', 'details': filterset.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        invoices = InvoiceSerializer(filterset.qs, many=True).data
        return list_response('invoices', invoices, filters={
            'client_id': request.query_params.get('client_id'),
            'status': request.query_params.get('status'),
        })

    require_fields(request.data, ['client', 'invoice_date', 'sub_total', 'total'])
    serializer = InvoiceSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    with transaction.atomic():
        invoice = serializer.save(user=request.user)
        create_audit_log(request=request, action='invoice_create', model_name='Invoice', object_id=invoice.id,
                         object_reference=invoice.number,
                         changes={'client': invoice.client_id, 'total': invoice.total, 'currency': invoice.currency})
    logger.info(f"Invoice {invoice.number} created for client {invoice.client_id} ({invoice.total} {invoice.currency})")
    invoice = invoice_queryset().get(pk=invoice.pk)
    return mutation_response('Invoice created successfully', 'invoice', InvoiceSerializer(invoice).data,
                             status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    return _invoice_detail(request, pk)


def _invoice_detail(request, pk):
    invoice = get_object_or_not_found(invoice_queryset(), pk, 'Invoice')

    if request.method == 'GET':
        return Response({'invoice': InvoiceSerializer(invoice).data, 'success': True})

    if request.method in ('PUT', 'PATCH'):
        serializer = InvoiceSerializer(invoice, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        with transaction.atomic():
            invoice = serializer.save()
            create_audit_log(request=request, action='update', model_name='Invoice', object_id=invoice.id,
                             object_reference=invoice.number, changes=changes_from(serializer.validated_data))
        invoice = invoice_queryset().get(pk=invoice.pk)
        return mutation_response('Invoice updated successfully', 'invoice', InvoiceSerializer(invoice).data)

    data = InvoiceSerializer(invoice).data
    invoice_pk, number = invoice.pk, invoice.number
    invoice.delete()
    create_audit_log(request=request, action='delete', model_name='Invoice', object_id=invoice_pk,
                     object_reference=number)
    return mutation_response('Invoice deleted successfully', 'invoice', data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoice_preview(request):
    """
    Price a set of service lines without saving anything.

    Returns per-currency sub total, VAT and total (with the total in words)
    and the line items an invoice in each currency would carry.
    """
    serializer = InvoicePreviewSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    services = serializer.validated_data['services']

    summaries = []
    for currency, totals in summarize_services(services).items():
        summaries.append({
            'currency': currency,
            **totals,
            'amount_in_words': number_to_words(totals['total'], currency),
            'line_items': build_line_items(services, currency),
        })
    return Response({'summaries': summaries, 'success': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def job_invoice_create(request, pk):
    """Raise an invoice for a job, priced from its freight charge template"""
    job = get_object_or_not_found(LogisticsJob.objects.select_related('client'), pk, 'Job')

    items = charge_line_items(job)
    sub_total = sum((item['amount'] for item in items), Decimal('0.00'))
    total = sum((item['billing_amount'] for item in items), Decimal('0.00'))
    invoice_data = {
        'client': job.client,
        'job': job,
        'job_number': job.job_number,
        'booking_number': booking_number_for(job),
        'invoice_date': timezone.localdate(),
        'status': 'UNPAID',
        'currency': CHARGES_CURRENCY,
        'sub_total': sub_total,
        'total': total,
        'amount_in_words': number_to_words(total, CHARGES_CURRENCY),
        'user': request.user,
    }

    with transaction.atomic():
        invoice = create_invoice_with_items(invoice_data, items)
        create_audit_log(request=request, action='invoice_from_job', model_name='Invoice', object_id=invoice.id,
                         object_reference=invoice.number,
                         changes={'job': job.id, 'job_number': job.job_number, 'total': total})
    logger.info(f"Invoice {invoice.number} created from job {job.job_number} ({total} {CHARGES_CURRENCY})")
    invoice = invoice_queryset().get(pk=invoice.pk)
    return mutation_response('Invoice created successfully', 'invoice', InvoiceSerializer(invoice).data,
                             status.HTTP_201_CREATED)
