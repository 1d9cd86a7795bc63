from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.responses import list_response, mutation_response, validation_error_response, missing_id_response
from backend.core.utils import create_audit_log, changes_from, require_fields, get_object_or_not_found
from backend.jobs.models import LogisticsJob
from .filters import ExpenseFilter
from .models import Expense
from .serializers import ExpenseSerializer


def expense_queryset():
    return Expense.objects.select_related('job', 'supplier')


def _job_totals(job):
    expenses = Expense.objects.filter(job=job)
    total = expenses.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')
    return total, expenses.count()


# Expense views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_list_create(request):
    """List all expenses or record a new one; ``?id=`` addresses one expense"""
    expense_id = request.query_params.get('id')
    if expense_id and request.method != 'POST':
        return _expense_detail(request, expense_id)
    if request.method in ('PUT', 'PATCH', 'DELETE'):
        return missing_id_response('Expense')

    if request.method == 'GET':
        filterset = ExpenseFilter(request.query_params, queryset=expense_queryset().order_by('-created_at'))
        if not filterset.is_valid():
            return Response({'error': 'Validation failed', 'details': filterset.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        expenses = ExpenseSerializer(filterset.qs, many=True).data
        return list_response('expenses', expenses)

    require_fields(request.data, ['title', 'amount'])
    serializer = ExpenseSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    expense = serializer.save()
    create_audit_log(request=request, action='expense_create', model_name='Expense', object_id=expense.id,
                     object_reference=expense.job_number or expense.title,
                     changes={'amount': expense.amount, 'currency': expense.currency})
    return mutation_response('Expense created successfully', 'expense', ExpenseSerializer(expense).data,
                             status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, pk):
    return _expense_detail(request, pk)


def _expense_detail(request, pk):
    expense = get_object_or_not_found(expense_queryset(), pk, 'Expense')

    if request.method == 'GET':
        return Response({'expense': ExpenseSerializer(expense).data, 'success': True})

    if request.method in ('PUT', 'PATCH'):
        serializer = ExpenseSerializer(expense, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        expense = serializer.save()
        create_audit_log(request=request, action='update', model_name='Expense', object_id=expense.id,
                         object_reference=expense.job_number or expense.title,
                         changes=changes_from(serializer.validated_data))
        return mutation_response('Expense updated successfully', 'expense', ExpenseSerializer(expense).data)

    data = ExpenseSerializer(expense).data
    expense_pk, reference = expense.pk, expense.job_number or expense.title
    expense.delete()
    create_audit_log(request=request, action='delete', model_name='Expense', object_id=expense_pk,
                     object_reference=reference)
    return mutation_response('Expense deleted successfully', 'expense', data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def job_expenses(request, pk):
    """Expenses booked against one job, with the job's running total"""
    job = get_object_or_not_found(LogisticsJob.objects.all(), pk, 'Job')
    job_data = {'id': job.id, 'job_number': job.job_number, 'title': job.title}

    if request.method == 'GET':
        expenses = expense_queryset().filter(job=job).order_by('-created_at')
        total, count = _job_totals(job)
        return Response({
            'job': job_data,
            'expenses': ExpenseSerializer(expenses, many=True).data,
            'total_expenses': total,
            'count': count,
            'success': True,
        })

    require_fields(request.data, ['title', 'amount'])
    serializer = ExpenseSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    with transaction.atomic():
        expense = serializer.save(job=job, job_number=job.job_number)
        create_audit_log(request=request, action='expense_create', model_name='Expense', object_id=expense.id,
                         object_reference=job.job_number,
                         changes={'amount': expense.amount, 'currency': expense.currency})
    total, count = _job_totals(job)
    return Response({
        'message': 'Expense created successfully',
        'expense': ExpenseSerializer(expense).data,
        'total_expenses': total,
        'expense_count': count,
    }, status=status.HTTP_201_CREATED)
