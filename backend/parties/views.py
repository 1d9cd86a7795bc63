from django.db.models import Count, ProtectedError, Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.responses import list_response, mutation_response, validation_error_response, missing_id_response
from backend.core.utils import create_audit_log, changes_from, require_fields, get_object_or_not_found
from .models import Client, Supplier
from .serializers import ClientSerializer, SupplierSerializer


def _client_queryset():
    return Client.objects.annotate(
        annotated_job_count=Count('jobs', distinct=True),
        annotated_invoice_count=Count('invoices', distinct=True),
    ).order_by('name')


def _supplier_queryset():
    return Supplier.objects.annotate(
        annotated_expense_count=Count('expenses', distinct=True),
    ).order_by('name')


# Client views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def client_list_create(request):
    """List all clients or create a new client; ``?id=`` addresses one client"""
    client_id = request.query_params.get('id')
    if client_id and request.method != 'POST':
        return _client_detail(request, client_id)
    if request.method in ('PUT', 'PATCH', 'DELETE'):
        return missing_id_response('Client')

    if request.method == 'GET':
        queryset = _client_queryset()
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(email__icontains=search) |
                Q(phone__icontains=search) | Q(tin__icontains=search)
            )
        clients = ClientSerializer(queryset, many=True).data
        return list_response('clients', clients)

    require_fields(request.data, ['name'])
    serializer = ClientSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    client = serializer.save()
    create_audit_log(request=request, action='create', model_name='Client', object_id=client.id,
                     object_reference=client.name)
    return mutation_response('Client created successfully', 'client', ClientSerializer(client).data,
                             status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def client_detail(request, pk):
    return _client_detail(request, pk)


def _client_detail(request, pk):
    client = get_object_or_not_found(_client_queryset(), pk, 'Client')

    if request.method == 'GET':
        return Response({'client': ClientSerializer(client).data, 'success': True})

    if request.method in ('PUT', 'PATCH'):
        serializer = ClientSerializer(client, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        client = serializer.save()
        create_audit_log(request=request, action='update', model_name='Client', object_id=client.id,
                         object_reference=client.name, changes=changes_from(serializer.validated_data))
        return mutation_response('Client updated successfully', 'client', ClientSerializer(client).data)

    # Jobs and invoices protect their client
    data = ClientSerializer(client).data
    client_pk, name = client.pk, client.name
    try:
        client.delete()
    except ProtectedError:
        return Response({
            'error': 'Cannot delete client with associated jobs or invoices',
            'details': {
                'jobs_count': client.annotated_job_count,
                'invoices_count': client.annotated_invoice_count,
            },
        }, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='Client', object_id=client_pk,
                     object_reference=name)
    return mutation_response('Client deleted successfully', 'client', data)


# Supplier views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all suppliers or create a new supplier; ``?id=`` addresses one supplier"""
    supplier_id = request.query_params.get('id')
    if supplier_id and request.method != 'POST':
        return _supplier_detail(request, supplier_id)
    if request.method in ('PUT', 'PATCH', 'DELETE'):
        return missing_id_response('Supplier')

    if request.method == 'GET':
        suppliers = SupplierSerializer(_supplier_queryset(), many=True).data
        return list_response('suppliers', suppliers)

    require_fields(request.data, ['name'])
    serializer = SupplierSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    supplier = serializer.save()
    create_audit_log(request=request, action='create', model_name='Supplier', object_id=supplier.id,
                     object_reference=supplier.name)
    return mutation_response('Supplier created successfully', 'supplier', SupplierSerializer(supplier).data,
                             status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    return _supplier_detail(request, pk)


def _supplier_detail(request, pk):
    supplier = get_object_or_not_found(_supplier_queryset(), pk, 'Supplier')

    if request.method == 'GET':
        data = SupplierSerializer(supplier).data
        data['expenses'] = list(
            supplier.expenses.order_by('-created_at').values(
                'id', 'title', 'amount', 'currency', 'job_id', 'job_number', 'created_at'
            )
        )
        return Response({'supplier': data, 'success': True})

    if request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        supplier = serializer.save()
        # keep the denormalised name on linked expenses in step
        if 'name' in serializer.validated_data:
            supplier.expenses.update(supplier_name=supplier.name)
        create_audit_log(request=request, action='update', model_name='Supplier', object_id=supplier.id,
                         object_reference=supplier.name, changes=changes_from(serializer.validated_data))
        return mutation_response('Supplier updated successfully', 'supplier', SupplierSerializer(supplier).data)

    data = SupplierSerializer(supplier).data
    supplier_pk, name = supplier.pk, supplier.name
    supplier.delete()
    create_audit_log(request=request, action='delete', model_name='Supplier', object_id=supplier_pk,
                     object_reference=name)
    return mutation_response('Supplier deleted successfully', 'supplier', data)
