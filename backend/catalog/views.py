from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.responses import list_response, mutation_response, validation_error_response, missing_id_response
from backend.core.utils import create_audit_log, changes_from, require_fields, get_object_or_not_found
from .models import ServiceItem
from .serializers import ServiceItemSerializer


# ServiceItem views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def service_list_create(request):
    """List the service catalog or add a service; ``?id=`` addresses one service"""
    service_id = request.query_params.get('id')
    if service_id and request.method != 'POST':
        return _service_detail(request, service_id)
    if request.method in ('PUT', 'PATCH', 'DELETE'):
        return missing_id_response('Service')

    if request.method == 'GET':
        queryset = ServiceItem.objects.all().order_by('name')
        currency = request.query_params.get('currency')
        if currency:
            queryset = queryset.filter(currency=currency.upper())
        services = ServiceItemSerializer(queryset, many=True).data
        return list_response('services', services)

    require_fields(request.data, ['name', 'price'])
    serializer = ServiceItemSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    service = serializer.save()
    create_audit_log(request=request, action='create', model_name='ServiceItem', object_id=service.id,
                     object_reference=service.name)
    return mutation_response('Service created successfully', 'service', ServiceItemSerializer(service).data,
                             status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def service_detail(request, pk):
    return _service_detail(request, pk)


def _service_detail(request, pk):
    service = get_object_or_not_found(ServiceItem.objects.all(), pk, 'Service')

    if request.method == 'GET':
        return Response({'service': ServiceItemSerializer(service).data, 'success': True})

    if request.method in ('PUT', 'PATCH'):
        serializer = ServiceItemSerializer(service, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        service = serializer.save()
        create_audit_log(request=request, action='update', model_name='ServiceItem', object_id=service.id,
                         object_reference=service.name, changes=changes_from(serializer.validated_data))
        return mutation_response('Service updated successfully', 'service', ServiceItemSerializer(service).data)

    data = ServiceItemSerializer(service).data
    service_pk, name = service.pk, service.name
    service.delete()
    create_audit_log(request=request, action='delete', model_name='ServiceItem', object_id=service_pk,
                     object_reference=name)
    return mutation_response('Service deleted successfully', 'service', data)
