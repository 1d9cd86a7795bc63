"""Response envelopes shared by every resource"""
from rest_framework import status
from rest_framework.response import Response


def list_response(key, items, filters=None):
    payload = {key: items, 'total': len(items), 'success': True}
    if filters is not None:
        payload['filters'] = filters
    return Response(payload)


def mutation_response(message, key, data, status_code=status.HTTP_200_OK):
    return Response({'message': message, key: data}, status=status_code)


def validation_error_response(serializer):
    return Response(
        {'error': 'Validation failed', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST,
    )


def missing_id_response(label):
    return Response({'error': f'{label} ID is required'}, status=status.HTTP_400_BAD_REQUEST)
