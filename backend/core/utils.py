"""Shared helpers: audit logging, request validation and lookups"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_ipv46_address
from django.db import models, transaction
from rest_framework.exceptions import NotFound

from .exceptions import MissingFieldsError
from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    if not ip:
        return None
    try:
        validate_ipv46_address(ip)
    except DjangoValidationError:
        logger.warning(f"Ignoring invalid client IP: {ip}")
        return None
    return ip


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, login, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_reference: Reference identifier (e.g., job number, invoice number)
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None:
        audit_user = getattr(request, 'user', None)

    try:
        # Own savepoint so a failed insert leaves the caller's transaction usable
        with transaction.atomic():
            return AuditLog.objects.create(
                user=audit_user if audit_user and audit_user.is_authenticated else None,
                action=action,
                model_name=model_name,
                object_id=str(object_id),
                object_reference=object_reference,
                changes=changes or {},
                ip_address=get_client_ip(request) if request else None,
            )
    except Exception as e:
        # Audit failures never fail the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def changes_from(validated_data, exclude=()):
    """Audit-friendly copy of serializer data; related objects are stored by primary key"""
    changes = {}
    for key, value in validated_data.items():
        if key in exclude or isinstance(value, (list, dict)):
            continue
        changes[key] = value.pk if isinstance(value, models.Model) else value
    return changes


def require_fields(data, fields):
    """Raise MissingFieldsError for every field that is absent, null or blank"""
    missing = [field for field in fields if data.get(field) in (None, '')]
    if missing:
        raise MissingFieldsError(missing)


def get_object_or_not_found(queryset, pk, label):
    """Fetch ``pk`` from ``queryset`` or raise NotFound('<label> not found')"""
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValueError, TypeError, DjangoValidationError):
        raise NotFound(f'{label} not found')


def blank_to_none(data, fields):
    """Empty strings on optional fields mean 'clear this value'"""
    for field in fields:
        if field in data and data[field] == '':
            data[field] = None
    return data


def is_admin_user(user):
    """Admin role, or superuser/staff accounts created through the admin"""
    if not user or not user.is_authenticated:
        return False
    return user.role == 'ADMIN' or user.is_superuser or user.is_staff
