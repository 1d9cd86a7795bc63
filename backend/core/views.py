import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenRefreshView

from .filters import UserFilter
from .models import AuditLog
from .responses import list_response, mutation_response, validation_error_response, missing_id_response
from .serializers import UserSerializer, UserWriteSerializer, ProfileUpdateSerializer, AuditLogSerializer
from .utils import create_audit_log, changes_from, require_fields, get_object_or_not_found, is_admin_user

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def _forbidden(message):
    return Response({'error': message}, status=status.HTTP_403_FORBIDDEN)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    """Exchange email and password for a JWT pair"""
    email = (request.data.get('email') or '').strip().lower()
    password = request.data.get('password') or ''
    if not email or not password:
        return Response({'error': 'Email and password are required'}, status=status.HTTP_400_BAD_REQUEST)

    user = User.objects.filter(email=email).first()
    if user is None:
        logger.info(f"Login failed for unknown email {email}")
        return Response({'error': 'Invalid email or password'}, status=status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        return Response({'error': 'Account is deactivated'}, status=status.HTTP_401_UNAUTHORIZED)
    if not user.check_password(password):
        logger.info(f"Login failed for {email}: wrong password")
        return Response({'error': 'Invalid email or password'}, status=status.HTTP_401_UNAUTHORIZED)

    refresh = CustomTokenObtainPairSerializer.get_token(user)
    update_last_login(None, user)
    create_audit_log(request=request, action='login', model_name='User', object_id=user.id,
                     user=user, object_reference=user.email)

    return Response({
        'message': 'Login successful',
        'user': UserSerializer(user).data,
        'token': str(refresh.access_token),
        'refresh': str(refresh),
    })


# User views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_list_create(request):
    """List or create users; ``?id=`` addresses a single user"""
    user_id = request.query_params.get('id')
    if user_id and request.method != 'POST':
        return _user_detail(request, user_id)
    if request.method in ('PUT', 'PATCH', 'DELETE'):
        return missing_id_response('User')

    if request.method == 'GET':
        queryset = User.objects.all().order_by('name')
        filterset = UserFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response({'error': 'Validation failed', 'details': filterset.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        users = UserSerializer(filterset.qs, many=True).data
        return list_response('users', users, filters={
            'role': request.query_params.get('role'),
            'is_active': request.query_params.get('is_active'),
        })

    if not is_admin_user(request.user):
        return _forbidden('Only administrators can manage users')
    require_fields(request.data, ['name', 'email'])
    serializer = UserWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer)
    user = serializer.save()
    create_audit_log(request=request, action='create', model_name='User', object_id=user.id,
                     object_reference=user.email, changes={'role': user.role})
    return mutation_response('User created successfully', 'user', UserSerializer(user).data,
                             status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    return _user_detail(request, pk)


def _user_detail(request, pk):
    user = get_object_or_not_found(User.objects.all(), pk, 'User')

    if request.method == 'GET':
        return Response({'user': UserSerializer(user).data, 'success': True})

    if not is_admin_user(request.user):
        return _forbidden('Only administrators can manage users')

    if request.method in ('PUT', 'PATCH'):
        serializer = UserWriteSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        user = serializer.save()
        changes = changes_from(serializer.validated_data, exclude=('password',))
        create_audit_log(request=request, action='update', model_name='User', object_id=user.id,
                         object_reference=user.email, changes=changes)
        return mutation_response('User updated successfully', 'user', UserSerializer(user).data)

    # DELETE: users that own jobs or invoices are kept
    jobs_count = user.jobs.count()
    invoices_count = user.invoices.count()
    if jobs_count or invoices_count:
        return Response({
            'error': 'Cannot delete user with associated jobs or invoices',
            'details': {'jobs_count': jobs_count, 'invoices_count': invoices_count},
        }, status=status.HTTP_400_BAD_REQUEST)

    data = UserSerializer(user).data
    user_pk, email = user.pk, user.email
    user.delete()
    create_audit_log(request=request, action='delete', model_name='User', object_id=user_pk,
                     object_reference=email)
    return mutation_response('User deleted successfully', 'user', data)


# Profile views
def _profile_target(request, user_id):
    """Resolve the profile being read or edited; only admins may touch other users"""
    if not user_id or str(user_id) == str(request.user.pk):
        return request.user, None
    if not is_admin_user(request.user):
        return None, _forbidden('You can only access your own profile')
    return get_object_or_not_found(User.objects.all(), user_id, 'User'), None


@api_view(['GET', 'PUT', 'POST'])
@permission_classes([IsAuthenticated])
def profile(request):
    """Read/update the profile, or upload a profile picture (POST)"""
    user_id = request.query_params.get('user_id') or request.data.get('user_id')
    user, error = _profile_target(request, user_id)
    if error is not None:
        return error

    if request.method == 'GET':
        return Response({'user': UserSerializer(user).data, 'success': True})

    if request.method == 'PUT':
        serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        with transaction.atomic():
            user = serializer.save()
            changed = [k for k in serializer.validated_data if k not in ('current_password', 'new_password')]
            if serializer.validated_data.get('new_password'):
                changed.append('password')
            create_audit_log(request=request, action='profile_update', model_name='User',
                             object_id=user.id, object_reference=user.email,
                             changes={'fields': changed})
        return mutation_response('Profile updated successfully', 'user', UserSerializer(user).data)

    # POST: profile picture upload as a data URL
    image_data = request.data.get('image_data')
    if not image_data:
        return Response({'error': 'Image data is required'}, status=status.HTTP_400_BAD_REQUEST)
    if not isinstance(image_data, str) or not image_data.startswith('data:image/'):
        return Response({'error': 'Invalid image format'}, status=status.HTTP_400_BAD_REQUEST)
    if len(image_data) > settings.PROFILE_PICTURE_MAX_LENGTH:
        return Response({'error': 'Image is too large'}, status=status.HTTP_400_BAD_REQUEST)

    user.profile_picture = image_data
    user.save(update_fields=['profile_picture', 'updated_at'])
    create_audit_log(request=request, action='profile_update', model_name='User', object_id=user.id,
                     object_reference=user.email, changes={'fields': ['profile_picture']})
    return mutation_response('Profile picture updated successfully', 'user', UserSerializer(user).data)


# AuditLog views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """Latest audit entries (admin only), filterable by model_name and object_reference"""
    if not is_admin_user(request.user):
        return _forbidden('Only administrators can view audit logs')
    queryset = AuditLog.objects.select_related('user')
    model_name = request.query_params.get('model_name')
    if model_name:
        queryset = queryset.filter(model_name=model_name)
    reference = request.query_params.get('object_reference')
    if reference:
        queryset = queryset.filter(object_reference=reference)
    logs = AuditLogSerializer(queryset[:200], many=True).data
    return list_response('audit_logs', logs)
