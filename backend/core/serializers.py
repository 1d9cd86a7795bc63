from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import User, AuditLog

ROLE_VALUES = [value for value, _ in User.ROLE_CHOICES]


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'department', 'phone', 'profile_picture',
                  'is_active', 'last_login', 'created_at', 'updated_at']
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role']
        read_only_fields = fields


class UserWriteSerializer(serializers.ModelSerializer):
    """Create/update users from the admin screens. Role is matched case-insensitively."""
    role = serializers.CharField(required=False)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True,
                                     validators=[validate_password])

    class Meta:
        model = User
        fields = ['name', 'email', 'role', 'department', 'phone', 'is_active', 'password']
        extra_kwargs = {
            # uniqueness is checked case-insensitively in validate_email
            'email': {'validators': []},
        }

    def validate_email(self, value):
        email = value.strip().lower()
        existing = User.objects.filter(email=email)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError('User with this email already exists')
        return email

    def validate_role(self, value):
        role = value.strip().upper()
        if role not in ROLE_VALUES:
            raise serializers.ValidationError(f"Invalid role. Must be one of: {', '.join(ROLE_VALUES)}")
        return role

    def create(self, validated_data):
        password = validated_data.pop('password', None)
        validated_data.setdefault('role', 'CLIENT')
        user = User(**validated_data)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class ProfileUpdateSerializer(serializers.ModelSerializer):
    current_password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    new_password = serializers.CharField(write_only=True, required=False, allow_blank=True,
                                         validators=[validate_password])

    class Meta:
        model = User
        fields = ['name', 'phone', 'department', 'profile_picture', 'current_password', 'new_password']

    def validate(self, attrs):
        new_password = attrs.get('new_password')
        if new_password:
            current_password = attrs.get('current_password')
            if not current_password:
                raise serializers.ValidationError({'current_password': 'Current password is required to set a new password'})
            if self.instance.has_usable_password() and not self.instance.check_password(current_password):
                raise serializers.ValidationError({'current_password': 'Current password is incorrect'})
        return attrs

    def update(self, instance, validated_data):
        validated_data.pop('current_password', None)
        new_password = validated_data.pop('new_password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if new_password:
            instance.set_password(new_password)
        instance.save()
        return instance


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_reference',
                  'changes', 'ip_address', 'created_at']
