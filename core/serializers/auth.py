from rest_framework import serializers

from core.roles import ALL_ROLES


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class SwitchRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=list(ALL_ROLES))
