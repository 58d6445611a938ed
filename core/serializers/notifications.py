from rest_framework import serializers

from core.models import Notification


class NotificationListQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=200, required=False)
    read = serializers.ChoiceField(choices=['true', 'false', '1', '0'], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    pageSize = serializers.IntegerField(min_value=1, required=False)

    def validate_read(self, v):
        return v in ('true', '1')


class NotificationIdSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)


class NotificationCreateSerializer(serializers.Serializer):
    recipientId = serializers.IntegerField(min_value=1)
    message = serializers.CharField(max_length=2000)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=[c for c, _ in Notification.TYPE_CHOICES], required=False)
    payload = serializers.DictField(required=False)
