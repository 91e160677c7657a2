from rest_framework import serializers
from .models import BaseTicket, SupportTicket, FarmerSupportTicket


class BaseTicketSerializer(serializers.ModelSerializer):
    priority = serializers.ChoiceField(choices=BaseTicket.PRIORITY_CHOICES, required=False, allow_blank=True)
    farmer_id = serializers.CharField(max_length=100, required=False)
    attachment = serializers.FileField(required=False, allow_null=True, use_url=False)
    attachment_url = serializers.SerializerMethodField()

    class Meta:
        fields = ['id', 'subject', 'category', 'description', 'priority', 'farmer_id', 'attachment',
                  'attachment_url', 'reply', 'replied_at', 'created_at', 'updated_at']
        read_only_fields = ['reply', 'replied_at', 'created_at', 'updated_at']

    def get_attachment_url(self, obj):
        return obj.attachment.url if obj.attachment else None

    def validate(self, attrs):
        # Missing or blank priority falls back to Medium on create and full update
        if not self.partial and not attrs.get('priority'):
            attrs['priority'] = 'Medium'
        elif 'priority' in attrs and not attrs['priority']:
            attrs['priority'] = 'Medium'
        return attrs

    def update(self, instance, validated_data):
        # Keep the existing attachment unless a new file was uploaded
        if validated_data.get('attachment', None) is None:
            validated_data.pop('attachment', None)
            return super().update(instance, validated_data)

        old_attachment = instance.attachment.name if instance.attachment else None
        ticket = super().update(instance, validated_data)
        if old_attachment and old_attachment != ticket.attachment.name:
            ticket.attachment.storage.delete(old_attachment)
        return ticket


class SupportTicketSerializer(BaseTicketSerializer):
    class Meta(BaseTicketSerializer.Meta):
        model = SupportTicket


class FarmerSupportTicketSerializer(BaseTicketSerializer):
    class Meta(BaseTicketSerializer.Meta):
        model = FarmerSupportTicket


class TicketReplySerializer(serializers.Serializer):
    reply = serializers.CharField(allow_blank=True, required=False, default='')
