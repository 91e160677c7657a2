import logging
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .models import SupportTicket, FarmerSupportTicket
from .serializers import SupportTicketSerializer, FarmerSupportTicketSerializer, TicketReplySerializer
from agromarket.core.permissions import is_admin_user
from agromarket.core.utils import create_audit_log

logger = logging.getLogger('agromarket.support')

# URL prefix -> (model, serializer, display name)
TICKET_TYPES = {
    'support': (SupportTicket, SupportTicketSerializer, 'Support ticket'),
    'farmer-support': (FarmerSupportTicket, FarmerSupportTicketSerializer, 'Farmer support ticket'),
}


def owns_ticket(user, ticket):
    return is_admin_user(user) or ticket.farmer_id == str(user.id)


def ticket_not_found(label):
    return Response({'error': f'{label} not found'}, status=status.HTTP_404_NOT_FOUND)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def ticket_list_create(request, ticket_type):
    """List tickets (newest first) or submit a new one"""
    model, serializer_class, label = TICKET_TYPES[ticket_type]

    if request.method == 'GET':
        queryset = model.objects.all()
        if not is_admin_user(request.user):
            queryset = queryset.filter(farmer_id=str(request.user.id))

        for param in ('priority', 'category', 'farmer_id'):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})

        serializer = serializer_class(queryset, many=True)
        return Response(serializer.data)

    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"{label} validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    extra = {}
    if not serializer.validated_data.get('farmer_id') or not is_admin_user(request.user):
        extra['farmer_id'] = str(request.user.id)

    try:
        ticket = serializer.save(**extra)
    except Exception as e:
        logger.error(f"Failed to create {label.lower()}: {e}", exc_info=True)
        return Response({'error': f'Failed to create {label.lower()}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"{label} {ticket.id} '{ticket.subject}' submitted by {request.user.username}")
    return Response(serializer_class(ticket).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def ticket_detail(request, pk, ticket_type):
    """Retrieve, update or delete a ticket"""
    model, serializer_class, label = TICKET_TYPES[ticket_type]

    try:
        ticket = model.objects.get(pk=pk)
    except model.DoesNotExist:
        logger.warning(f"{label} {pk} not found")
        return ticket_not_found(label)

    if not owns_ticket(request.user, ticket):
        return Response({'error': 'You can only access your own tickets'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        return Response(serializer_class(ticket).data)

    if request.method == 'PUT':
        serializer = serializer_class(ticket, data=request.data)
        if not serializer.is_valid():
            logger.warning(f"{label} update validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            # Submitter id is fixed once the ticket exists
            ticket = serializer.save(farmer_id=ticket.farmer_id)
        except Exception as e:
            logger.error(f"Failed to update {label.lower()} {pk}: {e}", exc_info=True)
            return Response({'error': f'Failed to update {label.lower()}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.info(f"{label} {pk} updated by {request.user.username}")
        return Response(serializer_class(ticket).data)
    else:  # DELETE
        logger.info(f"User {request.user.username} deleting {label.lower()} {pk}")
        try:
            if ticket.attachment:
                ticket.attachment.delete(save=False)
            ticket.delete()
        except Exception as e:
            logger.error(f"Failed to delete {label.lower()} {pk}: {e}", exc_info=True)
            return Response({'error': f'Failed to delete {label.lower()}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({'message': f'{label} deleted successfully'}, status=status.HTTP_200_OK)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def ticket_reply(request, pk, ticket_type):
    """Attach the (single) staff reply to a ticket"""
    model, serializer_class, label = TICKET_TYPES[ticket_type]

    if not is_admin_user(request.user):
        return Response({'error': 'Only administrators can reply to tickets'}, status=status.HTTP_403_FORBIDDEN)

    serializer = TicketReplySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    reply = serializer.validated_data['reply'].strip()
    if not reply:
        return Response({'error': 'Reply cannot be empty'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        ticket = model.objects.get(pk=pk)
    except model.DoesNotExist:
        logger.warning(f"Reply to missing {label.lower()} {pk}")
        return ticket_not_found(label)

    ticket.reply = reply
    ticket.replied_at = timezone.now()
    try:
        ticket.save(update_fields=['reply', 'replied_at'])
    except Exception as e:
        logger.error(f"Failed to reply to {label.lower()} {pk}: {e}", exc_info=True)
        return Response({'error': f'Failed to reply to {label.lower()}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='ticket_reply',
        model_name=model.__name__,
        object_id=str(ticket.id),
        object_name=ticket.subject,
        changes={'reply': reply},
    )
    logger.info(f"{label} {pk} answered by {request.user.username}")
    return Response(serializer_class(ticket).data)
