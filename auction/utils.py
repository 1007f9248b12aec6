"""
Utility functions for broadcasting auction events via WebSocket
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

logger = logging.getLogger(__name__)


def broadcast(event, data=None):
    """
    Send an event to every client in the auction room.

    Usage:
        from auction.utils import broadcast

        broadcast('bid-updated', {
            'highestBid': bid_payload(bid),
            'playerId': bid.player_id,
        })
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning("No channel layer configured, dropping %s", event)
        return
    async_to_sync(channel_layer.group_send)(
        settings.AUCTION['BROADCAST_GROUP'],
        {
            'type': 'auction.event',
            'event': event,
            'data': data,
        }
    )
