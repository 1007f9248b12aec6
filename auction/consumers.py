# auction/consumers.py
import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.apps import apps
from django.conf import settings

logger = logging.getLogger(__name__)


class AuctionConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for auction updates

    Read-only: owner dashboards, the admin console and the public overlay
    all join one group and receive every auction event. Bids go through
    the HTTP endpoints, never through this socket.
    """

    async def connect(self):
        self.room_group_name = settings.AUCTION['BROADCAST_GROUP']

        await self.channel_layer.group_add(
            self.room_group_name,
            self.channel_name
        )
        await self.accept()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(
            self.room_group_name,
            self.channel_name
        )

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            await self.send_event('error', {'message': 'Invalid JSON data'})
            return

        action = data.get('action') if isinstance(data, dict) else None
        if action == 'request-info':
            snapshot = await self.current_snapshot()
            await self.send_event('player-loaded', {'player': snapshot['player']})
            await self.send_event('bid-updated', {
                'highestBid': snapshot['highestBid'],
                'playerId': snapshot['currentPlayerId'],
            })
        elif action == 'place_bid':
            await self.send_event('error', {'message': 'Bids must be placed through the bidding endpoint'})
        else:
            await self.send_event('error', {'message': 'Unknown action'})

    @database_sync_to_async
    def current_snapshot(self):
        return apps.get_app_config('auction').engine.current_info()

    async def send_event(self, event, data):
        await self.send(text_data=json.dumps({
            'type': event,
            'data': data
        }))

    # ============================================================
    # Group message handler (broadcast to all clients)
    # ============================================================

    async def auction_event(self, event):
        await self.send_event(event['event'], event['data'])
