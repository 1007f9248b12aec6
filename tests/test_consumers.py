"""Tests for the auction WebSocket consumer."""

import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.conf import settings

from auction.consumers import AuctionConsumer
from auction.utils import broadcast


async def connect():
    communicator = WebsocketCommunicator(AuctionConsumer.as_asgi(), '/ws/auction/')
    connected, _ = await communicator.connect()
    assert connected
    return communicator


@pytest.mark.django_db(transaction=True)
def test_group_events_are_relayed():
    async def run():
        communicator = await connect()
        await get_channel_layer().group_send(settings.AUCTION['BROADCAST_GROUP'], {
            'type': 'auction.event',
            'event': 'bid-updated',
            'data': {'playerId': 7},
        })
        message = await communicator.receive_json_from()
        await communicator.disconnect()
        return message

    assert async_to_sync(run)() == {'type': 'bid-updated', 'data': {'playerId': 7}}


@pytest.mark.django_db(transaction=True)
def test_request_info_sends_snapshot(engine, make_player, live_state):
    player = make_player(name='Live')
    live_state(player)

    async def run():
        communicator = await connect()
        await communicator.send_json_to({'action': 'request-info'})
        loaded = await communicator.receive_json_from()
        updated = await communicator.receive_json_from()
        await communicator.disconnect()
        return loaded, updated

    loaded, updated = async_to_sync(run)()
    assert loaded['type'] == 'player-loaded'
    assert loaded['data']['player']['id'] == player.id
    assert updated == {'type': 'bid-updated', 'data': {'highestBid': None, 'playerId': player.id}}


@pytest.mark.django_db(transaction=True)
def test_bids_over_socket_refused():
    async def run():
        communicator = await connect()
        await communicator.send_json_to({'action': 'place_bid', 'amount': 100})
        reply = await communicator.receive_json_from()
        await communicator.send_to(text_data='not json')
        invalid = await communicator.receive_json_from()
        await communicator.disconnect()
        return reply, invalid

    reply, invalid = async_to_sync(run)()
    assert reply['type'] == 'error'
    assert invalid == {'type': 'error', 'data': {'message': 'Invalid JSON data'}}


@pytest.mark.django_db(transaction=True)
def test_broadcast_reaches_connected_clients():
    async def run():
        communicator = await connect()
        await sync_to_async(broadcast)('auction-status-changed', {'status': 'PAUSED'})
        message = await communicator.receive_json_from()
        await communicator.disconnect()
        return message

    assert async_to_sync(run)() == {'type': 'auction-status-changed', 'data': {'status': 'PAUSED'}}
