import asyncio
import uuid

from channels.db import database_sync_to_async
from channels.exceptions import ChannelFull
from channels.testing import WebsocketCommunicator
from django.test import SimpleTestCase, TransactionTestCase
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from interactions.models import Like
from services.interactions import InteractionGateway
from .consumers import NotificationConsumer
from .consumers.notification_consumer import (
	HANDSHAKE_FAILED_CLOSE_CODE,
	SESSION_REPLACED_CLOSE_CODE,
)
from .notifications import NotificationDispatcher, build_like_event
from .registry import ConnectionRegistry


class RecordingChannelLayer:
	def __init__(self):
		self.sent = []

	async def send(self, channel, message):
		self.sent.append((channel, message))


class FullChannelLayer:
	async def send(self, channel, message):
		raise ChannelFull()


class StalledChannelLayer:
	async def send(self, channel, message):
		await asyncio.sleep(5)


class ConnectionRegistryTests(SimpleTestCase):
	def setUp(self):
		self.registry = ConnectionRegistry()

	def test_bind_and_lookup(self):
		self.assertIsNone(self.registry.bind('user-1', 'chan-a'))

		self.assertEqual(self.registry.lookup('user-1'), 'chan-a')
		self.assertIn('user-1', self.registry)
		self.assertEqual(len(self.registry), 1)

	def test_lookup_unknown_identity(self):
		self.assertIsNone(self.registry.lookup('nobody'))
		self.assertNotIn('nobody', self.registry)

	def test_rebind_replaces_and_returns_previous(self):
		self.registry.bind('user-1', 'chan-a')

		previous = self.registry.bind('user-1', 'chan-b')

		self.assertEqual(previous, 'chan-a')
		self.assertEqual(self.registry.lookup('user-1'), 'chan-b')
		self.assertEqual(len(self.registry), 1)

	def test_stale_unbind_keeps_newer_binding(self):
		self.registry.bind('user-1', 'chan-a')
		self.registry.bind('user-1', 'chan-b')

		self.assertFalse(self.registry.unbind('user-1', 'chan-a'))
		self.assertEqual(self.registry.lookup('user-1'), 'chan-b')

		self.assertTrue(self.registry.unbind('user-1', 'chan-b'))
		self.assertIsNone(self.registry.lookup('user-1'))

	def test_identities_are_compared_as_strings(self):
		user_id = uuid.uuid4()
		self.registry.bind(user_id, 'chan-a')

		self.assertEqual(self.registry.lookup(str(user_id)), 'chan-a')


class NotificationDispatcherTests(SimpleTestCase):
	def setUp(self):
		self.registry = ConnectionRegistry()

	def _dispatcher(self, layer, timeout=0.1):
		return NotificationDispatcher(
			registry=self.registry,
			channel_layer=layer,
			send_timeout=timeout
		)

	def test_sends_event_to_bound_channel(self):
		layer = RecordingChannelLayer()
		self.registry.bind('target', 'chan-a')

		delivered = self._dispatcher(layer).notify_liked('target', 'actor')

		self.assertTrue(delivered)
		self.assertEqual(layer.sent, [('chan-a', build_like_event('target', 'actor'))])
		self.assertEqual(layer.sent[0][1]['type'], 'notification')
		self.assertEqual(layer.sent[0][1]['actor_user_id'], 'actor')

	def test_unconnected_target_is_skipped(self):
		layer = RecordingChannelLayer()

		delivered = self._dispatcher(layer).notify_liked('target', 'actor')

		self.assertFalse(delivered)
		self.assertEqual(layer.sent, [])

	def test_layer_error_is_swallowed(self):
		self.registry.bind('target', 'chan-a')

		delivered = self._dispatcher(FullChannelLayer()).notify_liked('target', 'actor')

		self.assertFalse(delivered)

	def test_stalled_layer_times_out(self):
		self.registry.bind('target', 'chan-a')

		delivered = self._dispatcher(StalledChannelLayer(), timeout=0.05).notify_liked('target', 'actor')

		self.assertFalse(delivered)


class NotificationConsumerTests(TransactionTestCase):
	def setUp(self):
		self.registry = ConnectionRegistry()
		self.alice = User.objects.create_user(
			email='alice@example.com',
			password='pass1234',
			name='Alice',
			latitude=0.0,
			longitude=0.0
		)
		self.bob = User.objects.create_user(
			email='bob@example.com',
			password='pass1234',
			name='Bob',
			latitude=0.0,
			longitude=0.05
		)
		self.bob_token = str(AccessToken.for_user(self.bob))

	def _communicator(self):
		return WebsocketCommunicator(
			NotificationConsumer.as_asgi(registry=self.registry),
			'/ws/notifications/'
		)

	async def _connect_as(self, token):
		communicator = self._communicator()
		connected, _ = await communicator.connect()
		self.assertTrue(connected)
		await communicator.send_json_to({'type': 'handshake', 'token': token})
		return communicator

	async def test_handshake_binds_user(self):
		communicator = await self._connect_as(self.bob_token)

		response = await communicator.receive_json_from()

		self.assertEqual(response, {'type': 'handshake', 'status': 'ok', 'userId': str(self.bob.id)})
		self.assertIn(str(self.bob.id), self.registry)

		await communicator.disconnect()
		self.assertNotIn(str(self.bob.id), self.registry)

	async def test_bad_token_closes_socket(self):
		communicator = await self._connect_as('not-a-token')

		output = await communicator.receive_output()

		self.assertEqual(output['type'], 'websocket.close')
		self.assertEqual(output['code'], HANDSHAKE_FAILED_CLOSE_CODE)
		self.assertEqual(len(self.registry), 0)
		await communicator.disconnect()

	async def test_messages_before_handshake_are_rejected(self):
		communicator = self._communicator()
		await communicator.connect()

		await communicator.send_json_to({'type': 'ping'})
		response = await communicator.receive_json_from()

		self.assertEqual(response, {'type': 'error', 'message': 'Handshake required'})
		await communicator.disconnect()

	async def test_invalid_json_is_answered_with_error(self):
		communicator = self._communicator()
		await communicator.connect()

		await communicator.send_to(text_data='{not json')
		response = await communicator.receive_json_from()

		self.assertEqual(response['type'], 'error')
		await communicator.disconnect()

	async def test_second_handshake_replaces_first_connection(self):
		first = await self._connect_as(self.bob_token)
		await first.receive_json_from()

		second = await self._connect_as(self.bob_token)
		await second.receive_json_from()

		self.assertEqual(await first.receive_json_from(), {'type': 'session_replaced'})
		closed = await first.receive_output()
		self.assertEqual(closed['type'], 'websocket.close')
		self.assertEqual(closed['code'], SESSION_REPLACED_CLOSE_CODE)

		# The replaced socket going away must not unbind the new one
		await first.disconnect()
		self.assertIn(str(self.bob.id), self.registry)

		await second.disconnect()
		self.assertEqual(len(self.registry), 0)

	async def test_like_pushes_notification_once(self):
		communicator = await self._connect_as(self.bob_token)
		await communicator.receive_json_from()

		gateway = InteractionGateway(dispatcher=NotificationDispatcher(registry=self.registry))
		result = await database_sync_to_async(gateway.like)(self.alice.email, str(self.bob.id))

		self.assertEqual(result.edge.user_id, self.bob.id)
		response = await communicator.receive_json_from()
		self.assertEqual(response, {'type': 'notification', 'data': {'userId': str(self.alice.id)}})
		self.assertTrue(await communicator.receive_nothing())

		await communicator.disconnect()

	async def test_like_without_connection_still_stored(self):
		gateway = InteractionGateway(dispatcher=NotificationDispatcher(registry=self.registry))

		result = await database_sync_to_async(gateway.like)(self.alice.email, str(self.bob.id))

		self.assertIsNotNone(result.edge)
		exists = await database_sync_to_async(
			Like.objects.filter(user=self.bob, liked_by=self.alice).exists
		)()
		self.assertTrue(exists)
