import uuid
from unittest.mock import patch

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import User
from common.exceptions import (
	ConflictError,
	InvalidInputError,
	NotFoundError,
	UnauthorizedError,
)
from services.interactions import InteractionGateway, interaction_store
from services.matching import find_nearby_users
from .models import Dislike, Like


class RecordingDispatcher:
	"""Stands in for NotificationDispatcher and remembers what it was asked to send."""

	def __init__(self):
		self.calls = []
		self.like_existed = []

	def notify_liked(self, target_user_id, actor_user_id):
		self.calls.append((target_user_id, actor_user_id))
		self.like_existed.append(
			Like.objects.filter(user_id=target_user_id, liked_by_id=actor_user_id).exists()
		)
		return True


class FailingDispatcher:
	def notify_liked(self, target_user_id, actor_user_id):
		raise RuntimeError('channel layer is down')


def make_user(email, latitude=0.0, longitude=0.0, name='Test User'):
	return User.objects.create_user(
		email=email,
		password='pass1234',
		name=name,
		latitude=latitude,
		longitude=longitude
	)


class InteractionStoreTests(TestCase):
	def setUp(self):
		self.alice = make_user('alice@example.com')
		self.bob = make_user('bob@example.com')

	def test_create_like_stores_edge(self):
		like = interaction_store.create_like(self.alice.id, self.bob.id)

		self.assertEqual(like.user_id, self.bob.id)
		self.assertEqual(like.liked_by_id, self.alice.id)
		self.assertIsNotNone(like.created_at)
		self.assertEqual(Like.objects.count(), 1)

	def test_repeat_like_creates_second_edge_by_default(self):
		first = interaction_store.create_like(self.alice.id, self.bob.id)
		second = interaction_store.create_like(self.alice.id, self.bob.id)

		self.assertNotEqual(first.id, second.id)
		self.assertEqual(Like.objects.filter(liked_by=self.alice, user=self.bob).count(), 2)

	@override_settings(LIKES_ALLOW_DUPLICATES=False)
	def test_repeat_like_conflicts_when_duplicates_disabled(self):
		interaction_store.create_like(self.alice.id, self.bob.id)

		with self.assertRaises(ConflictError):
			interaction_store.create_like(self.alice.id, self.bob.id)
		self.assertEqual(Like.objects.count(), 1)

	def test_create_like_requires_both_ids(self):
		with self.assertRaises(InvalidInputError):
			interaction_store.create_like('', self.bob.id)
		with self.assertRaises(InvalidInputError):
			interaction_store.create_like(self.alice.id, None)
		self.assertEqual(Like.objects.count(), 0)

	def test_create_like_for_unknown_target(self):
		with self.assertRaises(NotFoundError):
			interaction_store.create_like(self.alice.id, uuid.uuid4())
		with self.assertRaises(NotFoundError):
			interaction_store.create_like(self.alice.id, 'not-a-uuid')
		self.assertEqual(Like.objects.count(), 0)

	def test_delete_like(self):
		like = interaction_store.create_like(self.alice.id, self.bob.id)

		interaction_store.delete_like(like.id)

		self.assertFalse(Like.objects.filter(pk=like.id).exists())

	def test_delete_missing_like_is_not_found(self):
		with self.assertRaises(NotFoundError):
			interaction_store.delete_like(uuid.uuid4())
		with self.assertRaises(NotFoundError):
			interaction_store.delete_like('garbage')
		with self.assertRaises(InvalidInputError):
			interaction_store.delete_like('')

	def test_list_likes_pages_through_given_likes(self):
		carol = make_user('carol@example.com')
		interaction_store.create_like(self.alice.id, self.bob.id)
		interaction_store.create_like(self.alice.id, carol.id)
		interaction_store.create_like(self.bob.id, carol.id)

		self.assertEqual(len(interaction_store.list_likes(self.alice.id)), 2)
		self.assertEqual(len(interaction_store.list_likes(self.alice.id, take=1)), 1)
		self.assertEqual(len(interaction_store.list_likes(self.alice.id, take=5, skip=1)), 1)
		self.assertEqual(interaction_store.list_likes(self.alice.id, take=0), [])

		with self.assertRaises(InvalidInputError):
			interaction_store.list_likes(self.alice.id, take=-1)

	def test_create_dislike(self):
		dislike = interaction_store.create_dislike(self.alice.id, self.bob.id)

		self.assertEqual(dislike.user_id, self.bob.id)
		self.assertEqual(dislike.disliked_by_id, self.alice.id)

	def test_repeat_dislike_conflicts_and_keeps_one_edge(self):
		interaction_store.create_dislike(self.alice.id, self.bob.id)

		with self.assertRaises(ConflictError) as ctx:
			interaction_store.create_dislike(self.alice.id, self.bob.id)

		self.assertEqual(ctx.exception.message, 'This user has already disliked the target user')
		self.assertEqual(Dislike.objects.filter(disliked_by=self.alice, user=self.bob).count(), 1)

	def test_dislike_race_caught_by_unique_constraint(self):
		interaction_store.create_dislike(self.alice.id, self.bob.id)

		# Pretend the existence check missed the row a concurrent request just wrote
		with patch.object(Dislike.objects, 'filter') as mock_filter:
			mock_filter.return_value.exists.return_value = False
			with self.assertRaises(ConflictError):
				interaction_store.create_dislike(self.alice.id, self.bob.id)

		self.assertEqual(Dislike.objects.count(), 1)

	def test_reverse_dislike_is_a_separate_edge(self):
		interaction_store.create_dislike(self.alice.id, self.bob.id)
		interaction_store.create_dislike(self.bob.id, self.alice.id)

		self.assertEqual(Dislike.objects.count(), 2)

	def test_delete_missing_dislike_leaves_store_unchanged(self):
		interaction_store.create_dislike(self.alice.id, self.bob.id)

		with self.assertRaises(NotFoundError):
			interaction_store.delete_dislike(uuid.uuid4())

		self.assertEqual(Dislike.objects.count(), 1)

	def test_delete_dislike_allows_disliking_again(self):
		dislike = interaction_store.create_dislike(self.alice.id, self.bob.id)
		interaction_store.delete_dislike(dislike.id)

		interaction_store.create_dislike(self.alice.id, self.bob.id)

		self.assertEqual(Dislike.objects.count(), 1)


class FindNearbyUsersTests(TestCase):
	def setUp(self):
		self.reference = make_user('ref@example.com', 0, 0)
		self.near = make_user('near@example.com', 0, 0.05)
		self.far = make_user('far@example.com', 0, 1)

	def test_returns_only_users_inside_radius(self):
		result = find_nearby_users(self.reference.id, 10)

		self.assertEqual([item.user for item in result], [self.near])
		self.assertAlmostEqual(result[0].distance_km, 5.56, delta=0.05)

	def test_uses_default_radius(self):
		with self.settings(NEARBY_RADIUS_KM=200):
			result = find_nearby_users(self.reference.id)

		self.assertEqual([item.user for item in result], [self.near, self.far])

	def test_results_sorted_by_distance(self):
		closer = make_user('closer@example.com', 0, 0.01)

		result = find_nearby_users(self.reference.id, 10)

		self.assertEqual([item.user for item in result], [closer, self.near])
		distances = [item.distance_km for item in result]
		self.assertEqual(distances, sorted(distances))

	def test_same_coordinates_included_but_not_self(self):
		twin = make_user('twin@example.com', 0, 0)

		result = find_nearby_users(self.reference.id, 10)
		users = [item.user for item in result]

		self.assertIn(twin, users)
		self.assertNotIn(self.reference, users)
		self.assertEqual(result[0].distance_km, 0)

	def test_radius_is_exclusive(self):
		distance = find_nearby_users(self.reference.id, 10)[0].distance_km

		result = find_nearby_users(self.reference.id, distance)

		self.assertEqual(result, [])

	def test_unknown_reference_user(self):
		with self.assertRaises(NotFoundError):
			find_nearby_users(uuid.uuid4(), 10)

	def test_invalid_arguments(self):
		with self.assertRaises(InvalidInputError):
			find_nearby_users('', 10)
		with self.assertRaises(InvalidInputError):
			find_nearby_users(self.reference.id, 0)
		with self.assertRaises(InvalidInputError):
			find_nearby_users(self.reference.id, -5)


class InteractionGatewayTests(TestCase):
	def setUp(self):
		self.alice = make_user('alice@example.com')
		self.bob = make_user('bob@example.com', 0, 0.05)
		self.dispatcher = RecordingDispatcher()
		self.gateway = InteractionGateway(dispatcher=self.dispatcher)

	def test_like_notifies_target_after_commit(self):
		with self.captureOnCommitCallbacks(execute=True):
			result = self.gateway.like(self.alice.email, str(self.bob.id))

		self.assertEqual(result.message, 'Like created successfully')
		self.assertEqual(result.edge.liked_by_id, self.alice.id)
		self.assertEqual(self.dispatcher.calls, [(self.bob.id, self.alice.id)])
		self.assertEqual(self.dispatcher.like_existed, [True])

	def test_like_does_not_notify_before_commit(self):
		with self.captureOnCommitCallbacks(execute=False) as callbacks:
			self.gateway.like(self.alice.email, str(self.bob.id))

		self.assertEqual(self.dispatcher.calls, [])
		self.assertEqual(len(callbacks), 1)

	def test_failed_like_sends_nothing(self):
		with self.captureOnCommitCallbacks(execute=True):
			with self.assertRaises(NotFoundError):
				self.gateway.like(self.alice.email, str(uuid.uuid4()))

		self.assertEqual(self.dispatcher.calls, [])

	def test_dispatcher_failure_keeps_like(self):
		gateway = InteractionGateway(dispatcher=FailingDispatcher())

		with self.captureOnCommitCallbacks(execute=True):
			result = gateway.like(self.alice.email, str(self.bob.id))

		self.assertTrue(Like.objects.filter(pk=result.edge.id).exists())

	def test_dislike_sends_no_notification(self):
		with self.captureOnCommitCallbacks(execute=True):
			self.gateway.dislike(self.alice.email, str(self.bob.id))

		self.assertEqual(self.dispatcher.calls, [])
		self.assertEqual(Dislike.objects.count(), 1)

	def test_unknown_identity_is_unauthorized(self):
		with self.assertRaises(UnauthorizedError):
			self.gateway.like('ghost@example.com', str(self.bob.id))
		with self.assertRaises(UnauthorizedError):
			self.gateway.nearby('')

	def test_inactive_identity_is_unauthorized(self):
		self.alice.is_active = False
		self.alice.save()

		with self.assertRaises(UnauthorizedError):
			self.gateway.likes_given(self.alice.email)

	def test_nearby_excludes_caller(self):
		result = self.gateway.nearby(self.alice.email, 10)

		self.assertEqual([item.user for item in result], [self.bob])

	def test_remove_does_not_check_edge_owner(self):
		# Known gap: deletes are by edge id only, the caller is not compared to the actor
		like = Like.objects.create(user=self.bob, liked_by=self.alice)
		dislike = Dislike.objects.create(user=self.alice, disliked_by=self.bob)

		self.gateway.remove_like(like.id)
		self.gateway.remove_dislike(dislike.id)

		self.assertFalse(Like.objects.exists())
		self.assertFalse(Dislike.objects.exists())


@patch('interactions.views.get_interaction_gateway')
class InteractionApiTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = make_user('alice@example.com', name='Alice')
		self.bob = make_user('bob@example.com', 0, 0.05, name='Bob')
		self.client.force_authenticate(user=self.alice)
		self.dispatcher = RecordingDispatcher()

	def _gateway(self, mock_get_gateway):
		mock_get_gateway.return_value = InteractionGateway(dispatcher=self.dispatcher)

	def test_like_created(self, mock_get_gateway):
		self._gateway(mock_get_gateway)

		with self.captureOnCommitCallbacks(execute=True):
			response = self.client.post(f'/api/interact/likes/{self.bob.id}/')

		self.assertEqual(response.status_code, 201)
		self.assertTrue(response.data['success'])
		self.assertEqual(str(response.data['data']['userId']), str(self.bob.id))
		self.assertEqual(str(response.data['data']['likedById']), str(self.alice.id))
		self.assertEqual(self.dispatcher.calls, [(self.bob.id, self.alice.id)])

	def test_like_unknown_user_is_404(self, mock_get_gateway):
		self._gateway(mock_get_gateway)

		response = self.client.post(f'/api/interact/likes/{uuid.uuid4()}/')

		self.assertEqual(response.status_code, 404)
		self.assertFalse(response.data['success'])
		self.assertEqual(response.data['error_code'], 'not_found')

	def test_delete_like(self, mock_get_gateway):
		self._gateway(mock_get_gateway)
		like = Like.objects.create(user=self.bob, liked_by=self.alice)

		response = self.client.delete(f'/api/interact/likes/{like.id}/')

		self.assertEqual(response.status_code, 200)
		self.assertFalse(Like.objects.exists())

	def test_delete_missing_like_is_404(self, mock_get_gateway):
		self._gateway(mock_get_gateway)

		response = self.client.delete(f'/api/interact/likes/{uuid.uuid4()}/')

		self.assertEqual(response.status_code, 404)

	def test_duplicate_dislike_is_409(self, mock_get_gateway):
		self._gateway(mock_get_gateway)

		first = self.client.post(f'/api/interact/dislikes/{self.bob.id}/')
		second = self.client.post(f'/api/interact/dislikes/{self.bob.id}/')

		self.assertEqual(first.status_code, 201)
		self.assertEqual(second.status_code, 409)
		self.assertEqual(second.data['error_code'], 'conflict')
		self.assertEqual(Dislike.objects.count(), 1)

	def test_list_likes(self, mock_get_gateway):
		self._gateway(mock_get_gateway)
		Like.objects.create(user=self.bob, liked_by=self.alice)
		Like.objects.create(user=self.alice, liked_by=self.bob)

		response = self.client.get('/api/interact/likes/', {'take': 10})

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data['data']), 1)

	def test_list_rejects_bad_pagination(self, mock_get_gateway):
		self._gateway(mock_get_gateway)

		response = self.client.get('/api/interact/dislikes/', {'skip': -1})

		self.assertEqual(response.status_code, 400)
		self.assertFalse(response.data['success'])
		self.assertEqual(response.data['error_code'], 'invalid_input')

	def test_nearby(self, mock_get_gateway):
		self._gateway(mock_get_gateway)
		make_user('far@example.com', 0, 1)

		response = self.client.get('/api/interact/nearby/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 1)
		self.assertEqual(response.data['data'][0]['email'], 'bob@example.com')
		self.assertEqual(response.data['data'][0]['lat'], 0.0)
		self.assertEqual(response.data['data'][0]['lon'], 0.05)
		self.assertEqual(
			set(response.data['data'][0]),
			{'id', 'name', 'email', 'lat', 'lon', 'images', 'distance_km'}
		)
		self.assertAlmostEqual(response.data['data'][0]['distance_km'], 5.56, delta=0.05)

	def test_bad_query_parameter_uses_error_envelope(self, mock_get_gateway):
		self._gateway(mock_get_gateway)

		response = self.client.get('/api/interact/nearby/', {'radius_km': 'abc'})

		self.assertEqual(response.status_code, 400)
		self.assertFalse(response.data['success'])
		self.assertEqual(response.data['error_code'], 'invalid_input')
		self.assertTrue(response.data['message'].startswith('radius_km'))
		self.assertIn('radius_km', response.data['errors'])

	def test_requires_authentication(self, mock_get_gateway):
		self._gateway(mock_get_gateway)
		self.client.force_authenticate(user=None)

		response = self.client.post(f'/api/interact/dislikes/{self.bob.id}/')

		self.assertEqual(response.status_code, 401)
		self.assertFalse(response.data['success'])
		self.assertEqual(response.data['error_code'], 'unauthorized')
		self.assertTrue(response.data['message'])
		self.assertFalse(Dislike.objects.exists())

	def test_invalid_bearer_token_is_unauthorized(self, mock_get_gateway):
		self._gateway(mock_get_gateway)
		self.client.force_authenticate(user=None)
		self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')

		response = self.client.get('/api/interact/nearby/')

		self.assertEqual(response.status_code, 401)
		self.assertEqual(response.data['error_code'], 'unauthorized')
		self.assertIsInstance(response.data['message'], str)

	def test_unexpected_error_is_reported_as_internal(self, mock_get_gateway):
		mock_get_gateway.return_value.nearby.side_effect = RuntimeError('boom')

		response = self.client.get('/api/interact/nearby/')

		self.assertEqual(response.status_code, 500)
		self.assertEqual(
			response.data,
			{'success': False, 'message': 'Something went wrong', 'error_code': 'internal'}
		)
