import uuid
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from common.exceptions import NotFoundError, UnauthorizedError
from common.utils import calculate_distance
from .models import User
from .services import (
	issue_tokens,
	resolve_identity,
	resolve_user_by_email,
	resolve_user_by_id,
)


class IdentityResolutionTests(TestCase):
	def setUp(self):
		self.user = User.objects.create_user(
			email='jane@example.com',
			password='pass1234',
			name='Jane',
			latitude=52.52,
			longitude=13.405
		)

	def test_access_token_resolves_to_email(self):
		token = str(AccessToken.for_user(self.user))

		self.assertEqual(resolve_identity(token), 'jane@example.com')

	def test_issued_tokens_resolve(self):
		tokens = issue_tokens(self.user)

		self.assertEqual(resolve_identity(tokens['access']), self.user.email)

	def test_refresh_token_is_not_an_access_token(self):
		tokens = issue_tokens(self.user)

		with self.assertRaises(UnauthorizedError):
			resolve_identity(tokens['refresh'])

	def test_invalid_tokens_are_rejected(self):
		for token in ['', None, 'garbage', 'a.b.c']:
			with self.assertRaises(UnauthorizedError):
				resolve_identity(token)

	def test_resolve_user_by_email(self):
		self.assertEqual(resolve_user_by_email('jane@example.com'), self.user)

		with self.assertRaises(NotFoundError):
			resolve_user_by_email('nobody@example.com')

	def test_inactive_user_not_resolved_by_email(self):
		self.user.is_active = False
		self.user.save()

		with self.assertRaises(NotFoundError):
			resolve_user_by_email('jane@example.com')

	def test_resolve_user_by_id(self):
		self.assertEqual(resolve_user_by_id(self.user.id), self.user)
		self.assertEqual(resolve_user_by_id(str(self.user.id)), self.user)

		with self.assertRaises(NotFoundError):
			resolve_user_by_id(uuid.uuid4())
		with self.assertRaises(NotFoundError):
			resolve_user_by_id('not-a-uuid')


class AuthApiTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.payload = {
			'name': 'Jane',
			'email': 'jane@example.com',
			'password': 'pass1234',
			'latitude': 52.52,
			'longitude': 13.405,
		}

	def test_register_returns_user_and_tokens(self):
		response = self.client.post('/api/auth/register/', self.payload, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['user']['email'], 'jane@example.com')
		self.assertIn('access', response.data['tokens'])
		self.assertIn('refresh', response.data['tokens'])
		self.assertTrue(User.objects.get(email='jane@example.com').check_password('pass1234'))

	def test_register_rejects_duplicate_email(self):
		self.client.post('/api/auth/register/', self.payload, format='json')

		response = self.client.post('/api/auth/register/', self.payload, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error_code'], 'invalid_input')
		self.assertIn('email', response.data['errors'])
		self.assertEqual(User.objects.count(), 1)

	def test_register_rejects_out_of_range_position(self):
		self.payload['latitude'] = 91

		response = self.client.post('/api/auth/register/', self.payload, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(User.objects.exists())

	def test_login(self):
		self.client.post('/api/auth/register/', self.payload, format='json')

		response = self.client.post(
			'/api/auth/login/',
			{'email': 'jane@example.com', 'password': 'pass1234'},
			format='json'
		)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(resolve_identity(response.data['tokens']['access']), 'jane@example.com')

	def test_login_with_wrong_password(self):
		self.client.post('/api/auth/register/', self.payload, format='json')

		response = self.client.post(
			'/api/auth/login/',
			{'email': 'jane@example.com', 'password': 'wrong-password'},
			format='json'
		)

		self.assertEqual(response.status_code, 401)
		self.assertEqual(
			response.data,
			{'success': False, 'message': 'Invalid credentials', 'error_code': 'unauthorized'}
		)

	def test_refresh(self):
		registered = self.client.post('/api/auth/register/', self.payload, format='json')

		response = self.client.post(
			'/api/auth/refresh/',
			{'refresh': registered.data['tokens']['refresh']},
			format='json'
		)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(resolve_identity(response.data['access']), 'jane@example.com')

	def test_profile_with_bearer_token(self):
		registered = self.client.post('/api/auth/register/', self.payload, format='json')
		self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {registered.data['tokens']['access']}")

		response = self.client.get('/api/auth/me/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['data']['name'], 'Jane')

	def test_profile_update_moves_user(self):
		registered = self.client.post('/api/auth/register/', self.payload, format='json')
		self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {registered.data['tokens']['access']}")

		response = self.client.put('/api/auth/me/', {'latitude': 48.85, 'longitude': 2.35}, format='json')

		self.assertEqual(response.status_code, 200)
		user = User.objects.get(email='jane@example.com')
		self.assertEqual(user.latitude, 48.85)
		self.assertEqual(user.longitude, 2.35)

	def test_profile_requires_token(self):
		response = self.client.get('/api/auth/me/')

		self.assertEqual(response.status_code, 401)
		self.assertEqual(response.data['error_code'], 'unauthorized')

	def test_refresh_with_garbage_token(self):
		response = self.client.post('/api/auth/refresh/', {'refresh': 'garbage'}, format='json')

		self.assertEqual(response.status_code, 401)
		self.assertEqual(response.data['error_code'], 'unauthorized')

	def test_refresh_requires_token(self):
		response = self.client.post('/api/auth/refresh/', {}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error_code'], 'invalid_input')


class SeedUsersCommandTests(TestCase):
	def test_seeds_users_around_center(self):
		out = StringIO()

		call_command('seed_users', count=5, lat=10.0, lon=20.0, spread_km=3, seed=7, stdout=out)

		self.assertIn('Seeded 5 users successfully', out.getvalue())
		users = User.objects.all()
		self.assertEqual(users.count(), 5)
		for user in users:
			self.assertLessEqual(calculate_distance(10.0, 20.0, user.latitude, user.longitude), 3.05)

	def test_seeded_users_can_log_in(self):
		call_command('seed_users', count=1, password='seedpass', stdout=StringIO())

		user = User.objects.get()
		self.assertTrue(user.check_password('seedpass'))
		self.assertTrue(-90 <= user.latitude <= 90)
		self.assertTrue(-180 <= user.longitude <= 180)

	def test_rejects_invalid_arguments(self):
		with self.assertRaises(CommandError):
			call_command('seed_users', count=0, stdout=StringIO())
		with self.assertRaises(CommandError):
			call_command('seed_users', count=1, lat=1.0, stdout=StringIO())
		self.assertFalse(User.objects.exists())
