from unittest.mock import patch

from django.test import TestCase, override_settings
from rest_framework.test import APIClient


class HealthCheckTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	@override_settings(REDIS_URL=None)
	def test_healthy_without_redis(self):
		response = self.client.get('/health/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], 'healthy')
		self.assertEqual(response.data['services']['database'], 'healthy')
		self.assertNotIn('redis', response.data['services'])
		self.assertIn('live_connections', response.data)

	@override_settings(REDIS_URL='redis://localhost:6399/0')
	@patch('match_backend.views.redis.Redis.from_url')
	def test_unreachable_redis_is_unhealthy(self, mock_from_url):
		mock_from_url.return_value.ping.side_effect = ConnectionError('refused')

		response = self.client.get('/health/')

		self.assertEqual(response.status_code, 503)
		self.assertTrue(response.data['services']['redis'].startswith('unhealthy'))
