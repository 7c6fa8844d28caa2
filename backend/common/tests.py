from django.test import SimpleTestCase
from rest_framework import exceptions

from common.exception_handlers import api_exception_handler
from common.exceptions import ConflictError
from common.utils import calculate_distance


class CalculateDistanceTests(SimpleTestCase):
	def test_identical_points_are_zero(self):
		for lat, lon in [(0, 0), (52.52, 13.405), (-33.86, 151.2), (90, 0), (-90, 45)]:
			self.assertEqual(calculate_distance(lat, lon, lat, lon), 0)

	def test_distance_is_symmetric(self):
		berlin = (52.52, 13.405)
		sydney = (-33.8688, 151.2093)
		self.assertAlmostEqual(
			calculate_distance(*berlin, *sydney),
			calculate_distance(*sydney, *berlin),
			places=9
		)

	def test_one_degree_of_latitude_on_meridian(self):
		distance = calculate_distance(0, 0, 1, 0)
		self.assertAlmostEqual(distance, 111.19, delta=111.19 * 0.01)

	def test_one_degree_of_longitude_on_equator(self):
		distance = calculate_distance(0, 0, 0, 1)
		self.assertAlmostEqual(distance, 111.19, delta=111.19 * 0.01)

	def test_antipodal_points_are_half_circumference(self):
		distance = calculate_distance(0, 0, 0, 180)
		self.assertAlmostEqual(distance, 20015.1, delta=1)

	def test_pole_to_pole(self):
		distance = calculate_distance(90, 0, -90, 0)
		self.assertAlmostEqual(distance, 20015.1, delta=1)

	def test_accepts_numeric_strings_and_decimals(self):
		from decimal import Decimal
		self.assertAlmostEqual(
			calculate_distance("0", Decimal("0"), 0, 0.05),
			calculate_distance(0, 0, 0, 0.05),
		)


class ApiExceptionHandlerTests(SimpleTestCase):
	def test_service_error_keeps_code_and_status(self):
		response = api_exception_handler(ConflictError('Already disliked'), {})

		self.assertEqual(response.status_code, 409)
		self.assertEqual(
			response.data,
			{'success': False, 'message': 'Already disliked', 'error_code': 'conflict'}
		)

	def test_non_field_validation_error_message(self):
		exc = exceptions.ValidationError({'non_field_errors': ['Passwords do not match']})

		response = api_exception_handler(exc, {})

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'Passwords do not match')
		self.assertEqual(response.data['error_code'], 'invalid_input')

	def test_other_api_errors_are_wrapped(self):
		response = api_exception_handler(exceptions.MethodNotAllowed('PATCH'), {})

		self.assertEqual(response.status_code, 405)
		self.assertEqual(response.data['error_code'], 'method_not_allowed')
		self.assertIn('PATCH', response.data['message'])
		self.assertNotIn('errors', response.data)
