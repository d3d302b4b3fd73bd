import math

from exposure_api.services.numeric import parse_float, parse_int, round_half_up


def test_parse_float_reads_leading_number():
	assert parse_float("2.8") == 2.8
	assert parse_float("  250s") == 250.0
	assert parse_float(".5") == 0.5
	assert parse_float("1e-3") == 0.001
	assert parse_float(4) == 4.0


def test_parse_float_without_number_is_nan():
	assert math.isnan(parse_float("bogus"))
	assert math.isnan(parse_float(""))
	assert math.isnan(parse_float(None))
	assert math.isnan(parse_float(True))


def test_parse_int_truncates():
	assert parse_int("100") == 100
	assert parse_int("100.7") == 100
	assert parse_int(" 3200 ISO") == 3200
	assert parse_int(800.9) == 800
	assert parse_int(200) == 200


def test_parse_int_without_number_is_nan():
	assert math.isnan(parse_int("ISO 100"))
	assert math.isnan(parse_int(None))
	assert math.isnan(parse_int(float("inf")))


def test_round_half_up():
	assert round_half_up(0.5) == 1
	assert round_half_up(2.5) == 3
	assert round_half_up(249.6) == 250
	assert round_half_up(-0.5) == 0
