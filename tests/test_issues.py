"""Tests for health-threshold issue detection."""

import pytest

from airwatch.analytics.issues import IssueDetector

DRY_MESSAGE = 'Dry conditions with high particulate matter — check filtration systems'


@pytest.fixture
def detector() -> IssueDetector:
    return IssueDetector()


def test_healthy_values_raise_nothing(detector):
    assert detector.evaluate({
        'co': 2.0, 'pm2_5': 8.0, 'pm10': 15.0, 'voc': 120.0,
        'methane': 1.5, 'temperature': 21.0, 'humidity': 45.0,
    }) == []


def test_empty_fields(detector):
    assert detector.evaluate({}) == []


@pytest.mark.parametrize('fields,message', [
    ({'co': 9.1}, 'High CO levels predicted'),
    ({'pm2_5': 25.5}, 'Elevated PM2.5 levels predicted'),
    ({'pm10': 51.0}, 'Elevated PM10 levels predicted'),
    ({'voc': 401.0}, 'High VOC levels predicted'),
    ({'methane': 26.0}, 'Elevated methane levels predicted'),
])
def test_single_rules(detector, fields, message):
    assert detector.evaluate(fields) == [message]


@pytest.mark.parametrize('fields', [
    {'co': 9.0},
    {'pm2_5': 25.0},
    {'pm10': 50.0},
    {'voc': 400.0},
    {'methane': 25.0},
])
def test_limits_are_exclusive(detector, fields):
    assert detector.evaluate(fields) == []


def test_combustion_at_methane_boundary(detector):
    assert detector.evaluate({'co': 8, 'methane': 25}) == [
        'Potential combustion issue detected',
    ]


def test_dry_conditions(detector):
    assert detector.evaluate({'pm2_5': 21.0, 'pm10': 41.0, 'humidity': 29.0}) == [DRY_MESSAGE]


def test_dry_conditions_needs_humidity(detector):
    assert detector.evaluate({'pm2_5': 21.0, 'pm10': 41.0}) == []


def test_none_never_triggers(detector):
    assert detector.evaluate({'co': None, 'methane': None, 'humidity': None}) == []


def test_rules_co_fire_in_table_order(detector):
    issues = detector.evaluate({
        'co': 10.0, 'pm2_5': 30.0, 'pm10': 60.0, 'voc': 500.0,
        'methane': 30.0, 'humidity': 20.0,
    })
    assert issues == [
        'High CO levels predicted',
        'Elevated PM2.5 levels predicted',
        'Elevated PM10 levels predicted',
        'High VOC levels predicted',
        'Elevated methane levels predicted',
        'Potential combustion issue detected',
        DRY_MESSAGE,
    ]
