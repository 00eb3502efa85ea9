"""Tests for AQI estimation."""

import pytest

from airwatch.analytics.aqi import aqi_category, estimate_aqi, pm25_to_aqi


@pytest.mark.parametrize('pm25,expected', [
    (0.0, 0),
    (6.0, 25),
    (12.0, 50),
    (35.4, 100),
    (55.4, 150),
])
def test_pm25_breakpoints(pm25, expected):
    assert round(pm25_to_aqi(pm25)) == expected


def test_no_relevant_fields(sample_factory):
    assert estimate_aqi(sample_factory({'temperature': 20.0})) is None


def test_pm25_only(sample_factory):
    assert estimate_aqi(sample_factory({'pm2_5': 12.0})) == 50


def test_co_raises_aqi(sample_factory):
    assert estimate_aqi(sample_factory({'pm2_5': 5.0, 'co': 12.0})) == 131


def test_voc_raises_aqi(sample_factory):
    assert estimate_aqi(sample_factory({'voc': 300.0})) == 151


def test_clamped_to_scale(sample_factory):
    assert estimate_aqi(sample_factory({'co': 100.0})) == 500


@pytest.mark.parametrize('aqi,label', [
    (0, 'Good'),
    (50, 'Good'),
    (51, 'Moderate'),
    (150, 'Unhealthy for Sensitive Groups'),
    (175, 'Unhealthy'),
    (250, 'Very Unhealthy'),
    (301, 'Hazardous'),
])
def test_categories(aqi, label):
    assert aqi_category(aqi) == label
