"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import copy
import pytest
from unittest.mock import AsyncMock, Mock
from floodcap.settings import Settings


BASE_FEATURE = {
    "type": "Feature",
    "properties": {
        "state": 1,
        "last_updated": "2016-02-16 10:36:50.568724",
        "level_name": "foo foo",
        "parent_name": "bar",
    },
    "geometry": {
        "type": "Polygon",
        "coordinates": [
            [
                [1, 2],
                [3, 4],
            ]
        ],
    },
}


@pytest.fixture
def make_feature():
    """테스트용 피처 팩토리 (매 호출마다 새 딕셔너리)"""
    def _make(**properties):
        feature = copy.deepcopy(BASE_FEATURE)
        feature["properties"].update(properties)
        return feature
    return _make


@pytest.fixture
def mock_logger():
    """로그 호출을 기록하는 목업 로거"""
    return Mock()


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    return settings


@pytest.fixture
def mock_database():
    """테스트용 DB 포트"""
    database = AsyncMock()
    database.query.return_value = []
    return database


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )
