"""
CAP 변환기 및 ATOM 피드 조립 단위 테스트
"""

import xml.etree.ElementTree as ET

import pytest
from loguru import logger
from floodcap.core.cap import CapTransformer
from floodcap.core.errors import InvalidFeature, UnsupportedGeometryType
from floodcap.core.models import Feature
from floodcap.core.feed import ATOM_NAMESPACE, CAP_NAMESPACE, FeedAssembler, alert_tree
from floodcap.observability.logging_setup import get_logger
from floodcap.settings import CapSettings

ATOM = f"{{{ATOM_NAMESPACE}}}"
CAP = f"{{{CAP_NAMESPACE}}}"


@pytest.fixture
def cap(mock_logger):
    return CapTransformer(mock_logger)


class TestGeoJsonToAtomCap:
    """geojson_to_atom_cap 테스트"""

    def test_zero_features_outputs_zero_entries(self, cap):
        atom_cap = cap.geojson_to_atom_cap([])

        assert "<feed" in atom_cap
        assert "<entry" not in atom_cap

    def test_one_feature_outputs_one_entry(self, cap, make_feature):
        atom_cap = cap.geojson_to_atom_cap([make_feature()])

        assert "<feed" in atom_cap
        assert atom_cap.count("<entry") == 1

    def test_two_features_output_two_entries(self, cap, make_feature):
        atom_cap = cap.geojson_to_atom_cap([make_feature(), make_feature()])
        assert atom_cap.count("<entry") == 2

    def test_error_in_alert_means_no_entry_produced(self, cap, make_feature, mock_logger):
        feature = make_feature()
        feature["geometry"]["type"] = "Unknown"
        atom_cap = cap.geojson_to_atom_cap([feature])

        assert "<feed" in atom_cap
        assert "<entry" not in atom_cap
        mock_logger.error.assert_called()

    def test_failed_feature_is_skipped_and_order_kept(self, cap, make_feature):
        bad = make_feature(level_name="bad")
        bad["geometry"]["type"] = "LineString"
        features = [
            make_feature(level_name="first"),
            bad,
            make_feature(level_name="third"),
        ]
        root = ET.fromstring(cap.geojson_to_atom_cap(features))
        entries = root.findall(f"{ATOM}entry")

        assert len(entries) == 2
        descs = [e.find(f"{ATOM}content/{CAP}alert/{CAP}info/{CAP}area/{CAP}areaDesc").text for e in entries]
        assert descs == ["first, bar", "third, bar"]

    def test_malformed_feature_is_skipped(self, cap, make_feature, mock_logger):
        atom_cap = cap.geojson_to_atom_cap([{"properties": {}}, make_feature()])

        assert atom_cap.count("<entry") == 1
        mock_logger.error.assert_called()

    def test_feed_metadata(self, cap, make_feature):
        root = ET.fromstring(cap.geojson_to_atom_cap([make_feature()]))

        assert root.tag == f"{ATOM}feed"
        assert root.find(f"{ATOM}id").text == "https://rem.petajakarta.org/data/api/v2/rem/flooded"
        assert root.find(f"{ATOM}title").text == "Peta Jakarta REM Flooded RW Feed"
        assert root.find(f"{ATOM}updated").text.endswith("+07:00")
        assert root.find(f"{ATOM}author/{ATOM}name").text == "Peta Jakarta REM"
        assert root.find(f"{ATOM}author/{ATOM}uri").text == "https://rem.petajakarta.org/"

    def test_entry_content(self, cap, make_feature):
        root = ET.fromstring(cap.geojson_to_atom_cap([make_feature()]))
        entry = root.find(f"{ATOM}entry")

        assert entry.find(f"{ATOM}id").text == (
            "https://rem.petajakarta.org/data/api/v2/rem/flooded"
            "?parent_name=bar&level_name=foo%20foo&time=2016-02-16T10:36:50%2B07:00"
        )
        assert entry.find(f"{ATOM}title").text == "bar,foo%20foo,2016-02-16T10:36:50+07:00 Flood Report"
        assert entry.find(f"{ATOM}updated").text == "2016-02-16T10:36:50+07:00"
        content = entry.find(f"{ATOM}content")
        assert content.get("type") == "text/xml"
        alert = content.find(f"{CAP}alert")
        assert alert.find(f"{CAP}sender").text == "BPBD.JAKARTA.GOV.ID"
        assert alert.find(f"{CAP}info/{CAP}area/{CAP}polygon").text == "2,1 4,3 "

    def test_reserved_characters_are_escaped(self, cap, make_feature):
        atom_cap = cap.geojson_to_atom_cap([make_feature(parent_name="1<2 & co")])

        assert "1<2" not in atom_cap
        root = ET.fromstring(atom_cap)
        alert = root.find(f"{ATOM}entry/{ATOM}content/{CAP}alert")
        assert "1<2 & co" in alert.find(f"{CAP}info/{CAP}description").text

    def test_custom_feed_settings(self, mock_logger, make_feature):
        settings = CapSettings(feed_title="Test Feed", identifier_style="dot")
        root = ET.fromstring(CapTransformer(mock_logger, settings).geojson_to_atom_cap([make_feature()]))

        assert root.find(f"{ATOM}title").text == "Test Feed"
        alert = root.find(f"{ATOM}entry/{ATOM}content/{CAP}alert")
        assert alert.find(f"{CAP}identifier").text == "bar.foo_foo.2016-02-16T10:36:50+07:00"


class TestCreateMethods:
    """create_area / create_info / create_alert 테스트"""

    def test_create_area(self, cap, make_feature):
        result = cap.create_area(make_feature())

        assert result.ok
        assert result.value.polygon == ["2,1 4,3 "]

    def test_create_area_logs_failure(self, cap, make_feature, mock_logger):
        feature = make_feature()
        feature["geometry"]["type"] = "Unknown"
        result = cap.create_area(feature)

        assert not result.ok
        assert isinstance(result.error, UnsupportedGeometryType)
        mock_logger.error.assert_called_once()

    def test_create_info_logs_failure(self, cap, make_feature, mock_logger):
        result = cap.create_info(make_feature(state=7))

        assert not result.ok
        mock_logger.error.assert_called_once()

    def test_create_alert_rejects_malformed_feature(self, cap):
        result = cap.create_alert({"geometry": None})

        assert not result.ok
        assert isinstance(result.error, InvalidFeature)

    def test_geojson_to_cap_alert(self, cap, make_feature):
        result = cap.geojson_to_cap_alert(make_feature(state=4))

        assert result.ok
        assert result.value.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        root = ET.fromstring(result.value)
        assert root.tag == f"{CAP}alert"
        assert root.find(f"{CAP}info/{CAP}severity").text == "Severe"

    def test_geojson_to_cap_alert_failure(self, cap, make_feature):
        result = cap.geojson_to_cap_alert(make_feature(state=0))
        assert not result.ok


class TestAlertTree:
    """alert 트리 구조 테스트"""

    def test_element_order_follows_cap_schema(self, make_feature, mock_logger):
        alert = FeedAssembler(mock_logger).build(Feature.model_validate(make_feature())).value
        tree = alert_tree(alert)

        assert list(tree) == ["@xmlns", "identifier", "sender", "sent", "status", "msgType", "scope", "info"]
        assert list(tree["info"]) == [
            "category", "event", "urgency", "severity", "certainty",
            "senderName", "headline", "description", "web", "area",
        ]
        assert list(tree["info"]["area"]) == ["areaDesc", "polygon"]


class TestFeedWellFormed:
    """피드 XML 형식 테스트"""

    def test_feature_with_control_character_is_skipped(self, cap, make_feature, mock_logger):
        bad = make_feature(level_name=f"RW{chr(0x0B)}01")
        root = ET.fromstring(cap.geojson_to_atom_cap([make_feature(), bad]))

        assert len(root.findall(f"{ATOM}entry")) == 1
        mock_logger.error.assert_called_once()

    def test_failure_logs_carry_feature_index(self, make_feature):
        records = []
        sink_id = logger.add(lambda m: records.append(m.record), level="ERROR")
        try:
            bad = make_feature()
            bad["geometry"]["type"] = "Point"
            FeedAssembler(get_logger("floodcap.test")).assemble([make_feature(), bad])
        finally:
            logger.remove(sink_id)

        assert len(records) == 1
        assert records[0]["extra"]["feature_index"] == 1
