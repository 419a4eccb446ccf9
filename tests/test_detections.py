import json
import unittest
from datetime import datetime, timezone

import numpy as np
import pytest

from pestscan.detections import build_record, mean_confidence, normalize_instances
from pestscan.domain import DetectionInstance, DetectionRecord, Region, Severity


class TestNormalizeInstances(unittest.TestCase):
    def test_service_response_xyxy_mapping(self):
        response = {
            'num_detections': 1,
            'detections': [{'disease': 'cocolisap', 'confidence': 0.82, 'bbox': {'x1': 10, 'y1': 20, 'x2': 70, 'y2': 60}}],
        }
        insts = normalize_instances(response)
        self.assertEqual(len(insts), 1)
        self.assertEqual(insts[0].bbox, (10.0, 20.0, 60.0, 40.0))
        self.assertEqual(insts[0].label, 'cocolisap')
        self.assertAlmostEqual(insts[0].confidence, 0.82)

    def test_xywh_list_and_numpy(self):
        insts = normalize_instances([
            {'bbox': [1, 2, 3, 4], 'score': 0.5, 'label': 'scale'},
            {'bbox': np.array([5.0, 6.0, 7.0, 8.0]), 'confidence': 0.25},
        ])
        self.assertEqual(insts[0].bbox, (1.0, 2.0, 3.0, 4.0))
        self.assertEqual(insts[1].bbox, (5.0, 6.0, 7.0, 8.0))
        self.assertEqual(insts[1].label, 'unknown')

    def test_xyxy_key(self):
        insts = normalize_instances([{'xyxy': [10, 10, 30, 50], 'class': 'mealybug', 'prob': [0.7]}])
        self.assertEqual(insts[0].bbox, (10.0, 10.0, 20.0, 40.0))
        self.assertAlmostEqual(insts[0].confidence, 0.7)

    def test_blank_label_gets_placeholder(self):
        insts = normalize_instances([{'bbox': [0, 0, 1, 1], 'label': '  '}])
        self.assertEqual(insts[0].label, 'unknown')

    def test_entries_without_bbox_are_dropped(self):
        insts = normalize_instances([{'label': 'x'}, {'bbox': [1, 2, 3]}, 'junk', None, {'bbox': [0, 0, 5, 5]}])
        self.assertEqual(len(insts), 1)

    def test_out_of_range_confidence_kept_raw(self):
        insts = normalize_instances([{'bbox': [0, 0, 1, 1], 'confidence': 1.4}])
        self.assertAlmostEqual(insts[0].confidence, 1.4)
        self.assertEqual(insts[0].clamped_confidence(), 1.0)

    def test_empty(self):
        self.assertEqual(normalize_instances([]), [])
        self.assertEqual(normalize_instances(None), [])
        self.assertEqual(normalize_instances({'detections': []}), [])

    def test_instances_pass_through(self):
        inst = DetectionInstance(bbox=(0, 0, 2, 2), confidence=0.3, label='a')
        self.assertEqual(normalize_instances([inst]), [inst])


def test_is_valid():
    assert DetectionInstance(bbox=(0, 0, 1, 1)).is_valid()
    assert not DetectionInstance(bbox=(0, 0, 0, 1)).is_valid()
    assert not DetectionInstance(bbox=(0, 0, 1, -3)).is_valid()
    assert not DetectionInstance(bbox=(float('nan'), 0, 1, 1)).is_valid()
    assert not DetectionInstance(bbox=(0, float('inf'), 1, 1)).is_valid()


def test_mean_confidence_twelve_instances_is_severe():
    confs = [0.9] * 10 + [0.5] * 2
    insts = [DetectionInstance(bbox=(i, i, 5, 5), confidence=c) for i, c in enumerate(confs)]
    record = build_record('r12', insts, datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert record.total_count == 12
    assert abs(record.avg_confidence - 0.8333) < 1e-4
    assert record.severity is Severity.SEVERE


def test_mean_confidence_empty_is_zero():
    assert mean_confidence([]) == 0.0


def test_mean_confidence_does_not_clamp():
    insts = [DetectionInstance(bbox=(0, 0, 1, 1), confidence=c) for c in (1.5, -0.5)]
    assert mean_confidence(insts) == 0.5


def test_build_record_historical_total_count_wins():
    record = build_record('old', [], datetime(2023, 5, 1), total_count=11)
    assert record.severity is Severity.SEVERE
    assert record.avg_confidence == 0.0


def test_build_record_rejects_negative_count():
    with pytest.raises(ValueError, match='non-negative'):
        build_record('bad', [], datetime(2023, 5, 1), total_count=-2)


def test_from_dict_ignores_stored_severity_and_reads_detections_data():
    payload = {
        'id': 'abc',
        'created_date': '2024-02-03T04:05:06Z',
        'severity': 'low',
        'total_detections': 10,
        'detections_data': json.dumps([{'bbox': [0, 0, 4, 4], 'confidence': 0.6, 'label': 'cocolisap'}]),
        'province': 'Cebu',
        'latitude': 10.3,
        'longitude': 123.9,
        'processing_time': 812,
    }
    record = DetectionRecord.from_dict(payload)
    assert record.severity is Severity.SEVERE
    assert record.total_count == 10
    assert len(record.instances) == 1
    assert record.avg_confidence == 0.6
    assert record.created_at == datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    assert record.region == Region(province='Cebu', latitude=10.3, longitude=123.9)
    assert record.processing_time_ms == 812


def test_from_dict_without_instances_uses_stored_average():
    record = DetectionRecord.from_dict({'id': 1, 'created_date': '2024-01-01T00:00:00', 'total_detections': 3, 'avg_confidence': 0.77})
    assert record.id == '1'
    assert record.avg_confidence == 0.77
    assert record.region is None


def test_record_round_trips_through_dict():
    record = build_record(
        'rt',
        [DetectionInstance(bbox=(1, 2, 3, 4), confidence=0.5, label='x')],
        datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc),
        region=Region(province='Laguna', municipality='Calamba'),
    )
    again = DetectionRecord.from_dict(record.to_dict())
    assert again == record


def test_from_dict_rejects_negative_total():
    payload = {'id': 'neg', 'created_date': '2024-01-01T00:00:00Z', 'total_detections': -3, 'province': 'Cebu'}
    with pytest.raises(ValueError, match='non-negative'):
        DetectionRecord.from_dict(payload)


@pytest.mark.parametrize('bad', [-1, 2.5, True])
def test_record_rejects_invalid_total_count(bad):
    with pytest.raises(ValueError):
        DetectionRecord(id='x', created_at=datetime(2024, 1, 1), total_count=bad)


def test_mean_confidence_treats_missing_and_nan_as_zero():
    insts = [
        DetectionInstance(bbox=(0, 0, 1, 1), confidence=None),
        DetectionInstance(bbox=(0, 0, 1, 1), confidence=float('nan')),
        DetectionInstance(bbox=(0, 0, 1, 1), confidence=0.9),
    ]
    assert mean_confidence(insts) == pytest.approx(0.3)
    assert insts[0].clamped_confidence() == 0.0
