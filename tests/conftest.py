from datetime import datetime, timezone

import pytest

# Configure logging for tests so skipped-instance warnings and grouping
# debug output from pestscan modules are visible on failure.
import logging
handler = logging.StreamHandler()
formatter = logging.Formatter('%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s')
handler.setFormatter(formatter)
root = logging.getLogger()
if not root.handlers:
	root.addHandler(handler)
root.setLevel(logging.DEBUG)

# Reduce verbosity for noisy external libraries
logging.getLogger('PIL').setLevel(logging.WARNING)

from pestscan.domain import DetectionRecord, Region


@pytest.fixture
def make_record():
	"""Factory for records: make_record('r1', count=3, province='Cebu', created_at='2024-01-01T08:00:00')."""
	def _make(record_id='r', count=0, province=None, created_at='2024-01-01T08:00:00+00:00', instances=(), **kwargs):
		region_fields = {k: kwargs.pop(k) for k in list(kwargs) if k in Region.__dataclass_fields__}
		region = Region(province=province, **region_fields) if (province or region_fields) else None
		if isinstance(created_at, str):
			created_at = datetime.fromisoformat(created_at)
		return DetectionRecord(
			id=record_id,
			created_at=created_at,
			instances=tuple(instances),
			total_count=count,
			region=region,
			**kwargs,
		)
	return _make


@pytest.fixture
def utc_now():
	return datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


