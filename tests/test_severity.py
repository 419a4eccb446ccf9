import numpy as np
import pytest

from pestscan.domain import Severity
from pestscan.severity import SEVERITY_GUIDANCE, classify, compare_to_average, severity_level_percent


@pytest.mark.parametrize(
    "count, expected",
    [
        (0, Severity.LOW),
        (4, Severity.LOW),
        (5, Severity.MODERATE),
        (9, Severity.MODERATE),
        (10, Severity.SEVERE),
        (250, Severity.SEVERE),
    ],
)
def test_classify_thresholds(count, expected):
    assert classify(count) is expected


def test_classify_is_monotonic():
    order = [Severity.LOW, Severity.MODERATE, Severity.SEVERE]
    levels = [order.index(classify(n)) for n in range(0, 30)]
    assert levels == sorted(levels)


def test_classify_accepts_numpy_integers():
    assert classify(np.int64(12)) is Severity.SEVERE


def test_classify_rejects_negative():
    with pytest.raises(ValueError, match="non-negative"):
        classify(-1)


@pytest.mark.parametrize("bad", [2.5, "7", None, True])
def test_classify_rejects_non_integers(bad):
    with pytest.raises(ValueError):
        classify(bad)


def test_severity_values_are_plain_strings():
    assert [s.value for s in Severity] == ["low", "moderate", "severe"]
    assert str(Severity.MODERATE) == "moderate"
    assert Severity("severe") is Severity.SEVERE


def test_compare_to_average():
    assert compare_to_average(16) == "higher"
    assert compare_to_average(15) == "moderate"
    assert compare_to_average(11) == "moderate"  # 0.7 * 15 = 10.5
    assert compare_to_average(10) == "lower"
    assert compare_to_average(3, average=4) == "moderate"


def test_guidance_covers_every_class():
    assert set(SEVERITY_GUIDANCE) == set(Severity)
    for severity, guidance in SEVERITY_GUIDANCE.items():
        assert severity.value.upper() in guidance.title
        assert len(guidance.actions) == 4
        assert guidance.next_steps


def test_severity_level_percent():
    assert severity_level_percent(Severity.LOW) == 33
    assert severity_level_percent("moderate") == 66
    assert severity_level_percent(Severity.SEVERE) == 100
