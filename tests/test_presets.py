import pytest

from simulator.presets import KNOWN_SCORES, PRESETS, get_preset, known_score, known_score_info
from simulator.validator import validate_rules


@pytest.mark.parametrize("key", list(PRESETS))
def test_presets_are_valid(key):
    machine = PRESETS[key]
    report = validate_rules(machine.rules)
    assert report.is_valid, report.errors
    assert machine.initial_state == "A"


def test_get_preset():
    assert get_preset("sigma3") is PRESETS["sigma3"]
    with pytest.raises(KeyError):
        get_preset("sigma9")


def test_known_scores():
    assert [known_score(n) for n in range(1, 6)] == [1, 4, 6, 13, 4098]
    assert known_score(7) is None
    assert known_score_info(5)["year"] == 1989
    assert isinstance(KNOWN_SCORES[6]["score"], str)
