import pytest

from arena_setup.services import cost_model


def test_total_cost_standard_mode():
    assert cost_model.total_cost("standard", 50, 4) == 100_000 + 50 * 100 + 4 * 5_000 == 125_000


@pytest.mark.parametrize(
    "budget,expected",
    [
        (124_999, False),
        (125_000, True),
        (200_000, True),
    ],
)
def test_affordable_boundary_is_inclusive(budget, expected):
    assert cost_model.affordable(125_000, budget) is expected


def test_unknown_mode_raises():
    with pytest.raises(KeyError):
        cost_model.base_cost("hardcore")


def test_breakdown_reports_shortfall():
    summary = cost_model.breakdown("standard", 100, 8, budget=150_000)

    assert summary.base == 100_000
    assert summary.players == 10_000
    assert summary.events == 40_000
    assert summary.total == 150_000
    assert summary.affordable is True
    assert summary.shortfall == 0

    poorer = cost_model.breakdown("standard", 100, 8, budget=120_000)
    assert poorer.affordable is False
    assert poorer.shortfall == 30_000
