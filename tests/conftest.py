import sys
from pathlib import Path

import pytest


def _add_repo_root_to_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_add_repo_root_to_path()

import group_splitter as gs  # noqa: E402
from shopping_list import LineItem  # noqa: E402

_TUNABLES = (
    "OVERFLOW_ALLOWANCE",
    "OVERSHOOT_PENALTY",
    "MAX_SWAP_PASSES",
    "EXPLORE_MAX_UNITS",
    "MIN_GROUPS",
    "MAX_GROUPS",
    "CURRENCY",
)


@pytest.fixture(autouse=True)
def restore_tunables():
    # apply_split_config rewrites module globals; put them back after each test
    saved = {name: getattr(gs, name) for name in _TUNABLES}
    yield
    for name, value in saved.items():
        setattr(gs, name, value)


@pytest.fixture
def make_item():
    counter = {"n": 0}

    def _make(price, quantity=1, name=None):
        counter["n"] += 1
        n = counter["n"]
        return LineItem(id=f"item-{n}", name=name or f"Item {n}", price=price, quantity=quantity)

    return _make


@pytest.fixture
def weekly_items(make_item):
    return [
        make_item(4.99, 2, "Milk"),
        make_item(12.5, 1, "Cheese"),
        make_item(1.29, 6, "Yoghurt"),
        make_item(8.0, 3, "Coffee"),
        make_item(0.0, 1, "Free sample"),
        make_item(23.4, 1, "Olive oil"),
    ]
