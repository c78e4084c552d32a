import pytest

from route_table import DEFAULT_ROUTES, Route, RouteTable


def test_find_distance_known_pair(routes):
    assert routes.find_distance("Toronto, ON", "Ottawa, ON") == 451


def test_find_distance_is_direction_agnostic(routes):
    assert routes.find_distance("Ottawa, ON", "Toronto, ON") == routes.find_distance("Toronto, ON", "Ottawa, ON")


def test_find_distance_normalizes_case_and_whitespace(routes):
    assert routes.find_distance(" toronto, on ", "OTTAWA, ON") == 451
    assert routes.find_distance("st. john's, nl", "halifax, ns") == 1810


@pytest.mark.parametrize("a,b", [
    ("Nowhere", "Toronto, ON"),
    ("Toronto", "Ottawa, ON"),       # no partial matching
    ("Toronto, ON", "Ottawa, ONT"),
    ("Toronto, ON", "Vancouver, BC"),  # both known, pair is not
])
def test_find_distance_miss_returns_none(routes, a, b):
    assert routes.find_distance(a, b) is None


@pytest.mark.parametrize("a,b", [("", "Toronto, ON"), ("Toronto, ON", ""), (None, None), ("   ", "Ottawa, ON")])
def test_find_distance_empty_input(routes, a, b):
    assert routes.find_distance(a, b) is None


def test_first_entry_wins_on_duplicates(small_routes):
    assert small_routes.find_distance("Beta, BB", "Alpha, AA") == 100
    assert small_routes.find_distance("alpha, aa", "gamma, cc") == 250.5


def test_list_cities_sorted_unique(small_routes):
    assert small_routes.list_cities() == ["Alpha, AA", "Beta, BB", "Gamma, CC"]


def test_list_cities_default_table(routes):
    cities = routes.list_cities()
    assert cities == sorted(set(cities))
    assert "Windsor, ON" in cities
    assert "Detroit, MI" in cities
    assert len(cities) == 33
    assert routes.list_cities() == cities


def test_list_cities_is_case_sensitive_code_point_order():
    table = RouteTable([Route("b", "a", 1), Route("B", "A", 1)])
    assert table.list_cities() == ["A", "B", "a", "b"]


def test_default_table_size(routes):
    assert len(routes) == len(DEFAULT_ROUTES) == 34


def test_route_rejects_non_positive_distance():
    with pytest.raises(ValueError):
        Route("X", "Y", 0)
    with pytest.raises(ValueError):
        Route("X", "Y", -3)


def test_route_is_immutable():
    route = Route("X", "Y", 5)
    with pytest.raises(AttributeError):
        route.distance_km = 10


def test_empty_table():
    table = RouteTable([])
    assert table.list_cities() == []
    assert table.find_distance("Toronto, ON", "Ottawa, ON") is None
