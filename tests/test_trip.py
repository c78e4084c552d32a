import pytest

from trip import RouteNotFoundError, TripValidationError, calculate_trip, resolve_distance, validate_trip


class TestValidateTrip:

    def test_valid_without_distance(self):
        assert validate_trip("Toronto, ON", "Ottawa, ON", "car") is None

    def test_valid_manual_distance(self):
        assert validate_trip("A", "B", "bus", "120.5") == 120.5

    @pytest.mark.parametrize("origin,destination,mode,distance,message", [
        ("", "Ottawa, ON", "car", None, "origin"),
        ("Toronto, ON", "  ", "car", None, "destination"),
        ("Toronto, ON", "Ottawa, ON", None, None, "transport mode"),
        ("Toronto, ON", "Ottawa, ON", "plane", None, "Unknown transport mode"),
        ("Toronto, ON", "toronto, on ", "car", None, "cannot be the same"),
        ("A", "B", "car", 0, "greater than 0"),
        ("A", "B", "car", -4, "greater than 0"),
        ("A", "B", "car", "abc", "greater than 0"),
        ("A", "B", "car", float("nan"), "greater than 0"),
        ("A", "B", "car", 10 ** 400, "greater than 0"),
    ])
    def test_rejects(self, origin, destination, mode, distance, message):
        with pytest.raises(TripValidationError, match=message):
            validate_trip(origin, destination, mode, distance)


class TestResolveDistance:

    def test_manual_wins(self, routes):
        assert resolve_distance(routes, "Toronto, ON", "Ottawa, ON", 10.0) == 10.0

    def test_from_table(self, routes):
        assert resolve_distance(routes, "Ottawa, ON", "Toronto, ON") == 451.0

    def test_miss_raises(self, routes):
        with pytest.raises(RouteNotFoundError, match="enter the distance manually"):
            resolve_distance(routes, "Nowhere", "Toronto, ON")


class TestCalculateTrip:

    def test_toronto_ottawa_by_car(self, engine, routes):
        report = calculate_trip(engine, routes, origin=" Toronto, ON ", destination="Ottawa, ON", mode="car")
        assert report["origin"] == "Toronto, ON"
        assert report["distance_km"] == 451.0
        assert report["distance_source"] == "route_table"
        assert report["emission_kg"] == 54.12
        assert report["baseline_kg"] == 54.12
        assert report["savings"] == {"saved_kg": 0.0, "percentage": 0.0}
        assert report["credits"] == 0.0541
        assert report["price"] == {"min": 2.71, "max": 8.12, "average": 5.41}
        assert len(report["comparison"]) == 4

    def test_bicycle_saves_everything(self, engine, routes):
        report = calculate_trip(engine, routes, origin="Toronto, ON", destination="Ottawa, ON", mode="bicycle")
        assert report["emission_kg"] == 0.0
        assert report["savings"] == {"saved_kg": 54.12, "percentage": 100.0}
        assert report["credits"] == 0.0
        assert report["price"] == {"min": 0.0, "max": 0.0, "average": 0.0}

    def test_manual_distance_for_unknown_route(self, engine, routes):
        report = calculate_trip(engine, routes, origin="Home", destination="Work", mode="bus", distance_km=20)
        assert report["distance_source"] == "manual"
        assert report["emission_kg"] == 1.78

    def test_unknown_route_without_distance(self, engine, routes):
        with pytest.raises(RouteNotFoundError):
            calculate_trip(engine, routes, origin="Home", destination="Work", mode="bus")

    def test_uses_injected_table(self, engine, small_routes):
        report = calculate_trip(engine, small_routes, origin="Alpha, AA", destination="Beta, BB", mode="truck")
        assert report["emission_kg"] == 96.0
