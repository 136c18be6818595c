from datetime import date, timedelta

from weatherhub.core.logger import CORRELATION_ID_HEADER

LONDON = {"name": "London", "country": "United Kingdom", "latitude": 51.52, "longitude": -0.11}


async def test_root_and_health(http):
    assert (await http.get("/health")).json() == {"status": "ok", "service": "WeatherHub"}
    assert (await http.get("/")).json()["status"] == "running"


async def test_correlation_id_is_echoed_or_generated(http):
    response = await http.get("/health", headers={CORRELATION_ID_HEADER: "abc-123"})
    assert response.headers[CORRELATION_ID_HEADER] == "abc-123"

    generated = await http.get("/health")
    assert generated.headers[CORRELATION_ID_HEADER]


async def test_location_crud(http):
    created = await http.post("/api/locations", json=LONDON)
    assert created.status_code == 201
    location_id = created.json()["id"]

    fetched = await http.get(f"/api/locations/{location_id}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "London"

    updated = await http.put(f"/api/locations/{location_id}", json={**LONDON, "region": "Greater London"})
    assert updated.status_code == 200
    assert updated.json()["region"] == "Greater London"

    listed = await http.get("/api/locations")
    assert [location["id"] for location in listed.json()] == [location_id]

    page = await http.get("/api/locations/page", params={"page": 0, "size": 5})
    assert page.json()["total_elements"] == 1
    assert page.json()["total_pages"] == 1

    search = await http.get("/api/locations/search", params={"name": "lond"})
    assert len(search.json()) == 1

    deleted = await http.delete(f"/api/locations/{location_id}")
    assert deleted.status_code == 204
    assert (await http.get(f"/api/locations/{location_id}")).status_code == 404


async def test_duplicate_location_conflict(http):
    await http.post("/api/locations", json=LONDON)
    response = await http.post("/api/locations", json=LONDON)

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "LOCATION_ALREADY_EXISTS"
    assert body["path"] == "/api/locations"


async def test_invalid_body_is_a_validation_error(http):
    response = await http.post("/api/locations", json={**LONDON, "latitude": 200, "name": "L"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert {error["field"] for error in body["validation_errors"]} == {"latitude", "name"}


async def test_not_found_error_body(http):
    response = await http.get("/api/locations/999")

    assert response.status_code == 404
    assert response.json()["code"] == "LOCATION_NOT_FOUND"
    assert response.json()["message"] == "Location not found with ID: 999"


async def test_page_size_limits(http):
    assert (await http.get("/api/locations/page", params={"size": 101})).status_code == 400
    assert (await http.get("/api/locations/page", params={"size": 0})).status_code == 400
    assert (await http.get("/api/locations/page", params={"page": -1})).status_code == 400
    assert (await http.get("/api/locations/page", params={"size": 100})).status_code == 200


async def test_current_weather_endpoints(http, fake_api):
    response = await http.get("/api/weather/current", params={"location": "London"})
    assert response.status_code == 200
    assert response.json()["temperature"] == 15.5

    location_id = (await http.get("/api/locations")).json()[0]["id"]
    by_id = await http.get(f"/api/weather/current/location/{location_id}", params={"save": "false"})
    assert by_id.status_code == 200

    history = await http.get(f"/api/weather/history/location/{location_id}")
    assert history.json()["total_elements"] == 1


async def test_provider_errors_map_to_status_codes(http, fake_api):
    invalid = await http.get("/api/weather/current", params={"location": "Atlantis"})
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "INVALID_LOCATION"

    fake_api.always_fail["paris"] = 500
    unavailable = await http.get("/api/weather/current", params={"location": "Paris"})
    assert unavailable.status_code == 503
    assert unavailable.json()["code"] == "SERVICE_UNAVAILABLE"
    assert "Location: Paris" in unavailable.json()["message"]


async def test_forecast_days_rejected_without_provider_call(http, fake_api):
    response = await http.get("/api/forecast", params={"location": "London", "days": 15})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert fake_api.count() == 0


async def test_forecast_endpoints(http, fake_api):
    response = await http.get("/api/forecast", params={"location": "Tokyo", "days": 2})
    assert response.status_code == 200
    assert len(response.json()) == 2

    location_id = (await http.get("/api/locations")).json()[0]["id"]
    stored = await http.get(f"/api/forecast/stored/location/{location_id}")
    assert len(stored.json()) == 2

    today = date.today()
    ranged = await http.get(
        f"/api/forecast/range/location/{location_id}",
        params={"start": today.isoformat(), "end": (today + timedelta(days=1)).isoformat()},
    )
    assert len(ranged.json()) == 2

    backwards = await http.get(
        f"/api/forecast/range/location/{location_id}",
        params={"start": today.isoformat(), "end": (today - timedelta(days=1)).isoformat()},
    )
    assert backwards.status_code == 400


async def test_composite_endpoints(http, fake_api):
    combined = await http.get("/api/composite/weather-and-forecast", params={"location": "Paris", "days": 2})
    assert combined.status_code == 200
    assert combined.json()["weather"]["location_name"] == "Paris"

    bulk = await http.get("/api/composite/bulk-weather", params=[("locations", "London"), ("locations", "Tokyo")])
    assert len(bulk.json()) == 2

    location_id = (await http.get("/api/locations")).json()[0]["id"]
    info = await http.get(f"/api/composite/complete-info/{location_id}")
    assert info.json()["location"]["id"] == location_id


async def test_async_bulk_endpoints(http, fake_api):
    location_id = (await http.post("/api/locations", json=LONDON)).json()["id"]

    update = await http.post("/api/async/weather/update", json=[location_id, 999])
    assert update.status_code == 200
    assert update.json()["success_count"] == 1
    assert update.json()["failure_count"] == 1
    assert update.json()["all_successful"] is False

    refresh = await http.post("/api/async/forecast/refresh", json=[location_id], params={"days": 2})
    assert refresh.json()["all_successful"] is True

    everything = await http.post("/api/async/refresh-all")
    assert everything.json()["total_count"] == 1

    bulk = await http.get("/api/async/weather/bulk", params=[("locations", "Paris"), ("locations", "Atlantis")])
    assert [dto["location_name"] for dto in bulk.json()] == ["Paris"]


async def test_metrics_and_retention_endpoints(http, fake_api):
    await http.get("/api/weather/current", params={"location": "London"})

    metrics = (await http.get("/api/metrics")).json()
    assert metrics["counters"]["weather.api.calls.total"] == 1
    assert metrics["counters"]["weather.records.saved.total"] == 1

    retention = await http.post("/api/maintenance/retention")
    assert retention.status_code == 200
    assert retention.json()["weather_records_deleted"] == 0


async def test_composite_days_rejected_without_provider_call(http, fake_api):
    response = await http.get("/api/composite/weather-and-forecast", params={"location": "London", "days": 15})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["validation_errors"][0]["field"] == "days"
    assert fake_api.count() == 0
    assert (await http.get("/api/locations")).json() == []


async def test_bulk_forecast_days_rejected_instead_of_absorbed(http, fake_api):
    bulk = await http.get(
        "/api/async/forecast/bulk", params=[("locations", "London"), ("locations", "Paris"), ("days", "0")]
    )
    assert bulk.status_code == 400
    assert bulk.json()["code"] == "VALIDATION_ERROR"

    refresh = await http.post("/api/async/forecast/refresh", json=[1], params={"days": 15})
    assert refresh.status_code == 400
    assert fake_api.count() == 0


async def test_bulk_requests_over_one_hundred_items_are_rejected(http, fake_api):
    names = [("locations", f"City{i}") for i in range(101)]

    for path in ("/api/async/weather/bulk", "/api/async/forecast/bulk", "/api/composite/bulk-weather"):
        response = await http.get(path, params=names)
        assert response.status_code == 400, path
        assert response.json()["code"] == "VALIDATION_ERROR"

    for path in ("/api/async/weather/update", "/api/async/forecast/refresh"):
        response = await http.post(path, json=list(range(1, 102)))
        assert response.status_code == 400, path
        assert response.json()["code"] == "VALIDATION_ERROR"

    assert fake_api.count() == 0
