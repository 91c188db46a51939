# tests/test_iqamaah_routes.py

from freezegun import freeze_time

from masjid_board.services.iqamaah.errors import StorageError


def _payload(**overrides):
    payload = {"fajr": [], "dhuhr": [], "asr": [], "isha": [], "jumuah": []}
    payload.update(overrides)
    return payload


def test_index_route(test_client):
    response = test_client.get('/')
    assert response.status_code == 200
    assert response.get_json() == {"message": "Welcome to the Masjid Board API!"}

def test_metrics_route_exposes_iqamaah_counters(test_client):
    response = test_client.get('/api/metrics')
    assert response.status_code == 200
    assert b'masjid_board_iqamaah_mutations_total' in response.data

@freeze_time("2024-01-01")
def test_get_before_anything_is_stored_returns_404(test_client):
    response = test_client.get('/api/iqamaah')
    assert response.status_code == 404
    assert response.get_json()["message"] == "No Iqamaah times found in the database"

@freeze_time("2024-01-01")
def test_put_replaces_all_and_accepts_legacy_keys(test_client):
    """
    GIVEN: A bulk payload using the legacy 'fajar' and 'jummah' keys.
    WHEN: It is PUT to /api/iqamaah.
    THEN: The windows are stored under the canonical keys and returned.
    """
    # --- ARRANGE ---
    payload = {
        "fajar": [{"startDate": "1/1/2024", "endDate": "1/31/2024", "time": "5:30"}],
        "dhuhr": [], "asr": [], "isha": [],
        "jummah": [{"startDate": "2024-01-01", "endDate": "2024-12-31", "time": "13:00"}],
    }

    # --- ACT ---
    response = test_client.put('/api/iqamaah', json=payload)

    # --- ASSERT ---
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["fajr"] == [{"startDate": "2024-01-01", "endDate": "2024-01-31", "time": "05:30"}]
    assert data["jumuah"] == [{"startDate": "2024-01-01", "endDate": "2024-12-31", "time": "13:00"}]

    stored = test_client.get('/api/iqamaah').get_json()["data"]
    assert stored == data

@freeze_time("2024-01-01")
def test_put_with_missing_category_is_rejected_by_schema(test_client):
    payload = _payload()
    del payload["isha"]
    response = test_client.put('/api/iqamaah', json=payload)
    assert response.status_code == 422

@freeze_time("2024-01-01")
def test_put_with_invalid_time_returns_400(test_client):
    payload = _payload(asr=[{"startDate": "2024-01-01", "endDate": "2024-01-31", "time": "16:75"}])
    response = test_client.put('/api/iqamaah', json=payload)
    assert response.status_code == 400
    assert "asr[0]" in response.get_json()["message"]

@freeze_time("2024-01-01")
def test_range_lifecycle(test_client):
    created = test_client.post('/api/iqamaah/range', json={
        "prayer": "fajr", "startDate": "2024-01-01", "endDate": "2024-01-10", "time": "05:30",
    })
    assert created.status_code == 200

    split = test_client.post('/api/iqamaah/range', json={
        "prayer": "fajr", "startDate": "2024-01-05", "endDate": "2024-01-07", "time": "05:45",
    })
    assert [w["time"] for w in split.get_json()["data"]["fajr"]] == ["05:30", "05:45", "05:30"]

    updated = test_client.patch('/api/iqamaah/range', json={
        "prayer": "fajr", "startDate": "2024-01-05", "endDate": "2024-01-07", "time": "05:50",
        "oldStartDate": "2024-01-05", "oldEndDate": "2024-01-07", "oldTime": "05:45",
    })
    assert updated.status_code == 200
    assert updated.get_json()["data"]["fajr"][1] == {"startDate": "2024-01-05", "endDate": "2024-01-07", "time": "05:50"}

    deleted = test_client.delete('/api/iqamaah/range', json={
        "prayer": "fajr", "startDate": "2024-01-01", "endDate": "2024-01-10",
    })
    assert deleted.status_code == 200
    assert deleted.get_json()["data"]["fajr"] == []

    cleared = test_client.delete('/api/iqamaah')
    assert cleared.status_code == 200
    assert test_client.delete('/api/iqamaah').status_code == 404

@freeze_time("2024-01-01")
def test_create_range_errors(test_client):
    bad_prayer = test_client.post('/api/iqamaah/range', json={
        "prayer": "maghrib", "startDate": "2024-01-01", "endDate": "2024-01-10", "time": "18:00",
    })
    assert bad_prayer.status_code == 400
    assert bad_prayer.get_json()["message"].startswith("prayer must be one of")

    bad_date = test_client.post('/api/iqamaah/range', json={
        "prayer": "fajr", "startDate": "2024/01/01", "endDate": "2024-01-10", "time": "05:30",
    })
    assert bad_date.status_code == 400

    missing_field = test_client.post('/api/iqamaah/range', json={"prayer": "fajr", "startDate": "2024-01-01"})
    assert missing_field.status_code == 422

@freeze_time("2024-01-01")
def test_update_and_delete_without_aggregate_return_404(test_client):
    body = {"prayer": "isha", "startDate": "2024-01-01", "endDate": "2024-01-10", "time": "20:00"}
    assert test_client.patch('/api/iqamaah/range', json=body).status_code == 404
    assert test_client.delete('/api/iqamaah/range', json=body).status_code == 404

@freeze_time("2024-01-01")
def test_month_schedule_route(test_client):
    test_client.post('/api/iqamaah/range', json={
        "prayer": "jumuah", "startDate": "2024-01-01", "endDate": "2024-01-31", "time": "14:00",
    })
    test_client.post('/api/iqamaah/range', json={
        "prayer": "jumuah", "startDate": "2024-01-01", "endDate": "2024-01-31", "time": "13:00",
    })

    response = test_client.get('/api/iqamaah/month?year=2024&month=1')

    assert response.status_code == 200
    body = response.get_json()
    assert body["year"] == 2024 and body["month"] == 1
    assert len(body["data"]) == 31
    assert body["data"][14] == {
        "date": "2024-01-15",
        "fajr": "--:--", "dhuhr": "--:--", "asr": "--:--", "isha": "--:--",
        "jumuah": ["13:00", "14:00"],
    }

@freeze_time("2024-01-01")
def test_month_ranges_route(test_client):
    test_client.post('/api/iqamaah/range', json={
        "prayer": "dhuhr", "startDate": "2023-12-20", "endDate": "2024-02-10", "time": "13:30",
    })

    response = test_client.get('/api/iqamaah/month/ranges?year=2024&month=2')

    assert response.status_code == 200
    assert response.get_json()["data"]["dhuhr"] == [
        {"startDate": "2024-02-01", "endDate": "2024-02-10", "time": "13:30"}
    ]

def test_month_routes_validate_query(test_client):
    assert test_client.get('/api/iqamaah/month?year=2024&month=13').status_code == 422
    assert test_client.get('/api/iqamaah/month?month=1').status_code == 422
    assert test_client.get('/api/iqamaah/month/ranges?year=abc&month=1').status_code == 422

@freeze_time("2024-01-01")
def test_storage_failure_returns_500(test_client, mocker):
    mocker.patch(
        'masjid_board.services.iqamaah_service.IqamaahRepository.load',
        side_effect=StorageError("Failed to read Iqamaah times"),
    )
    response = test_client.get('/api/iqamaah')
    assert response.status_code == 500
    assert response.get_json()["message"] == "Failed to read Iqamaah times"

@freeze_time("2024-01-01")
def test_update_and_delete_after_empty_put_return_404(test_client):
    assert test_client.put('/api/iqamaah', json=_payload()).status_code == 200

    body = {"prayer": "fajr", "startDate": "2024-01-01", "endDate": "2024-01-10", "time": "05:30"}
    patched = test_client.patch('/api/iqamaah/range', json=body)
    deleted = test_client.delete('/api/iqamaah/range', json=body)

    assert patched.status_code == 404
    assert patched.get_json()["message"] == "No Iqamaah times found to update"
    assert deleted.status_code == 404
