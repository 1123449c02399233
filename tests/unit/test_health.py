def test_health_check(client):
    """Verifica que la app levante y responda el chequeo de salud."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_unknown_route_is_404(client):
    response = client.get("/no-existe")
    assert response.status_code == 404
