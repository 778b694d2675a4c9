"""
Tests for exam configuration and generation API routes.
Tests api/routes/exams.py and api/main.py
"""

FILENAME_QUOTED = "Examen_Geograf%C3%ADa_2%C2%BA_ESO_18-10-2026.pdf"


class TestConfig:
    """Tests for GET/PUT /config."""

    def test_get_config(self, test_client):
        response = test_client.get("/config")

        assert response.status_code == 200
        data = response.json()
        assert data["asignatura"] == "Geografía"
        assert data["cantidad_preguntas"] == 3

    def test_partial_update(self, test_client):
        response = test_client.put("/config", json={"tema": "Europa"})

        assert response.status_code == 200
        data = response.json()
        assert data["tema"] == "Europa"
        assert data["asignatura"] == "Geografía"
        assert data["nombre_profesor"] == "Ana Pérez"

    def test_invalid_count(self, test_client):
        response = test_client.put("/config", json={"cantidad_preguntas": 0})
        assert response.status_code == 422


class TestGenerate:
    """Tests for POST /exams/generate."""

    def test_generate_default(self, test_client):
        """Test random selection with the configured count."""
        response = test_client.post("/exams/generate", json={})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["x-exam-questions"] == "3"
        assert response.headers["x-exam-pages"] == "2"
        assert FILENAME_QUOTED in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_generate_with_count(self, test_client):
        response = test_client.post("/exams/generate", json={"question_count": 2})
        assert response.headers["x-exam-questions"] == "2"

    def test_generate_manual(self, test_client):
        response = test_client.post("/exams/generate", json={"question_ids": ["d", "b"]})

        assert response.status_code == 200
        assert response.headers["x-exam-questions"] == "2"

    def test_generate_manual_no_match(self, test_client):
        response = test_client.post("/exams/generate", json={"question_ids": ["zzz"]})

        assert response.status_code == 400
        assert response.json()["error"] == "empty_selection"

    def test_generate_empty_bank(self, test_client):
        test_client.delete("/bank")

        response = test_client.post("/exams/generate", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Carga un banco de preguntas primero."

    def test_invalid_count(self, test_client):
        response = test_client.post("/exams/generate", json={"question_count": 0})
        assert response.status_code == 422


class TestHealth:
    """Tests for root and health endpoints."""

    def test_root(self, test_client):
        response = test_client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/health"

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["question_bank"] == "4 preguntas"
        assert "x-process-time" in response.headers
