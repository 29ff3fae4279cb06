import pytest

from line_dashboard.app import create_app
from line_dashboard.config import TestConfig
from line_dashboard.models import db, Cause


@pytest.fixture
def app():
    app = create_app(TestConfig)

    with app.app_context():
        db.session.add_all([
            Cause(code="NC", name="Non considéré", category="Système", affects_efficiency=False),
            Cause(code="MEC", name="Panne mécanique", category="Technique", affects_efficiency=True),
            Cause(code="PAUSE", name="Pause planifiée", category="Organisation", affects_efficiency=False),
        ])
        db.session.commit()

        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_stop(client):
    def _create(**payload):
        response = client.post("/api/stops", json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _create
