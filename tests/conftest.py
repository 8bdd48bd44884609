import pytest

from pawpulse.app import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app({"DB_PATH": str(tmp_path / "pawpulse-test.db"), "TESTING": True})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
