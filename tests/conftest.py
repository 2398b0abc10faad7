# tests/conftest.py
from unittest.mock import Mock

import pytest

from social_share import SocialPublisher
from tests.utils import make_client, signup


@pytest.fixture
def publisher():
    pub = Mock(spec=SocialPublisher)
    pub.publish.return_value = True
    return pub


@pytest.fixture
def app_and_client(tmp_path, publisher):
    client, app = make_client(tmp_path, publisher=publisher)
    return app, client


@pytest.fixture
def app_instance(app_and_client):
    return app_and_client[0]


@pytest.fixture
def client(app_and_client):
    return app_and_client[1]


@pytest.fixture
def db(app_instance):
    session = app_instance.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def token(client):
    return signup(client)
