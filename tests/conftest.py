"""
Pytest configuration and shared fixtures for the content rating tests.

This module provides shared fixtures including:
- Flask app setup with the built-in rating systems active
- Label records for the RSACi and RTA rating systems
"""

import os
import sys

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

# Set up test environment before any imports
os.environ["PICS_ACTIVE_SYSTEMS"] = "rsaci,rta"
os.environ["LOG_LEVEL"] = "WARNING"

# 2023-11-14 22:13:20 UTC
TEST_TIMESTAMP = 1700000000.0


@pytest.fixture(scope="function")
def flask_app():
    """Create a Flask test app with the built-in rating systems."""
    from api import create_app

    app = create_app(active_systems=["rsaci", "rta"], configure_logs=False)
    app.config['TESTING'] = True
    return app


@pytest.fixture(scope="function")
def flask_client(flask_app):
    """Create Flask test client."""
    return flask_app.test_client()


@pytest.fixture
def rsaci_record():
    """A mild RSACi label record."""
    from rating_systems import Label, LabelRecord

    return LabelRecord(
        label=Label(data="n 0 s 0 v 2 l 1", comments="Cartoon violence"),
        timestamp=TEST_TIMESTAMP,
    )


@pytest.fixture
def rta_record():
    """An adults-only RTA label record."""
    from rating_systems import Label, LabelRecord
    from rating_systems.rta import RTA_LABEL

    return LabelRecord(label=Label(data=RTA_LABEL), timestamp=TEST_TIMESTAMP)
