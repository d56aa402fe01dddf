import pytest


@pytest.fixture
def patient():
    return {
        "resourceType": "Patient",
        "mrn": "MRN-001",
        "name": "Jane Doe",
        "birthDate": "1990-01-15",
        "gender": "female",
    }
