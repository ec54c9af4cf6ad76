import copy

import pytest
import requests

from services.builders.resource_types import reset_resource_type_lookup


VALID_SUBMISSION = {
    "year": "2024",
    "resourceType": "3",
    "version": "1.0",
    "language": "en",
    "titles": [{"title": " Seismic records of the 2024 campaign ", "titleType": "main-title"}],
    "licenses": ["CC-BY-4.0"],
    "authors": [
        {
            "type": "person",
            "firstName": "Jane",
            "lastName": "Doe",
            "isContact": True,
            "email": "jane.doe@example.org",
            "website": "https://example.org",
            "affiliations": [{"value": "GFZ Potsdam", "rorId": "https://ror.org/04z8jg394"}],
        }
    ],
    "contributors": [
        {"type": "institution", "institutionName": "GFZ Data Services", "roles": ["HostingInstitution"]}
    ],
    "descriptions": [{"descriptionType": "Abstract", "description": "Broadband recordings."}],
    "dates": [{"dateType": "Created", "startDate": "2024-01-01", "endDate": "2024-02-01"}],
}


@pytest.fixture
def submission():
    return copy.deepcopy(VALID_SUBMISSION)


@pytest.fixture(autouse=True)
def _fresh_resource_type_lookup():
    reset_resource_type_lookup()
    yield
    reset_resource_type_lookup()


class DummyResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._payload = payload
        self._json_error = json_error

    def json(self):
        if self._json_error:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"HTTP {self.status_code}")
