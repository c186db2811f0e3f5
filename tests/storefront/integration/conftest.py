import json
from unittest.mock import patch

import pytest
import requests
from storefront.service.http_adapter import HttpCartService


def _response(status_code=200, body=None, raw=None):
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""
    return response


@pytest.fixture()
def make_response():
    """Build a real requests.Response with the given status and JSON body."""
    return _response


@pytest.fixture()
def http_service():
    return HttpCartService(base_url="http://shop.test/api/", timeout=2.0)


@pytest.fixture()
def transport(http_service):
    """Patch the adapter's session; set ``return_value`` or ``side_effect``."""
    with patch.object(http_service.session, "request") as request:
        request.return_value = _response(200)
        yield request
