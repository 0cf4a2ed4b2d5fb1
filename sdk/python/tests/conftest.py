import json
from unittest.mock import Mock

import pytest

from cordahtlc import NodeConfig


def _response(status_code=200, body=None, text=None):
    resp = Mock()
    resp.status_code = status_code
    if body is not None:
        resp.content = json.dumps(body).encode()
        resp.json.return_value = body
    else:
        resp.content = (text or "").encode()
        resp.json.side_effect = ValueError("Expecting value")
    resp.text = resp.content.decode()
    return resp


@pytest.fixture
def make_response():
    """Builder for stand-in requests.Response objects carrying JSON or raw text."""
    return _response


@pytest.fixture
def config():
    return NodeConfig(host="localhost", port=10009)


@pytest.fixture
def rpc():
    conn = Mock()
    conn.post.return_value = {"contractId": "cid-1"}
    conn.get.return_value = {"locked": True, "state": {"lockInfo": "x"}}
    return conn


@pytest.fixture
def connect(rpc):
    return Mock(return_value=rpc)
