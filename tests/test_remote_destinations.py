import asyncio
import json
from datetime import datetime

import httpx
import pytest

from src.transcriber.delivery.base import DeliveryError
from src.transcriber.delivery.fabric import FabricDestination, extract_title
from src.transcriber.delivery.tana import TANA_API_ENDPOINT, TanaDestination

WHEN = datetime(2025, 6, 15, 9, 5)


def make_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_extract_title_uses_first_sentence():
    assert extract_title("  Buy milk. Then call Anna!") == "Buy milk"
    assert extract_title("What now? Nothing.") == "What now"


def test_extract_title_falls_back_to_prefix():
    text = "no sentence end " * 10
    assert extract_title(text) == text.strip()[:100]
    long_sentence = "x" * 150 + ". tail"
    assert extract_title(long_sentence) == "x" * 100
    assert extract_title("") == ""


def test_fabric_posts_notepad():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("X-Api-Key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "n1", "kind": "notepad", "url": "https://fabric.so/n1"})

    destination = FabricDestination("secret", client=make_client(handler))
    asyncio.run(destination.deliver("Buy milk. And bread.", WHEN))

    assert seen["url"] == "https://api.fabric.so/v2/notepads"
    assert seen["key"] == "secret"
    assert seen["body"] == {
        "parentId": "@alias::inbox",
        "name": "Buy milk",
        "text": "09:05 🗣️ Buy milk. And bread.",
    }


def test_fabric_error_captures_body():
    def handler(request):
        return httpx.Response(422, text="bad parent")

    destination = FabricDestination("secret", client=make_client(handler))
    with pytest.raises(DeliveryError) as excinfo:
        asyncio.run(destination.deliver("text", WHEN))
    assert "422" in str(excinfo.value)
    assert "bad parent" in str(excinfo.value)


def test_fabric_requires_key_lazily():
    destination = FabricDestination(None, client=make_client(lambda request: httpx.Response(200)))
    with pytest.raises(DeliveryError, match="FABRIC_API_KEY"):
        asyncio.run(destination.deliver("text", WHEN))


def test_tana_posts_node_with_supertag():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={})

    destination = TanaDestination("tok", "tag-1", client=make_client(handler))
    asyncio.run(destination.deliver("Call the plumber", WHEN))

    assert seen["url"] == TANA_API_ENDPOINT
    assert seen["auth"] == "Bearer tok"
    assert seen["body"] == {
        "targetNodeId": "INBOX",
        "nodes": [{"name": "Call the plumber", "supertags": [{"id": "tag-1"}]}],
    }


def test_tana_omits_supertags_when_unset():
    payload = TanaDestination("tok").build_payload("hi").model_dump(exclude_none=True)
    assert payload == {"targetNodeId": "INBOX", "nodes": [{"name": "hi"}]}


def test_tana_failure_and_missing_token():
    destination = TanaDestination("tok", client=make_client(lambda request: httpx.Response(500, text="boom")))
    with pytest.raises(DeliveryError, match="boom"):
        asyncio.run(destination.deliver("x", WHEN))
    with pytest.raises(DeliveryError, match="TANA_API_TOKEN"):
        asyncio.run(TanaDestination(None).deliver("x", WHEN))
