"""
Tests for the outbound automation webhook client used by the relay.
"""
import pytest
import requests
from unittest.mock import MagicMock

from recipe_api.services.webhook import (
    WebhookEnvelope,
    WebhookError,
    build_envelope,
    build_webhook_payload,
    decode_webhook_body,
    forward_recipe_url,
)


URL = 'https://www.tiktok.com/@chef/video/1'
WEBHOOK = 'https://automation.example.com/webhook/recipe'


def fake_response(status_code=200, text='{}'):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    response.reason = 'OK' if response.ok else 'Error'
    return response


class TestBuildPayload:

    def test_minimal_variant(self):
        assert build_webhook_payload(URL, variant='minimal') == {'recipeUrl': URL}

    def test_enriched_variant_repeats_url(self):
        payload = build_webhook_payload(URL, variant='enriched')

        assert payload['recipeUrl'] == URL
        assert payload['videoUrl'] == URL
        assert payload['url'] == URL
        assert payload['action'] == 'fetch_specific_recipe'
        assert 'T' in payload['timestamp']

    def test_variant_from_environment(self, monkeypatch):
        monkeypatch.setenv('WEBHOOK_PAYLOAD_VARIANT', 'minimal')
        assert build_webhook_payload(URL) == {'recipeUrl': URL}

    def test_unknown_variant_falls_back_to_enriched(self, monkeypatch):
        monkeypatch.setenv('WEBHOOK_PAYLOAD_VARIANT', 'fancy')
        assert 'action' in build_webhook_payload(URL)


class TestDecodeBody:

    def test_json_body(self):
        assert decode_webhook_body('{"title": "Soup"}') == {'title': 'Soup'}

    def test_text_body_returned_raw(self):
        assert decode_webhook_body('Workflow was started') == 'Workflow was started'


class TestForwardRecipeUrl:
    """Test posting to the webhook with a mocked session."""

    @pytest.fixture(autouse=True)
    def webhook_env(self, monkeypatch):
        monkeypatch.setenv('N8N_WEBHOOK_URL', WEBHOOK)
        monkeypatch.setenv('WEBHOOK_PAYLOAD_VARIANT', 'minimal')

    def test_posts_payload_and_returns_json(self):
        session = MagicMock()
        session.post.return_value = fake_response(text='{"output": "{}"}')

        result = forward_recipe_url(URL, session=session)

        assert result == {'output': '{}'}
        args, kwargs = session.post.call_args
        assert args[0] == WEBHOOK
        assert kwargs['json'] == {'recipeUrl': URL}
        assert kwargs['headers'] == {'Content-Type': 'application/json'}

    def test_text_reply_is_returned_as_text(self):
        session = MagicMock()
        session.post.return_value = fake_response(text='accepted')

        assert forward_recipe_url(URL, session=session) == 'accepted'

    def test_non_2xx_raises(self):
        session = MagicMock()
        session.post.return_value = fake_response(status_code=404, text='webhook not registered')

        with pytest.raises(WebhookError) as exc:
            forward_recipe_url(URL, session=session)
        assert 'status: 404 - webhook not registered' in str(exc.value)

    def test_redirect_status_raises(self):
        """A final 3xx is not a 2xx, even though requests treats it as ok."""
        session = MagicMock()
        response = fake_response(status_code=304, text='')
        response.ok = True
        session.post.return_value = response

        with pytest.raises(WebhookError) as exc:
            forward_recipe_url(URL, session=session)
        assert 'status: 304' in str(exc.value)

    def test_network_error_raises(self):
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(WebhookError):
            forward_recipe_url(URL, session=session)

    def test_missing_configuration_raises(self, monkeypatch):
        monkeypatch.delenv('N8N_WEBHOOK_URL', raising=False)
        session = MagicMock()

        with pytest.raises(WebhookError):
            forward_recipe_url(URL, session=session)
        session.post.assert_not_called()


class TestEnvelope:

    def test_serializes_with_camel_case_keys(self):
        envelope = build_envelope(URL, {'title': 'Soup'})
        data = envelope.model_dump(by_alias=True)

        assert data['success'] is True
        assert data['originalUrl'] == URL
        assert data['response'] == {'title': 'Soup'}
        assert data['message'] == 'Recipe link sent successfully'
        assert data['timestamp']

    def test_accepts_wire_keys(self):
        envelope = WebhookEnvelope.model_validate({
            'success': True,
            'response': 'text',
            'originalUrl': URL,
        })
        assert envelope.original_url == URL
