"""
Tests for the send-recipe-link relay route and its CORS handling.
"""
from unittest.mock import patch

from recipe_api.services.webhook import WebhookError


URL = 'https://www.youtube.com/watch?v=abc'


class TestSendRecipeLink:
    """Test the relay endpoint contract."""

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_success_envelope(self, mock_forward, client):
        mock_forward.return_value = {'title': 'X', 'ingredients': ['a'], 'steps': ['b']}

        response = client.post('/api/send-recipe-link', json={'recipeUrl': URL})

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['message'] == 'Recipe link sent successfully'
        assert data['response'] == {'title': 'X', 'ingredients': ['a'], 'steps': ['b']}
        assert data['originalUrl'] == URL
        assert data['timestamp']
        mock_forward.assert_called_once_with(URL)

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_text_reply_passed_through(self, mock_forward, client):
        mock_forward.return_value = 'Workflow was started'

        response = client.post('/api/send-recipe-link', json={'recipeUrl': URL})

        assert response.status_code == 200
        assert response.json()['response'] == 'Workflow was started'

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_missing_url_is_400(self, mock_forward, client):
        response = client.post('/api/send-recipe-link', json={})

        assert response.status_code == 400
        assert response.json() == {'error': 'Recipe URL is required'}
        mock_forward.assert_not_called()

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_empty_url_is_400(self, mock_forward, client):
        response = client.post('/api/send-recipe-link', json={'recipeUrl': ''})

        assert response.status_code == 400
        mock_forward.assert_not_called()

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_upstream_failure_is_500(self, mock_forward, client):
        mock_forward.side_effect = WebhookError("Webhook request failed with status: 502 - bad gateway")

        response = client.post('/api/send-recipe-link', json={'recipeUrl': URL})

        assert response.status_code == 500
        data = response.json()
        assert data['error'] == 'Failed to send recipe link'
        assert '502' in data['details']
        assert data['timestamp']

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_no_body_is_400(self, mock_forward, client):
        response = client.post('/api/send-recipe-link')

        assert response.status_code == 400
        assert response.json() == {'error': 'Recipe URL is required'}
        mock_forward.assert_not_called()

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_invalid_json_body_is_500(self, mock_forward, client):
        response = client.post(
            '/api/send-recipe-link',
            content='{not json',
            headers={'Content-Type': 'application/json'},
        )

        assert response.status_code == 500
        data = response.json()
        assert data['error'] == 'Failed to send recipe link'
        assert 'Invalid JSON body' in data['details']
        assert data['timestamp']
        mock_forward.assert_not_called()

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_non_object_body_is_400(self, mock_forward, client):
        response = client.post('/api/send-recipe-link', json=['https://youtu.be/x'])

        assert response.status_code == 400
        mock_forward.assert_not_called()

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_non_string_url_is_forwarded(self, mock_forward, client):
        mock_forward.return_value = 'accepted'

        response = client.post('/api/send-recipe-link', json={'recipeUrl': 123})

        assert response.status_code == 200
        assert response.json()['originalUrl'] == '123'
        mock_forward.assert_called_once_with(123)


class TestCors:
    """Test preflight and simple CORS responses."""

    def test_preflight(self, client):
        response = client.options(
            '/api/send-recipe-link',
            headers={
                'Origin': 'https://recipes.example.com',
                'Access-Control-Request-Method': 'POST',
                'Access-Control-Request-Headers': 'authorization, x-client-info, apikey, content-type',
            },
        )

        assert response.status_code == 200
        assert response.headers['access-control-allow-origin'] == '*'
        allowed = response.headers['access-control-allow-headers'].lower()
        for header in ('authorization', 'x-client-info', 'apikey', 'content-type'):
            assert header in allowed

    @patch('recipe_api.routes.relay.forward_recipe_url')
    def test_error_response_carries_cors_header(self, mock_forward, client):
        response = client.post(
            '/api/send-recipe-link',
            json={},
            headers={'Origin': 'https://recipes.example.com'},
        )

        assert response.status_code == 400
        assert response.headers['access-control-allow-origin'] == '*'

    def test_preflight_with_unlisted_header_still_answered(self, client):
        response = client.options(
            '/api/send-recipe-link',
            headers={
                'Origin': 'https://recipes.example.com',
                'Access-Control-Request-Method': 'POST',
                'Access-Control-Request-Headers': 'content-type, x-supabase-api-version',
            },
        )

        assert response.status_code == 200
        assert response.headers['access-control-allow-origin'] == '*'
        allowed = response.headers['access-control-allow-headers'].lower()
        assert 'apikey' in allowed
        assert 'x-supabase-api-version' not in allowed
