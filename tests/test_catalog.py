# Tests for catalog access, configuration and logging setup

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest
import requests
from smartstock.catalog_client import CatalogClient, CatalogSnapshot, StaticCatalogClient
from smartstock.config import Settings, load_settings
from smartstock.errors import CatalogUnavailableError, ConfigError
from smartstock.logging_config import set_error_alert_callback, setup_logging


class FakeResponse:
    def __init__(self, status_code, data=None):
        self.status_code = status_code
        self._data = data
        self.text = json.dumps(data)

    def json(self):
        if self._data is None:
            raise ValueError("no JSON")
        return self._data


class TestCatalogSnapshot:
    """Test snapshot construction"""

    def test_derives_stores_from_items(self):
        snapshot = CatalogSnapshot.from_records(None, [
            {'name': 'Coca Cola 330ml', 'storeId': 'store-001', 'storeName': '99 SPEEDMART Kuala Lumpur', 'qty': 50},
            {'name': 'Maggi Instant Noodles', 'storeId': 'store-003', 'storeName': '99 SPEEDMART Shah Alam', 'qty': 75},
            {'name': 'Coca Cola 330ml', 'storeId': 'store-001', 'storeName': '99 SPEEDMART Kuala Lumpur', 'qty': 1},
        ])

        assert [s.display_name for s in snapshot.list_stores()] == [
            '99 SPEEDMART Kuala Lumpur', '99 SPEEDMART Shah Alam']
        assert len(snapshot.list_items_by_store('store-001')) == 2

    def test_field_coercion(self):
        snapshot = CatalogSnapshot.from_records(
            [{'id': 's', 'displayName': 'Store'}],
            [{'id': 'x', 'storeId': 's', 'name': 'A', 'qty': '7', 'reorderPoint': '2'},
             {'id': 'y', 'storeId': 's', 'name': 'B', 'qty': -4},
             {'id': 'z', 'storeId': 's', 'name': 'C', 'qty': None, 'reorder_threshold': 3}],
        )
        a, b, c = snapshot.items

        assert (a.qty, a.reorder_threshold) == (7, 2)
        assert (b.qty, b.reorder_threshold) == (0, 5)
        assert (c.qty, c.reorder_threshold) == (0, 3)

    def test_drops_items_of_unknown_stores(self):
        snapshot = CatalogSnapshot.from_records(
            [{'id': 's', 'storeName': 'Store'}],
            [{'id': 'x', 'storeId': 's', 'name': 'A'}, {'id': 'y', 'storeId': 'gone', 'name': 'B'}],
        )

        assert [i.id for i in snapshot.items] == ['x']

    def test_list_items_by_name(self):
        snapshot = CatalogSnapshot.from_records(None, [
            {'id': '1', 'storeId': 'a', 'name': 'Oil Packet 1KG'},
            {'id': '2', 'storeId': 'b', 'name': 'oil  packet 1kg'},
            {'id': '3', 'storeId': 'b', 'name': 'Oil Packet 2KG'},
        ])

        assert [i.id for i in snapshot.list_items_by_name('OIL PACKET 1KG')] == ['1', '2']


class TestCatalogClient:
    """Test the REST catalog client"""

    def setup_method(self):
        self.client = CatalogClient('http://inventory.local/', api_key='secret', max_retries=2)
        self.client.retry_delay = 0
        self.calls = []

    def route(self, responses):
        def fake_get(url, params=None, timeout=None):
            self.calls.append(url)
            result = responses[url]
            if isinstance(result, Exception):
                raise result
            return result
        self.client.session.get = fake_get

    def test_fetch_snapshot(self):
        self.route({
            'http://inventory.local/api/stores': FakeResponse(200, {'stores': [{'id': 'a', 'storeName': 'Acacia'}]}),
            'http://inventory.local/api/stores/a/items': FakeResponse(200, {'items': [
                {'id': 'oil', 'name': 'Oil Packet 1KG', 'qty': 3, 'reorderPoint': 5}]}),
        })

        snapshot = self.client.fetch_snapshot()

        assert snapshot.store_by_id('a').display_name == 'Acacia'
        assert snapshot.items[0].store_id == 'a'
        assert self.client.session.headers['Authorization'] == 'Bearer secret'

    def test_timeout_raises_after_retries(self):
        self.route({'http://inventory.local/api/stores': requests.exceptions.Timeout()})

        with pytest.raises(CatalogUnavailableError):
            self.client.fetch_snapshot()
        assert len(self.calls) == 2

    def test_server_error_retried(self):
        self.route({'http://inventory.local/api/stores': FakeResponse(503, {})})

        with pytest.raises(CatalogUnavailableError, match='status 503'):
            self.client.list_stores()
        assert len(self.calls) == 2

    def test_auth_failure_not_retried(self):
        self.route({'http://inventory.local/api/stores': FakeResponse(401, {})})

        with pytest.raises(CatalogUnavailableError):
            self.client.list_stores()
        assert len(self.calls) == 1

    def test_invalid_json(self):
        self.route({'http://inventory.local/api/stores': FakeResponse(200, None)})

        with pytest.raises(CatalogUnavailableError, match='invalid JSON'):
            self.client.list_stores()

    @pytest.mark.parametrize('error', [
        requests.exceptions.ChunkedEncodingError('truncated'),
        requests.exceptions.TooManyRedirects('loop'),
        requests.exceptions.MissingSchema('no scheme'),
    ])
    def test_other_request_errors_not_retried(self, error):
        self.route({'http://inventory.local/api/stores': error})

        with pytest.raises(CatalogUnavailableError) as exc_info:
            self.client.fetch_snapshot()
        assert exc_info.value.__cause__ is error
        assert len(self.calls) == 1

    @pytest.mark.parametrize('data', [{'stores': None}, 'stores', [1, 2], {'stores': [{'id': 'a'}, 'b']}])
    def test_unexpected_store_payload(self, data):
        self.route({'http://inventory.local/api/stores': FakeResponse(200, data)})

        with pytest.raises(CatalogUnavailableError, match='unexpected stores payload'):
            self.client.fetch_snapshot()

    def test_unexpected_items_payload(self):
        self.route({
            'http://inventory.local/api/stores': FakeResponse(200, [{'id': 'a', 'storeName': 'Acacia'}]),
            'http://inventory.local/api/stores/a/items': FakeResponse(200, {'items': {'id': 'oil'}}),
        })

        with pytest.raises(CatalogUnavailableError, match='unexpected items payload'):
            self.client.fetch_snapshot()


class TestStaticCatalogClient:
    """Test file-backed catalog"""

    def test_from_file(self, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps({
            'stores': [{'id': 'a', 'storeName': '99 Speedmart Acacia'}],
            'items': [{'id': 'oil', 'storeId': 'a', 'name': 'Oil Packet 1KG', 'qty': 3}],
        }))

        client = StaticCatalogClient.from_file(path)
        snapshot = client.fetch_snapshot()

        assert snapshot.items[0].name == 'Oil Packet 1KG'
        assert client.fetch_count == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogUnavailableError):
            StaticCatalogClient.from_file(tmp_path / 'nope.json')

    def test_file_not_an_object(self, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text('[]')

        with pytest.raises(CatalogUnavailableError):
            StaticCatalogClient.from_file(path)


class TestConfig:
    """Test config.json loading"""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / 'config.json')

        assert settings == Settings()
        assert settings.ambiguity_policy == 'primary'
        assert settings.strip_punctuation is True
        assert settings.summary_limit == 10

    def test_overrides(self, tmp_path):
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({'ambiguity_policy': 'clarify', 'summary_limit': 5, 'unused': 1}))

        settings = load_settings(path)

        assert settings.ambiguity_policy == 'clarify'
        assert settings.summary_limit == 5

    def test_invalid_policy(self, tmp_path):
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({'ambiguity_policy': 'guess'}))

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_limit(self):
        with pytest.raises(ConfigError):
            Settings(summary_limit=0).validate()
        with pytest.raises(ConfigError):
            Settings(log_backup_count=0).validate()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'config.json'
        path.write_text('{not json')

        with pytest.raises(ConfigError):
            load_settings(path)


class TestLoggingConfig:
    """Test log setup and error alerting"""

    def setup_method(self):
        self.level = logging.getLogger().level
        self.added = []

    def teardown_method(self):
        set_error_alert_callback(None)
        root = logging.getLogger()
        for h in self.added:
            root.removeHandler(h)
            h.close()
        root.setLevel(self.level)

    def configure(self, settings):
        before = list(logging.getLogger().handlers)
        setup_logging(settings, console=False)
        self.added = [h for h in logging.getLogger().handlers if h not in before]

    def test_errors_reach_alert_callback(self, tmp_path):
        alerts = []
        set_error_alert_callback(lambda msg, level: alerts.append((msg, level)))
        log_path = tmp_path / 'logs' / 'smartstock.log'

        self.configure(Settings(log_path=str(log_path), log_level='debug'))
        logging.getLogger('smartstock.test').warning('just a warning')
        logging.getLogger('smartstock.test').error('catalog down')

        assert len(alerts) == 1
        assert 'catalog down' in alerts[0][0]
        assert alerts[0][1] == 'ERROR'
        assert log_path.exists()
        assert logging.getLogger().level == logging.DEBUG

    def test_rotation_from_settings(self, tmp_path):
        log_path = tmp_path / 'smartstock.log'

        self.configure(Settings(log_path=str(log_path), log_max_bytes=1024, log_backup_count=2,
                                log_level='loud'))
        file_handler = next(h for h in self.added if isinstance(h, RotatingFileHandler))

        assert file_handler.maxBytes == 1024
        assert file_handler.backupCount == 2
        assert logging.getLogger().level == logging.INFO


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
