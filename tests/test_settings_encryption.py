import os
import sys
import unittest
import keyring
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig
from settings_schema import load_settings

class DummyKeyring(keyring.backend.KeyringBackend):
    priority = 1
    def __init__(self):
        self.store = {}
    def get_password(self, service, username):
        return self.store.get((service, username))
    def set_password(self, service, username, password):
        self.store[(service, username)] = password
    def delete_password(self, service, username):
        self.store.pop((service, username), None)

class SettingsEncryptionTest(unittest.TestCase):
    def setUp(self) -> None:
        self.keyring = DummyKeyring()
        keyring.set_keyring(self.keyring)
        os.environ['ENCRYPT_SETTINGS'] = '1'
        self.path = 'enc_settings.yaml'
        if os.path.exists(self.path):
            os.remove(self.path)

    def tearDown(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
        os.environ.pop('ENCRYPT_SETTINGS', None)

    def test_encrypt_and_load(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'event_webhook_token': 'secret', 'log_level': 'DEBUG'})
        self.assertTrue(os.path.exists(self.path))
        with open(self.path, encoding='utf-8') as f:
            self.assertNotIn('secret', f.read())
        self.assertEqual(self.keyring.store[('readiness-engine', 'event_webhook_token')], 'secret')
        data = cfg.load()
        self.assertEqual(data['event_webhook_token'], 'secret')
        self.assertEqual(data['log_level'], 'DEBUG')

    def test_missing_secret_is_dropped(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'event_webhook_url': 'https://hooks.example.com/x'})
        self.keyring.store.clear()
        self.assertNotIn('event_webhook_url', cfg.load())

    def test_settings_read_secret(self) -> None:
        YamlConfig(self.path).save({'event_webhook_url': 'https://hooks.example.com/x'})
        settings = load_settings(self.path)
        self.assertEqual(settings.event_webhook_url, 'https://hooks.example.com/x')

    def test_update_keeps_secret_in_keyring(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'event_webhook_token': 'secret'})
        merged = cfg.update(log_level='DEBUG')
        self.assertEqual(merged, {'event_webhook_token': 'secret', 'log_level': 'DEBUG'})
        with open(self.path, encoding='utf-8') as f:
            self.assertNotIn('secret', f.read())
        self.assertEqual(cfg.load()['event_webhook_token'], 'secret')

    def test_none_values_are_not_stored(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'event_webhook_url': None, 'log_level': 'INFO'})
        self.assertEqual(self.keyring.store, {})
        self.assertEqual(cfg.load(), {'log_level': 'INFO'})

    def test_forget_secrets(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'event_webhook_token': 'secret', 'log_level': 'DEBUG'})
        cfg.forget_secrets()
        self.assertEqual(self.keyring.store, {})
        self.assertEqual(cfg.load(), {'log_level': 'DEBUG'})
        cfg.forget_secrets()

    def test_masked(self) -> None:
        data = {'event_webhook_token': 'secret', 'event_webhook_url': None, 'db_path': 'a.db'}
        self.assertEqual(
            YamlConfig.masked(data),
            {'event_webhook_token': '****', 'event_webhook_url': None, 'db_path': 'a.db'},
        )

if __name__ == '__main__':
    unittest.main()
