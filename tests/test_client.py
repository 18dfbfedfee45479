import unittest
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import client as client_module
from client import ReadinessClient


class FakeResponse:
    def __init__(self, data):
        self.data = data

    def raise_for_status(self):
        pass

    def json(self):
        return self.data


class ClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.calls = []
        self._get = client_module.requests.get
        self._post = client_module.requests.post
        client_module.requests.get = self._fake("GET")
        client_module.requests.post = self._fake("POST")
        self.client = ReadinessClient("athlete-1", base_url="http://testserver/")

    def tearDown(self) -> None:
        client_module.requests.get = self._get
        client_module.requests.post = self._post

    def _fake(self, method):
        def call(url, params=None, headers=None):
            self.calls.append((method, url, params, headers))
            return FakeResponse({"new_prs": [{"type": "1rm"}], "acwr": 1.1})
        return call

    def test_sends_user_header(self) -> None:
        self.client.acwr()
        method, url, _, headers = self.calls[0]
        self.assertEqual(method, "GET")
        self.assertEqual(url, "http://testserver/loads/acwr")
        self.assertEqual(headers, {"X-User-Id": "athlete-1"})

    def test_log_set(self) -> None:
        prs = self.client.log_set("Bench Press", weight=100, reps=5)
        self.assertEqual(prs, [{"type": "1rm"}])
        self.assertEqual(self.calls[0][2]["exercise"], "Bench Press")

    def test_generate_finisher(self) -> None:
        self.client.generate_finisher(4)
        self.assertEqual(self.calls[0][1], "http://testserver/sessions/4/finisher/generate")

    def test_soreness_history(self) -> None:
        self.client.soreness_history(start_date="2024-05-01")
        method, url, params, _ = self.calls[0]
        self.assertEqual((method, url), ("GET", "http://testserver/soreness"))
        self.assertEqual(params, {"start_date": "2024-05-01", "end_date": None})


if __name__ == '__main__':
    unittest.main()
