import unittest

from ispu_forecast.config import Settings


class TestSettings(unittest.TestCase):

    def test_defaults(self):
        s = Settings.from_env({})
        self.assertEqual(s.api_base_url, "http://localhost:8000")
        self.assertEqual(s.ml_api_url, "http://localhost:8001")
        self.assertEqual(s.history_hours, 72)
        self.assertEqual(s.min_history, 49)
        self.assertEqual(s.city, "Bandung")
        self.assertEqual(s.language, "id")

    def test_reads_environment(self):
        s = Settings.from_env(
            {
                "ISPU_API_BASE_URL": "https://api.example.org/",
                "ISPU_ML_API_URL": "https://ml.example.org",
                "ISPU_REQUEST_TIMEOUT": "4.5",
                "ISPU_CITY": "Jakarta",
                "ISPU_LANGUAGE": "en",
            }
        )
        self.assertEqual(s.api_base_url, "https://api.example.org")
        self.assertEqual(s.ml_api_url, "https://ml.example.org")
        self.assertEqual(s.request_timeout, 4.5)
        self.assertEqual(s.city, "Jakarta")
        self.assertEqual(s.language, "en")

    def test_validation(self):
        with self.assertRaises(ValueError):
            Settings(request_timeout=0)
        with self.assertRaises(ValueError):
            Settings(min_history=80, history_hours=72)
        with self.assertRaises(ValueError):
            Settings(language="fr")


if __name__ == "__main__":
    unittest.main()
