import unittest

from aiohttp import web
from aiohttp import test_utils

from ispu_forecast.client import ForecastClient, auth_headers
from ispu_forecast.config import Settings
from ispu_forecast.errors import ErrorKind, TransportError
from ispu_forecast.pipeline import Error, ForecastInputs, ForecastPipeline, Ready


def _rows(count):
    return [{"timestamp": f"2024-05-{1 + i // 24:02d}T{i % 24:02d}:00:00Z", "pm25": 30.0} for i in range(count)]


class TestForecastClient(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.requests = []
        app = web.Application()
        app.router.add_get("/weather/analytics/hourly", self._hourly)
        app.router.add_post("/predict", self._predict)
        self.server = test_utils.TestServer(app)
        await self.server.start_server()
        base = str(self.server.make_url("/")).rstrip("/")
        self.settings = Settings(api_base_url=base, ml_api_url=base, request_timeout=5)
        self.client = ForecastClient(self.settings)

    async def asyncTearDown(self):
        await self.client.close()
        await self.server.close()

    async def _hourly(self, request):
        self.requests.append(request)
        count = int(request.query["hours"])
        return web.json_response({"data": {"hourly": _rows(count)}})

    async def _predict(self, request):
        body = await request.json()
        self.requests.append(body)
        if body["pollutant"] == "pm10":
            return web.json_response({"detail": "pm10 model unavailable"}, status=422)
        if not body["history"]:
            return web.Response(text="bad gateway", status=502)
        return web.json_response(
            {"predictions": [{"timestamp": "2024-05-04T00:00:00Z", "predicted_aqi": 64.0}]}
        )

    async def test_fetch_hourly_with_token(self):
        res = await self.client.fetch_hourly("Bandung", 72, token="abc")
        self.assertTrue(res.ok)
        self.assertEqual(len(res.body["data"]["hourly"]), 72)
        request = self.requests[0]
        self.assertEqual(request.query["city"], "Bandung")
        self.assertEqual(request.headers["Authorization"], "Bearer abc")

    async def test_fetch_hourly_without_token(self):
        await self.client.fetch_hourly("Bandung", 24)
        self.assertNotIn("Authorization", self.requests[0].headers)

    async def test_predict_error_body(self):
        res = await self.client.predict("pm10", [{"timestamp": None, "pm25_density": 1.0, "pm10_density": 2.0}])
        self.assertFalse(res.ok)
        self.assertEqual(res.status, 422)
        self.assertEqual(res.body, {"detail": "pm10 model unavailable"})

    async def test_non_json_body_becomes_empty(self):
        res = await self.client.predict("pm25", [])
        self.assertEqual(res.status, 502)
        self.assertEqual(res.body, {})

    async def test_pipeline_over_http(self):
        pipeline = ForecastPipeline(self.client, self.settings, ForecastInputs(city="Bandung"))
        state = await pipeline.refresh()
        self.assertIsInstance(state, Ready)
        self.assertEqual(state.predictions[0].predicted_aqi, 64.0)
        self.assertEqual(len(self.requests[1]["history"]), 72)
        self.assertEqual(self.requests[1]["history"][0]["pm25_density"], 30.0)

    async def test_pipeline_surfaces_upstream_detail(self):
        pipeline = ForecastPipeline(self.client, self.settings, ForecastInputs(city="Bandung", pollutant="pm10"))
        state = await pipeline.refresh()
        self.assertIsInstance(state, Error)
        self.assertIs(state.kind, ErrorKind.PREDICTION_FAILED)
        self.assertEqual(state.detail, "pm10 model unavailable")


class TestTransportFailure(unittest.IsolatedAsyncioTestCase):

    async def test_connection_refused(self):
        settings = Settings(api_base_url="http://127.0.0.1:1", request_timeout=2)
        async with ForecastClient(settings) as client:
            with self.assertRaises(TransportError):
                await client.fetch_hourly("Bandung", 72)


class TestAuthHeaders(unittest.TestCase):

    def test_headers(self):
        self.assertEqual(auth_headers(), {"Content-Type": "application/json"})
        self.assertEqual(auth_headers("t")["Authorization"], "Bearer t")


if __name__ == "__main__":
    unittest.main()
