import unittest

from ispu_forecast.aqi import Category
from ispu_forecast.models import PredictionPoint
from ispu_forecast.report import MILESTONE_OFFSETS, milestones, summarize


def _points(values):
    return [PredictionPoint(timestamp=f"2024-05-01T{i:02d}:00:00", predicted_aqi=v) for i, v in enumerate(values)]


class TestSummary(unittest.TestCase):

    def test_summarize(self):
        s = summarize([40.0, 80.0, 60.0])
        self.assertEqual(s.current, 40.0)
        self.assertEqual(s.average, 60.0)
        self.assertEqual(s.peak, 80.0)
        self.assertEqual(s.minimum, 40.0)

    def test_summarize_empty(self):
        with self.assertRaises(ValueError):
            summarize([])


class TestMilestones(unittest.TestCase):

    def test_offsets_clamp_to_last_point(self):
        preds = _points([float(10 * i) for i in range(10)])
        cards = milestones(preds)
        self.assertEqual([m.offset_hours for m in cards], list(MILESTONE_OFFSETS))
        self.assertEqual([m.point.predicted_aqi for m in cards], [0.0, 60.0, 90.0, 90.0, 90.0, 90.0])
        self.assertIs(cards[1].category, Category.MODERATE)

    def test_empty(self):
        self.assertEqual(milestones([]), [])


if __name__ == "__main__":
    unittest.main()
