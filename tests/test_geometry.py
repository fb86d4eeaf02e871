import unittest

from ispu_forecast.geometry import (
    HOURLY_SPAN,
    ChartCoordinate,
    area_path,
    hover_point,
    line_path,
    nearest_sample,
    project,
)


class TestProject(unittest.TestCase):

    def test_single_sample_sits_at_origin(self):
        self.assertEqual(project([42.0]), [ChartCoordinate(x=0.0, y=90.0)])

    def test_flat_series_has_equal_y(self):
        coords = project([7.0] * 5)
        self.assertEqual({c.y for c in coords}, {90.0})
        self.assertEqual([c.x for c in coords], [0.0, 25.0, 50.0, 75.0, 100.0])

    def test_min_and_max_map_to_baseline_and_top(self):
        coords = project([10.0, 30.0, 20.0])
        self.assertEqual([c.x for c in coords], [0.0, 50.0, 100.0])
        self.assertAlmostEqual(coords[0].y, 90.0)
        self.assertAlmostEqual(coords[1].y, 10.0)
        self.assertAlmostEqual(coords[2].y, 50.0)

    def test_span_is_a_parameter(self):
        coords = project([0.0, 5.0], span=HOURLY_SPAN)
        self.assertAlmostEqual(coords[1].y, 20.0)

    def test_projection_is_repeatable(self):
        values = [3.0, 1.0, 4.0, 1.0, 5.0]
        self.assertEqual(project(values), project(list(values)))

    def test_empty_series_rejected(self):
        with self.assertRaises(ValueError):
            project([])


class TestNearestSample(unittest.TestCase):

    def test_edges(self):
        series = list(range(49))
        self.assertEqual(nearest_sample(series, 0.0), 0)
        self.assertEqual(nearest_sample(series, 1.0), 48)

    def test_clamped(self):
        series = list(range(10))
        self.assertEqual(nearest_sample(series, -0.3), 0)
        self.assertEqual(nearest_sample(series, 1.7), 9)

    def test_half_rounds_up(self):
        self.assertEqual(nearest_sample([0, 0, 0], 0.25), 1)

    def test_monotonic(self):
        series = list(range(13))
        indexes = [nearest_sample(series, k / 200) for k in range(201)]
        self.assertEqual(indexes, sorted(indexes))

    def test_single_sample(self):
        self.assertEqual(nearest_sample([5.0], 0.8), 0)


class TestHoverAndPaths(unittest.TestCase):

    def test_hover_point(self):
        hp = hover_point([0.0, 50.0, 100.0], 0.9)
        self.assertEqual(hp.index, 2)
        self.assertEqual(hp.coordinate, ChartCoordinate(x=100.0, y=10.0))

    def test_paths(self):
        coords = project([1.0, 2.0])
        self.assertEqual(line_path(coords), "M 0 90 L 100 10")
        self.assertEqual(area_path(coords), "M 0 100 L 0 90 L 100 10 L 100 100 Z")

    def test_paths_need_two_points(self):
        coords = project([1.0])
        self.assertEqual(line_path(coords), "")
        self.assertEqual(area_path(coords), "")


if __name__ == "__main__":
    unittest.main()
