from __future__ import annotations

import unittest

import numpy as np

from linemarks.fields import read_typed_field
from linemarks.reshape import (
    curve_count,
    element_at,
    promote_2d,
    reshape_curves,
    reshape_segments,
    segment_data_len,
)


def _field(value):
    return read_typed_field(value, label="test")


class ReshapeTests(unittest.TestCase):
    def test_flat_field_is_promoted_to_single_series(self) -> None:
        promoted = promote_2d(_field([1, 2, 3]))
        self.assertEqual(len(promoted), 1)
        self.assertEqual(promoted[0].tolist(), [1.0, 2.0, 3.0])

    def test_nested_field_keeps_one_array_per_curve(self) -> None:
        promoted = promote_2d(_field([[1, 2], [3, 4, 5]]))
        self.assertEqual([row.tolist() for row in promoted], [[1.0, 2.0], [3.0, 4.0, 5.0]])

    def test_curve_count_uses_y_when_x_is_shared(self) -> None:
        self.assertEqual(curve_count([[1]], [[1], [2], [3]]), 3)
        self.assertEqual(curve_count([[1], [2]], [[1], [2], [3]]), 2)
        self.assertEqual(curve_count([[1], [2], [3]], [[1]]), 1)
        self.assertEqual(curve_count([], []), 0)

    def test_shared_x_is_broadcast_to_every_curve(self) -> None:
        x = promote_2d(_field([1, 2, 3]))
        y = promote_2d(_field([[10, 20, 30], [1, 2, 3]]))
        curves = reshape_curves(x, y, _field(None), ["a", "b"])

        self.assertEqual([c.name for c in curves], ["a", "b"])
        self.assertEqual([c.index for c in curves], [0, 1])
        for curve, ys in zip(curves, ([10, 20, 30], [1, 2, 3])):
            self.assertEqual([p.x for p in curve.values], [1.0, 2.0, 3.0])
            self.assertEqual([p.y for p in curve.values], [float(v) for v in ys])
            self.assertEqual([p.sub_index for p in curve.values], [0, 1, 2])

    def test_paired_series_truncate_to_shorter(self) -> None:
        x = promote_2d(_field([[0, 1, 2, 3, 4]]))
        y = promote_2d(_field([[5, 6, 7]]))
        (curve,) = reshape_curves(x, y, _field(None), ["C1"])
        self.assertEqual(len(curve.values), 3)
        self.assertEqual([(p.x, p.y) for p in curve.values], [(0.0, 5.0), (1.0, 6.0), (2.0, 7.0)])

    def test_paired_series_lengths_match_x_per_curve(self) -> None:
        x = promote_2d(_field([[1, 2], [3, 4, 5]]))
        y = promote_2d(_field([[1, 1], [2, 2, 2]]))
        curves = reshape_curves(x, y, _field(None), ["C1", "C2"])
        self.assertEqual([len(c.values) for c in curves], [2, 3])

    def test_shared_x_shorter_than_y_truncates(self) -> None:
        x = promote_2d(_field([1, 2]))
        y = promote_2d(_field([[1, 2, 3], [4, 5, 6]]))
        curves = reshape_curves(x, y, _field(None), ["C1", "C2"])
        self.assertEqual([len(c.values) for c in curves], [2, 2])

    def test_curve_color_taken_per_curve_or_none(self) -> None:
        x = promote_2d(_field([1, 2]))
        y = promote_2d(_field([[1, 2], [3, 4], [5, 6]]))
        curves = reshape_curves(x, y, _field([0.5, 1.5]), ["C1", "C2", "C3"])
        self.assertEqual([c.color for c in curves], [0.5, 1.5, None])

    def test_categorical_values_pass_through(self) -> None:
        x = promote_2d(_field(["a", "b", "c"]))
        y = promote_2d(_field([1, 2, 3]))
        (curve,) = reshape_curves(x, y, _field(None), ["C1"])
        self.assertEqual([p.x for p in curve.values], ["a", "b", "c"])

    def test_segments_take_left_endpoint_style(self) -> None:
        x = promote_2d(_field([0, 1, 2, 3]))
        y = promote_2d(_field([5, 6, 7, 8]))
        series = reshape_segments(x, y, _field([10, 20, 30, 40]), _field([1, 2, 3, 4]), "C1")

        self.assertEqual(series.name, "C1")
        self.assertEqual(len(series.values), 3)
        first = series.values[0]
        self.assertEqual((first.x1, first.y1, first.x2, first.y2), (0.0, 5.0, 1.0, 6.0))
        self.assertEqual([s.color for s in series.values], [10.0, 20.0, 30.0])
        self.assertEqual([s.size for s in series.values], [1.0, 2.0, 3.0])

    def test_segments_bounded_by_shorter_series(self) -> None:
        x = promote_2d(_field([0, 1, 2, 3, 4, 5]))
        y = promote_2d(_field([5, 6, 7]))
        self.assertEqual(segment_data_len(x, y), 3)
        series = reshape_segments(x, y, _field(None), _field(None), "C1")
        self.assertEqual(len(series.values), 2)
        self.assertIsNone(series.values[0].color)
        self.assertIsNone(series.values[0].size)

    def test_single_sample_has_no_segments(self) -> None:
        x = promote_2d(_field([1]))
        y = promote_2d(_field([2]))
        self.assertEqual(reshape_segments(x, y, _field(None), _field(None), "C1").values, [])

    def test_element_at_returns_python_scalars(self) -> None:
        arr = np.asarray([1.5, 2.5], dtype=np.float64)
        self.assertIsInstance(element_at(arr, 0), float)
        self.assertIsNone(element_at(arr, 2))


if __name__ == "__main__":
    unittest.main()
