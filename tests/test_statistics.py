"""Unit tests for score-sample statistics."""

import numpy as np
import pytest

from lineupsim.simulation.statistics import (
    compare_samples,
    detect_outliers,
    histogram_bins,
    percentile,
    summarize,
)


# ========== summarize ==========


def test_summarize_small_sample():
    summary = summarize([1, 2, 3, 4])

    assert summary.mean == pytest.approx(2.5)
    assert summary.median == pytest.approx(2.5)
    assert summary.mode == 1.0
    assert summary.variance == pytest.approx(1.25)
    assert summary.standard_deviation == pytest.approx(np.sqrt(1.25))
    assert summary.min == 1.0
    assert summary.max == 4.0
    assert summary.range == 3.0
    assert summary.q1 == 2.0
    assert summary.q3 == 4.0
    assert summary.iqr == 2.0
    assert summary.skewness == pytest.approx(0.0)

    margin = 1.96 * np.sqrt(1.25) / 2
    assert summary.ci95_lower == pytest.approx(2.5 - margin)
    assert summary.ci95_upper == pytest.approx(2.5 + margin)


def test_summarize_constant_sample():
    summary = summarize([4, 4, 4, 4, 4])

    assert summary.variance == 0.0
    assert summary.skewness == 0.0
    assert summary.kurtosis == 0.0
    assert summary.ci95_lower == summary.ci95_upper == 4.0


def test_summarize_tiny_sample_quartiles():
    summary = summarize([3, 7])

    assert summary.q1 == 3.0
    assert summary.q3 == 7.0
    assert summary.skewness == 0.0


def test_summarize_right_skew():
    summary = summarize([0, 1, 1, 2, 2, 2, 3, 3, 4, 12])
    assert summary.skewness > 0
    assert summary.mode == 2.0


def test_summarize_empty_raises():
    with pytest.raises(ValueError):
        summarize([])


# ========== percentile ==========


def test_percentile_interpolates():
    assert percentile([1, 2, 3, 4], 50) == pytest.approx(2.5)
    assert percentile([1, 2, 3, 4], 0) == 1.0
    assert percentile([1, 2, 3, 4], 100) == 4.0


@pytest.mark.parametrize("p", [-1, 100.5, 101])
def test_percentile_out_of_range(p):
    with pytest.raises(ValueError):
        percentile([1, 2, 3], p)


def test_percentile_empty():
    assert percentile([], 90) == 0.0


# ========== histogram_bins ==========


def test_histogram_default_bins():
    data = np.random.default_rng(3).poisson(4.5, size=100)
    hist = histogram_bins(data)

    assert len(hist.bin_counts) == 10
    assert len(hist.bin_edges) == 11
    assert hist.bin_counts.sum() == 100
    assert hist.bin_edges[0] == data.min()
    assert hist.bin_edges[-1] == data.max()


def test_histogram_minimum_bins():
    hist = histogram_bins([1, 2, 3])
    assert len(hist.bin_counts) == 5


def test_histogram_explicit_bins_and_constant_data():
    hist = histogram_bins([5, 5, 5], bin_count=4)

    assert len(hist.bin_counts) == 4
    assert hist.bin_counts.sum() == 3
    assert hist.bin_counts[0] == 3


def test_histogram_empty():
    hist = histogram_bins([])
    assert len(hist.bin_counts) == 0


# ========== Outliers and comparison ==========


def test_detect_outliers():
    report = detect_outliers([1, 2, 2, 3, 3, 3, 4, 100])

    assert report.lower_bound == -1.0
    assert report.upper_bound == 7.0
    assert report.outliers.tolist() == [100.0]
    assert len(report.clean) == 7


def test_compare_identical_samples():
    sample = [3, 4, 5, 4, 6, 2, 5]
    comparison = compare_samples(sample, sample)

    assert comparison.mean_difference == 0.0
    assert comparison.t_statistic == 0.0
    assert not comparison.significant


def test_compare_distinct_samples():
    rng = np.random.default_rng(11)
    a = rng.poisson(4.0, size=500)
    b = rng.poisson(5.0, size=500)

    comparison = compare_samples(a, b)

    assert comparison.mean_difference > 0
    assert comparison.mean_difference_percent > 0
    assert comparison.t_statistic > 1.96
    assert comparison.significant
