"""Descriptive statistics over simulated score samples.

All functions are pure and operate on numpy arrays (or anything array-like).
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike
from scipy import stats

Z_95 = 1.96


@dataclass(frozen=True)
class ScoreSummary:
    """Descriptive statistics for a score sample."""

    mean: float
    median: float
    mode: float
    variance: float  # population variance
    standard_deviation: float
    min: float
    max: float
    range: float
    q1: float
    q3: float
    iqr: float
    skewness: float
    kurtosis: float  # excess kurtosis
    ci95_lower: float
    ci95_upper: float


@dataclass(frozen=True)
class Histogram:
    bin_edges: np.ndarray
    bin_counts: np.ndarray
    bin_centers: np.ndarray


@dataclass(frozen=True)
class OutlierReport:
    outliers: np.ndarray
    lower_bound: float
    upper_bound: float
    clean: np.ndarray


@dataclass(frozen=True)
class SampleComparison:
    """Comparison of two score samples (b relative to a)."""

    summary_a: ScoreSummary
    summary_b: ScoreSummary
    mean_difference: float
    mean_difference_percent: float
    t_statistic: float
    significant: bool


def summarize(scores: ArrayLike) -> ScoreSummary:
    """Compute descriptive statistics for a score sample.

    Args:
        scores: Per-game scores

    Returns:
        ScoreSummary

    Raises:
        ValueError: If scores is empty

    Notes:
        - Variance and standard deviation use the population form (divide by n)
        - Quartiles are taken by index (floor(n*0.25), floor(n*0.75)) for n >= 4,
          otherwise min / max
        - Skewness needs n > 2 and kurtosis n > 3; both are 0 for a constant sample
        - 95% CI is the normal approximation mean ± 1.96 * sd / sqrt(n)
    """
    data = np.asarray(scores, dtype=np.float64)
    n = len(data)
    if n == 0:
        raise ValueError("Cannot summarize an empty score sample")

    ordered = np.sort(data)
    mean = float(np.mean(data))
    variance = float(np.var(data))
    sd = float(np.sqrt(variance))

    mode = float(stats.mode(data, keepdims=False).mode)

    q1 = float(ordered[int(n * 0.25)]) if n >= 4 else float(ordered[0])
    q3 = float(ordered[int(n * 0.75)]) if n >= 4 else float(ordered[-1])

    if sd > 0:
        skewness = float(stats.skew(data, bias=True)) if n > 2 else 0.0
        kurtosis = float(stats.kurtosis(data, fisher=True, bias=True)) if n > 3 else 0.0
    else:
        skewness = 0.0
        kurtosis = 0.0

    margin = Z_95 * sd / np.sqrt(n)

    return ScoreSummary(
        mean=mean,
        median=float(np.median(data)),
        mode=mode,
        variance=variance,
        standard_deviation=sd,
        min=float(ordered[0]),
        max=float(ordered[-1]),
        range=float(ordered[-1] - ordered[0]),
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
        skewness=skewness,
        kurtosis=kurtosis,
        ci95_lower=mean - margin,
        ci95_upper=mean + margin,
    )


def histogram_bins(scores: ArrayLike, bin_count: int | None = None) -> Histogram:
    """Bin a score sample for charting.

    The default bin count is the larger of Sturges' rule and the square-root
    rule, clamped to [5, 50]. The maximum value falls in the last bin.
    """
    data = np.asarray(scores, dtype=np.float64)
    if len(data) == 0:
        empty = np.array([], dtype=np.float64)
        return Histogram(bin_edges=empty, bin_counts=np.array([], dtype=np.int64), bin_centers=empty)

    if bin_count is None:
        default = max(int(np.ceil(np.log2(len(data)) + 1)), int(np.ceil(np.sqrt(len(data)))))
        bin_count = min(50, max(5, default))

    lo, hi = float(data.min()), float(data.max())
    if hi == lo:
        # np.histogram would widen a zero-width range to ±0.5
        hi = lo + 1.0

    counts, edges = np.histogram(data, bins=bin_count, range=(lo, hi))
    centers = (edges[:-1] + edges[1:]) / 2
    return Histogram(bin_edges=edges, bin_counts=counts, bin_centers=centers)


def percentile(scores: ArrayLike, p: float) -> float:
    """Linear-interpolated percentile. Empty input returns 0.0."""
    if p < 0 or p > 100:
        raise ValueError("Percentile must be in [0, 100]")

    data = np.asarray(scores, dtype=np.float64)
    if len(data) == 0:
        return 0.0
    return float(np.percentile(data, p, method="linear"))


def detect_outliers(scores: ArrayLike) -> OutlierReport:
    """Flag values outside the 1.5 × IQR fences."""
    data = np.asarray(scores, dtype=np.float64)
    summary = summarize(data)
    lower = summary.q1 - 1.5 * summary.iqr
    upper = summary.q3 + 1.5 * summary.iqr

    mask = (data < lower) | (data > upper)
    return OutlierReport(outliers=data[mask], lower_bound=lower, upper_bound=upper, clean=data[~mask])


def compare_samples(a: ArrayLike, b: ArrayLike) -> SampleComparison:
    """Compare mean scores of two samples with a pooled-variance t-statistic.

    Significance is |t| > 1.96 (large-sample approximation).
    """
    data_a = np.asarray(a, dtype=np.float64)
    data_b = np.asarray(b, dtype=np.float64)
    summary_a = summarize(data_a)
    summary_b = summarize(data_b)

    diff = summary_b.mean - summary_a.mean
    diff_pct = (diff / summary_a.mean) * 100 if summary_a.mean != 0 else 0.0

    n_a, n_b = len(data_a), len(data_b)
    if n_a + n_b > 2:
        pooled_sd = np.sqrt(
            ((n_a - 1) * summary_a.variance + (n_b - 1) * summary_b.variance) / (n_a + n_b - 2)
        )
        se = pooled_sd * np.sqrt(1 / n_a + 1 / n_b)
    else:
        se = 0.0

    if se > 0:
        t_stat = float(abs(diff) / se)
    else:
        t_stat = 0.0 if diff == 0 else float("inf")

    return SampleComparison(
        summary_a=summary_a,
        summary_b=summary_b,
        mean_difference=diff,
        mean_difference_percent=diff_pct,
        t_statistic=t_stat,
        significant=t_stat > Z_95,
    )
