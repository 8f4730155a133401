"""Forecast evaluation

ModelComparator lives in transcript_forecasting.evaluation.comparison and
is imported from there, since it depends on the models package, which in
turn depends on the evaluator below.
"""

from .accuracy import AccuracyEvaluator

__all__ = ['AccuracyEvaluator']
