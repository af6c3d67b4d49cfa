from .config import ConfigError, CurrentConfig, DefaultConfig
from .counter import Counter, Gauge
from .data import MetricKind, Reading
from .ewma import EWMA, M1_ALPHA, M5_ALPHA, M15_ALPHA
from .histogram import Histogram, ThreadsafeHistogram
from .meter import Meter
from .registry import Registry, MetricTypeError
from .sample import Sample, UniformSample, ExponentiallyDecayingSample
from .ticker import Ticker

REGISTRY = Registry()


def registry():
  return REGISTRY


def meter(*scope, desc="", **kwargs):
  return REGISTRY.meter(*scope, desc=desc, **kwargs)


def histogram(*scope, desc="", **kwargs):
  return REGISTRY.histogram(*scope, desc=desc, **kwargs)


def counter(*scope, desc=""):
  return REGISTRY.counter(*scope, desc=desc)


def gauge(*scope, desc="", **kwargs):
  return REGISTRY.gauge(*scope, desc=desc, **kwargs)
