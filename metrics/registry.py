from collections import namedtuple
from threading import RLock
import time

from .counter import Counter, Gauge
from .data import MetricKind, Reading, to_scope, scope_startswith, scope_lstrip, scope_str
from .ewma import EWMA
from .histogram import Histogram, ThreadsafeHistogram
from .logger import logger
from .meter import Meter


class MetricTypeError(Exception):
  pass


Registered = namedtuple('Registered', ('kind', 'metric', 'desc'))


def read_metric(kind, metric, percentiles=None):
  match kind:
    case MetricKind.EWMA:
      return {"rate": metric.rate()}
    case MetricKind.METER:
      return {
        "count": metric.count(),
        "mean_rate": metric.mean_rate(),
        "m1_rate": metric.one_minute_rate(),
        "m5_rate": metric.five_minute_rate(),
        "m15_rate": metric.fifteen_minute_rate(),
      }
    case MetricKind.HISTOGRAM:
      return metric.summary(percentiles)
    case MetricKind.COUNTER:
      return {"count": metric.count()}
    case MetricKind.GAUGE:
      return {"value": metric.value()}

  raise MetricTypeError(f"Cannot read a metric of kind {kind}")


class Registry:
  """ Metrics keyed by their scope path, eg ("http", "requests").

      The registry itself is threadsafe. Histograms are handed out wrapped in a
      ThreadsafeHistogram unless asked otherwise, since the registry reads them
      from whatever thread collects.
  """

  def __init__(self, log=None):
    self.metrics = dict()
    self.lock = RLock()
    self.log = log or logger("registry")

  def find_or_create(self, kind, scope, desc, factory):
    scope = to_scope(scope)
    if not scope:
      raise ValueError("Scope must not be empty")

    with self.lock:
      found = self.metrics.get(scope)
      if found:
        if found.kind != kind:
          raise MetricTypeError(
            f"{scope_str(scope)} is a {found.kind.name}, not a {kind.name}"
          )
        return found.metric

      metric = factory()
      self.metrics[scope] = Registered(kind, metric, desc)

    self.log.dbg("registered {} {}", kind.name.lower(), scope_str(scope))
    return metric

  def ewma(self, *scope, desc="", window_min=1, interval_s=None):
    return self.find_or_create(
      MetricKind.EWMA, scope, desc,
      lambda: EWMA.for_window(window_min, interval_s)
    )

  def counter(self, *scope, desc=""):
    return self.find_or_create(MetricKind.COUNTER, scope, desc, Counter)

  def gauge(self, *scope, desc="", value=0.0, value_fn=None):
    return self.find_or_create(
      MetricKind.GAUGE, scope, desc, lambda: Gauge(value=value, value_fn=value_fn)
    )

  def meter(self, *scope, desc="", **kwargs):
    return self.find_or_create(MetricKind.METER, scope, desc, lambda: Meter(**kwargs))

  def histogram(self, *scope, desc="", biased=True, threadsafe=True, **kwargs):
    def mk():
      hist = Histogram.biased(**kwargs) if biased else Histogram.uniform(**kwargs)
      return ThreadsafeHistogram(hist) if threadsafe else hist

    return self.find_or_create(MetricKind.HISTOGRAM, scope, desc, mk)

  def get(self, *scope):
    with self.lock:
      found = self.metrics.get(to_scope(scope))
    return found.metric if found else None

  def unregister(self, *scope):
    scope = to_scope(scope)
    with self.lock:
      found = self.metrics.pop(scope, None)

    if found is None:
      return False

    if found.kind == MetricKind.METER:
      found.metric.stop()

    self.log.dbg("unregistered {}", scope_str(scope))
    return True

  def stop(self):
    """ Stop the ticker of every meter in this registry """
    with self.lock:
      meters = [r.metric for r in self.metrics.values() if r.kind == MetricKind.METER]

    for m in meters:
      m.stop()

  def readings(self, prefix=(), percentiles=None):
    """ Read every metric under `prefix`, in scope order """
    prefix = to_scope(prefix)

    # Materialize under the lock, read the metrics outside of it
    with self.lock:
      items = sorted(self.metrics.items())

    for scope, reg in items:
      if scope_startswith(scope, prefix):
        yield Reading(
          kind=reg.kind,
          scope=scope_lstrip(scope, prefix),
          value=read_metric(reg.kind, reg.metric, percentiles),
          desc=reg.desc,
          at=time.time()
        )

  def collect(self, prefix=(), percentiles=None):
    return tuple(self.readings(prefix, percentiles))

  def __len__(self):
    with self.lock:
      return len(self.metrics)

  def __contains__(self, scope):
    with self.lock:
      return to_scope(scope) in self.metrics
