import re

import prometheus_client as pm
import prometheus_client.core as pmc
import prometheus_client.registry as pmr

from .config import setting
from .data import MetricKind, scope_str
from .logger import logger
from .ticker import Ticker


_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_:]")


def prometheus_name(scope):
  name = _INVALID_NAME_CHARS.sub("_", scope_str(scope, "_"))
  return f"_{name}" if name[:1].isdigit() else name


def _gauge(name, desc, value):
  return pmc.GaugeMetricFamily(name, desc, value=value)


class PrometheusExporter(pmr.Collector):
  """ Exposes a Registry to prometheus_client.

      Meters become a counter plus rate gauges, histograms become a summary with
      quantile samples plus min/max/mean/stddev gauges, EWMAs a rate gauge.
      Counters and gauges map onto their prometheus namesakes.
  """

  def __init__(self, registry, port=8088, percentiles=None, log=None):
    self.port = port
    self.registry = registry
    self.percentiles = percentiles
    self.log = log or logger("prometheus")

  def start(self):
    pmc.REGISTRY.register(self)
    pm.start_http_server(self.port)
    self.log.inf("serving metrics on :{}", self.port)

  def collect(self):
    named = self.percentiles or setting("percentiles")
    for r in self.registry.readings(percentiles=named):
      name = prometheus_name(r.scope)
      v = r.value
      match r.kind:
        case MetricKind.METER:
          yield pmc.CounterMetricFamily(name, r.desc, value=v["count"])
          for field in ("mean_rate", "m1_rate", "m5_rate", "m15_rate"):
            yield _gauge(f"{name}_{field}", r.desc, v[field])
        case MetricKind.HISTOGRAM:
          summary = pmc.SummaryMetricFamily(
            name, r.desc, count_value=v["count"], sum_value=v["sum"]
          )
          for pname, p in named.items():
            summary.add_sample(name, {"quantile": str(p)}, v[pname])
          yield summary
          for field in ("min", "max", "mean", "stddev"):
            yield _gauge(f"{name}_{field}", r.desc, v[field])
        case MetricKind.EWMA:
          yield _gauge(f"{name}_rate", r.desc, v["rate"])
        case MetricKind.COUNTER:
          yield pmc.CounterMetricFamily(name, r.desc, value=v["count"])
        case MetricKind.GAUGE:
          yield _gauge(name, r.desc, v["value"])
        case _:
          self.log.err("unhandled metric kind: {}", r.kind)


class LinesExporter:
  def __init__(self, registry):
    self.registry = registry

  def collect(self, prefix=()):
    for r in self.registry.readings(prefix=prefix):
      yield from r.as_lines()


class PeriodicReporter:
  """ Pushes (name, value) pairs from a Registry to `sink` every `interval_s`.

      Meter and counter counts are pushed as the change since the previous push.
      A meter whose count went backwards was replaced, so its whole count is the
      change. Histograms with no observations are skipped.
  """

  def __init__(self, registry, interval_s, sink, percentiles=None, joiner=".", log=None):
    self.registry = registry
    self.sink = sink
    self.percentiles = percentiles
    self.joiner = joiner
    self.log = log or logger("reporter")
    self.previous_counts = dict()
    self.ticker = Ticker(interval_s, self.report, name="periodic-reporter", log=self.log)

  def start(self):
    return self.ticker.start()

  def stop(self):
    return self.ticker.stop()

  def _delta(self, scope, count, monotonic):
    prev = self.previous_counts.get(scope, 0)
    self.previous_counts[scope] = count
    if monotonic and count < prev:
      return count
    return count - prev

  def pairs(self):
    named = self.percentiles or setting("percentiles")
    seen = set()
    for r in self.registry.readings(percentiles=named):
      seen.add(r.scope)
      name = scope_str(r.scope, self.joiner)
      v = r.value
      match r.kind:
        case MetricKind.METER:
          yield f"{name}{self.joiner}count", self._delta(r.scope, v["count"], True)
          yield f"{name}{self.joiner}1m", v["m1_rate"]
          yield f"{name}{self.joiner}5m", v["m5_rate"]
          yield f"{name}{self.joiner}15m", v["m15_rate"]
        case MetricKind.HISTOGRAM:
          if v["count"] > 0:
            yield f"{name}{self.joiner}mean", v["mean"]
            for pname in named:
              yield f"{name}{self.joiner}{pname}", v[pname]
        case MetricKind.EWMA:
          yield name, v["rate"]
        case MetricKind.COUNTER:
          yield name, self._delta(r.scope, v["count"], False)
        case MetricKind.GAUGE:
          yield name, v["value"]

    # Forget metrics that have been unregistered
    for scope in set(self.previous_counts) - seen:
      del self.previous_counts[scope]

  def report(self):
    """ Push one round of values. Returns how many the sink accepted """
    sent = 0
    for name, value in self.pairs():
      try:
        self.sink(name, value)
        sent += 1
      except Exception as e:
        self.log.err("sink rejected {}: {!r}", name, e)
    return sent
