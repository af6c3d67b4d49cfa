import threading

import pytest

from metrics.counter import Counter, Gauge
from metrics.data import MetricKind
from metrics.logger import EntryLogger
from metrics.registry import Registry, MetricTypeError


def test_counter_inc_dec():
  c = Counter()
  c.inc()
  c.inc(5)
  c.dec(2)
  assert c.count() == 4
  c.clear()
  assert c.count() == 0


def test_counter_concurrent_incs():
  c = Counter()

  def work():
    for _ in range(10_000):
      c.inc()

  threads = [threading.Thread(target=work) for _ in range(8)]
  for t in threads:
    t.start()
  for t in threads:
    t.join()
  assert c.count() == 80_000


def test_gauge_set_and_fn():
  g = Gauge()
  assert g.value() == 0.0
  g.set(3)
  assert g.value() == 3

  depth = [7]
  g.set_fn(lambda: depth[0])
  assert g.value() == 7
  depth[0] = 9
  assert g.value() == 9
  with pytest.raises(AssertionError):
    g.set(1)


def test_registry_counters_and_gauges():
  r = Registry(log=EntryLogger())
  c = r.counter("hits")
  assert r.counter("hits") is c
  g = r.gauge("temp", value_fn=lambda: 21.5)

  c.inc(2)
  readings = {x.scope: x for x in r.collect()}
  assert readings[("hits",)].kind == MetricKind.COUNTER
  assert readings[("hits",)].value == {"count": 2}
  assert readings[("temp",)].kind == MetricKind.GAUGE
  assert readings[("temp",)].value == {"value": 21.5}

  with pytest.raises(MetricTypeError):
    r.gauge("hits")
