import threading
import time

import pytest

from metrics.config import ConfigError
from metrics.logger import NullLogger
from metrics.meter import Meter


def test_count_accumulates(stopped_meter):
  for _ in range(10):
    stopped_meter.update(5)
  assert stopped_meter.count() == 50


def test_update_defaults_to_one(stopped_meter):
  stopped_meter.update()
  stopped_meter.update()
  assert stopped_meter.count() == 2


@pytest.mark.parametrize("delta", [-1, 1.5, "3", True, False])
def test_update_rejects_non_counts(stopped_meter, delta):
  with pytest.raises(ValueError):
    stopped_meter.update(delta)
  assert stopped_meter.count() == 0


def test_mean_rate(stopped_meter, clock):
  assert stopped_meter.mean_rate() == 0.0
  stopped_meter.update(10)
  # no time has passed on the manual clock
  assert stopped_meter.mean_rate() == 0.0
  clock.advance(5)
  assert stopped_meter.mean_rate() == pytest.approx(2.0)


def test_tick_feeds_every_window(stopped_meter):
  stopped_meter.update(10)
  stopped_meter.tick()
  assert stopped_meter.one_minute_rate() == pytest.approx(2.0)
  assert stopped_meter.five_minute_rate() == pytest.approx(2.0)
  assert stopped_meter.fifteen_minute_rate() == pytest.approx(2.0)

  stopped_meter.tick()
  m1, m5, m15 = (
    stopped_meter.one_minute_rate(),
    stopped_meter.five_minute_rate(),
    stopped_meter.fifteen_minute_rate(),
  )
  # shorter windows forget faster
  assert m1 < m5 < m15 < 2.0


def test_double_stop_is_a_noop():
  m = Meter(tick_interval_s=60, log=NullLogger())
  assert not m.stopped
  m.stop()
  m.stop()
  assert m.stopped


def test_background_ticker_drives_rates():
  m = Meter(tick_interval_s=0.01, log=NullLogger())
  try:
    m.update(5)
    deadline = time.time() + 5
    while m.one_minute_rate() == 0.0 and time.time() < deadline:
      time.sleep(0.01)
    assert m.one_minute_rate() > 0.0
  finally:
    m.stop()


def test_rates_freeze_after_stop_but_count_continues():
  m = Meter(tick_interval_s=0.01, log=NullLogger())
  m.update(5)
  deadline = time.time() + 5
  while m.one_minute_rate() == 0.0 and time.time() < deadline:
    time.sleep(0.01)
  m.stop()

  rates = (m.one_minute_rate(), m.five_minute_rate(), m.fifteen_minute_rate())
  for _ in range(5):
    m.update(100)
  time.sleep(0.1)

  assert m.count() == 505
  assert (m.one_minute_rate(), m.five_minute_rate(), m.fifteen_minute_rate()) == rates


def test_concurrent_updates_while_ticking():
  m = Meter(tick_interval_s=0.001, log=NullLogger())

  def work():
    for _ in range(5_000):
      m.update(2)

  threads = [threading.Thread(target=work) for _ in range(4)]
  try:
    for t in threads:
      t.start()
    for t in threads:
      t.join()
  finally:
    m.stop()

  assert m.count() == 40_000


def test_bad_interval():
  with pytest.raises(ConfigError):
    Meter(tick_interval_s=-1, autostart=False)
