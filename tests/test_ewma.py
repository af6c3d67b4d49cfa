import math
import threading

import pytest

from metrics.config import ConfigError
from metrics.ewma import EWMA, alpha_for, M1_ALPHA, M5_ALPHA, M15_ALPHA


def test_alphas_match_load_average_constants():
  assert M1_ALPHA == pytest.approx(1 - math.exp(-5 / 60.0))
  assert M5_ALPHA == pytest.approx(1 - math.exp(-5 / 60.0 / 5))
  assert M15_ALPHA == pytest.approx(1 - math.exp(-5 / 60.0 / 15))
  assert M1_ALPHA == pytest.approx(0.0799555853706767)


def test_rate_is_zero_until_first_tick():
  e = EWMA.one_minute()
  e.update(100)
  assert e.rate() == 0.0


def test_first_tick_uses_instant_rate():
  e = EWMA.one_minute()
  e.update(3)
  e.tick()
  assert e.rate() == pytest.approx(0.6)


def test_tick_resets_accumulator():
  e = EWMA.one_minute()
  e.update(3)
  e.tick()
  e.tick()
  # second tick saw nothing: rate decays towards zero
  assert e.rate() == pytest.approx(0.6 - M1_ALPHA * 0.6)


def test_one_minute_decay_matches_reference_values():
  e = EWMA.one_minute()
  e.update(3)
  e.tick()
  # one minute of empty ticks later
  for _ in range(12):
    e.tick()
  assert e.rate() == pytest.approx(0.6 * (1 - M1_ALPHA) ** 12)
  assert e.rate() == pytest.approx(0.22072766, rel=1e-6)


@pytest.mark.parametrize("factory", [EWMA.one_minute, EWMA.five_minute, EWMA.fifteen_minute])
def test_constant_input_converges(factory):
  e = factory()
  e.tick()  # rate starts at 0
  target = 7 / e.interval_s
  for k in range(1, 2001):
    e.update(7)
    e.tick()
    assert abs(e.rate() - target) == pytest.approx(target * (1 - e.alpha) ** k, abs=1e-9)
  assert e.rate() == pytest.approx(target, rel=1e-3)


def test_alpha_follows_interval():
  e = EWMA.one_minute(interval_s=1)
  assert e.interval_s == 1
  assert e.alpha == pytest.approx(alpha_for(1, 1))
  assert e.alpha != pytest.approx(M1_ALPHA)


@pytest.mark.parametrize("interval, alpha", [(0, 0.1), (-5, 0.1), (5, 0.0), (5, 1.0), (5, -0.2)])
def test_misconfiguration_fails_fast(interval, alpha):
  with pytest.raises(ConfigError):
    EWMA(interval, alpha)


def test_concurrent_updates_are_not_lost():
  e = EWMA(1, 0.5)

  def work():
    for _ in range(10_000):
      e.update(1)

  threads = [threading.Thread(target=work) for _ in range(8)]
  for t in threads:
    t.start()
  for t in threads:
    t.join()

  e.tick()
  assert e.rate() == 80_000
