from threading import Lock
import time

from .config import setting, check_positive
from .ewma import EWMA
from .logger import logger
from .ticker import Ticker


class Meter:
  """ Mean throughput plus one, five and fifteen minute exponentially-weighted
      moving average throughputs.

      A background ticker folds the EWMAs every `tick_interval_s` seconds. After
      `stop()` the meter keeps counting, but its rates are frozen at their last
      tick.
  """

  def __init__(self, tick_interval_s=None, clock=time.time, autostart=True, log=None):
    interval_s = check_positive("tick interval", setting("tick_interval_s", tick_interval_s))

    self.tick_interval_s = interval_s
    self.clock = clock
    self.log = log or logger("meter")
    self.m1 = EWMA.one_minute(interval_s)
    self.m5 = EWMA.five_minute(interval_s)
    self.m15 = EWMA.fifteen_minute(interval_s)
    self.start_time = clock()

    self._count = 0
    self._lock = Lock()
    self.ticker = Ticker(interval_s, self.tick, name="meter-ticker", log=self.log)

    if autostart:
      self.ticker.start()

  @property
  def stopped(self):
    return self.ticker.stopped

  def tick(self):
    self.m1.tick()
    self.m5.tick()
    self.m15.tick()

  def update(self, delta=1):
    if isinstance(delta, bool) or not isinstance(delta, int) or delta < 0:
      raise ValueError(f"Meter delta must be a non-negative integer, got {delta!r}")

    with self._lock:
      self._count += delta

    self.m1.update(delta)
    self.m5.update(delta)
    self.m15.update(delta)

  def count(self):
    with self._lock:
      return self._count

  def mean_rate(self):
    """ Events per second since the meter was created. Not smoothed """
    count = self.count()
    elapsed = self.clock() - self.start_time
    if count == 0 or elapsed <= 0:
      return 0.0
    return count / elapsed

  def one_minute_rate(self):
    return self.m1.rate()

  def five_minute_rate(self):
    return self.m5.rate()

  def fifteen_minute_rate(self):
    return self.m15.rate()

  def stop(self):
    if self.ticker.stop():
      self.log.dbg("meter stopped at count={}", self.count())

  def __repr__(self):
    return (
      f"Meter(count={self.count()}, m1={self.one_minute_rate():.4f}, "
      f"m5={self.five_minute_rate():.4f}, m15={self.fifteen_minute_rate():.4f})"
    )
