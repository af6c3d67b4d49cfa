"""
An exponentially-weighted moving average, ticked on a fixed interval.

The alphas reproduce UNIX load average smoothing:
  http://www.teamquest.com/pdfs/whitepaper/ldavg1.pdf
  http://www.teamquest.com/pdfs/whitepaper/ldavg2.pdf
"""
from threading import Lock
import math

from .config import setting, check_positive, check_alpha


def alpha_for(interval_s, window_min):
  """ Smoothing constant for a `window_min` minute average ticked every `interval_s` """
  return 1 - math.exp(-interval_s / 60.0 / window_min)


M1_ALPHA = alpha_for(5, 1)
M5_ALPHA = alpha_for(5, 5)
M15_ALPHA = alpha_for(5, 15)


class EWMA:

  __slots__ = ('interval_s', 'alpha', '_uncounted', '_rate', '_ticked', '_lock')

  def __init__(self, interval_s, alpha):
    self.interval_s = check_positive("tick interval", interval_s)
    self.alpha = check_alpha(alpha)
    self._uncounted = 0.0
    self._rate = 0.0
    self._ticked = False
    self._lock = Lock()

  @classmethod
  def for_window(cls, window_min, interval_s=None):
    interval_s = check_positive("tick interval", setting("tick_interval_s", interval_s))
    return cls(interval_s, alpha_for(interval_s, window_min))

  @classmethod
  def one_minute(cls, interval_s=None):
    return cls.for_window(1, interval_s)

  @classmethod
  def five_minute(cls, interval_s=None):
    return cls.for_window(5, interval_s)

  @classmethod
  def fifteen_minute(cls, interval_s=None):
    return cls.for_window(15, interval_s)

  def update(self, value):
    with self._lock:
      self._uncounted += value

  def tick(self):
    with self._lock:
      instant_rate = self._uncounted / self.interval_s
      self._uncounted = 0.0
      if self._ticked:
        self._rate += self.alpha * (instant_rate - self._rate)
      else:
        self._rate = instant_rate
        self._ticked = True

  def rate(self):
    """ Events per second. 0 until the first tick """
    with self._lock:
      return self._rate

  def __repr__(self):
    return f"EWMA(interval_s={self.interval_s}, alpha={self.alpha:.6f}, rate={self.rate():.4f})"
