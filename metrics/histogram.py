from threading import RLock
import math

from .config import setting
from .sample import UniformSample, ExponentiallyDecayingSample


class Histogram:
  """ Distribution of a stream of values: running count/sum/min/max, variance by
      Welford's method, and percentiles estimated from a bounded sample.

      Not threadsafe. Give each histogram a single writer, or share a
      `ThreadsafeHistogram` instead.

      http://www.johndcook.com/standard_deviation.html
  """

  def __init__(self, sample):
    self.sample = sample
    self.clear()

  @classmethod
  def biased(cls, size=None, alpha=None, **kwargs):
    """ Backed by an exponentially decaying sample, favoring the last ~5 minutes """
    return cls(ExponentiallyDecayingSample(size=size, alpha=alpha, **kwargs))

  @classmethod
  def uniform(cls, size=None, **kwargs):
    return cls(UniformSample(size=size, **kwargs))

  def clear(self):
    self.sample.clear()
    self._count = 0
    self._sum = 0.0
    self._min = 0.0
    self._max = 0.0
    self._m = 0.0
    self._s = 0.0

  def update(self, value):
    self._count += 1
    self._sum += value
    self.sample.update(value)

    if self._count == 1:
      self._min = value
      self._max = value
    else:
      self._min = min(self._min, value)
      self._max = max(self._max, value)

    old_m = self._m
    self._m = old_m + (value - old_m) / self._count
    self._s += (value - old_m) * (value - self._m)

  def count(self):
    return self._count

  def sum(self):
    return self._sum

  def min(self):
    return self._min if self._count else math.nan

  def max(self):
    return self._max if self._count else math.nan

  def mean(self):
    if self._count:
      return self._sum / self._count
    return 0.0

  def variance(self):
    """ Sample variance, S / (n - 1) """
    if self._count <= 1:
      return 0.0
    return self._s / (self._count - 1)

  def std_dev(self):
    return math.sqrt(self.variance())

  def values(self):
    return self.sample.values()

  def percentiles(self, ps):
    """ One score per requested percentile (0..1), linearly interpolated between
        the two closest ranks of the sorted sample.
    """
    scores = [0.0] * len(ps)
    if not self._count:
      return scores

    values = sorted(self.sample.values())
    n = len(values)
    if not n:
      return scores

    for i, p in enumerate(ps):
      pos = p * (n + 1)
      if pos < 1:
        scores[i] = values[0]
      elif pos >= n:
        scores[i] = values[-1]
      else:
        rank = int(pos)
        lower = values[rank - 1]
        upper = values[rank]
        scores[i] = lower + (pos - rank) * (upper - lower)

    return scores

  def summary(self, percentiles=None):
    """ Everything a reporter needs, keyed by field name """
    named = percentiles or setting("percentiles")
    ret = {
      "count": self.count(),
      "sum": self.sum(),
      "min": self.min(),
      "max": self.max(),
      "mean": self.mean(),
      "stddev": self.std_dev(),
    }
    ret.update(zip(named.keys(), self.percentiles(list(named.values()))))
    return ret

  def __repr__(self):
    return (
      f"Histogram(sum={self._sum:.4f}, count={self._count}, "
      f"min={self.min():.4f}, max={self.max():.4f})"
    )


class ThreadsafeHistogram:
  """ A Histogram with every call made under one lock """

  def __init__(self, histogram):
    self._hist = histogram
    self.lock = RLock()

  @property
  def sample(self):
    return self._hist.sample

  def update(self, value):
    with self.lock:
      self._hist.update(value)

  def clear(self):
    with self.lock:
      self._hist.clear()

  def count(self):
    with self.lock:
      return self._hist.count()

  def sum(self):
    with self.lock:
      return self._hist.sum()

  def min(self):
    with self.lock:
      return self._hist.min()

  def max(self):
    with self.lock:
      return self._hist.max()

  def mean(self):
    with self.lock:
      return self._hist.mean()

  def variance(self):
    with self.lock:
      return self._hist.variance()

  def std_dev(self):
    with self.lock:
      return self._hist.std_dev()

  def values(self):
    with self.lock:
      return self._hist.values()

  def percentiles(self, ps):
    with self.lock:
      return self._hist.percentiles(ps)

  def summary(self, percentiles=None):
    with self.lock:
      return self._hist.summary(percentiles)

  def __repr__(self):
    with self.lock:
      return f"Threadsafe{self._hist!r}"
