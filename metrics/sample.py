"""
Bounded reservoirs of observations feeding a Histogram.

None of these are threadsafe. A sample has exactly one writer, or every call
is made while holding one lock (see `ThreadsafeHistogram`).
"""
from itertools import count as counter
import heapq
import math
import random
import time

from .config import setting, check_positive, check_alpha


# Largest exponent a decay weight may reach before the landmark is moved.
# e^600 divided by the smallest u random() yields is still a finite float.
MAX_EXPONENT = 600.0


class Sample:

  def update(self, value):
    raise NotImplementedError

  def values(self):
    """ A snapshot of the retained values, in no particular order """
    raise NotImplementedError

  def clear(self):
    raise NotImplementedError

  def __len__(self):
    raise NotImplementedError

  def __repr__(self):
    return f"{self.__class__.__name__}(size={self.size}, len={len(self)})"


class UniformSample(Sample):
  """ Vitter's Algorithm R: every item seen so far is retained with probability
      size / count, however long the stream.
  """

  def __init__(self, size=None, rng=None):
    self.size = int(check_positive("reservoir size", setting("reservoir_size", size)))
    self.rng = rng or random.Random()
    self.clear()

  def clear(self):
    self._values = []
    self.count = 0

  def update(self, value):
    self.count += 1
    if self.count <= self.size:
      self._values.append(value)
    else:
      r = self.rng.randrange(self.count)
      if r < self.size:
        self._values[r] = value

  def values(self):
    return list(self._values)

  def __len__(self):
    return len(self._values)


class ExponentiallyDecayingSample(Sample):
  """ Forward-decaying priority sampling.

      An item arriving at `t` gets priority e^(alpha * (t - landmark)) / u for a
      uniform u in (0, 1). The `size` highest priorities are kept in a min-heap, so
      recent items are strongly preferred. Weights grow without bound, so the
      landmark is moved forward every `rescale_interval_s` seconds, or sooner
      when alpha is large enough that a weight would overflow before then.

      http://dimacs.rutgers.edu/~graham/pubs/papers/fwddecay.pdf
  """

  def __init__(self, size=None, alpha=None, rescale_interval_s=None, clock=time.time, rng=None):
    self.size = int(check_positive("reservoir size", setting("reservoir_size", size)))
    self.alpha = check_alpha(setting("decay_alpha", alpha))
    self.rescale_interval_s = check_positive(
      "rescale interval", setting("rescale_interval_s", rescale_interval_s)
    )
    # Seconds until alpha * (t - landmark) reaches MAX_EXPONENT
    self.effective_interval_s = min(self.rescale_interval_s, MAX_EXPONENT / self.alpha)
    self.clock = clock
    self.rng = rng or random.Random()
    self.clear()

  def clear(self):
    # Entries are (priority, seq, value). seq breaks priority ties so values
    # themselves are never compared.
    self._heap = []
    self._seq = counter()
    self.count = 0
    self.landmark = self.clock()
    self.next_rescale_at = self.landmark + self.effective_interval_s

  def weight(self, t):
    return math.exp(self.alpha * (t - self.landmark))

  def _uniform(self):
    u = self.rng.random()
    while u == 0.0:
      u = self.rng.random()
    return u

  def update(self, value, timestamp=None):
    now = self.clock()
    t = now if timestamp is None else timestamp
    if now >= self.next_rescale_at or self.alpha * (t - self.landmark) > MAX_EXPONENT:
      self.rescale(max(now, t))

    priority = self.weight(t) / self._uniform()
    entry = (priority, next(self._seq), value)

    self.count += 1
    if len(self._heap) < self.size:
      heapq.heappush(self._heap, entry)
    elif priority > self._heap[0][0]:
      heapq.heapreplace(self._heap, entry)

  def rescale(self, now=None):
    """ Rebase every priority on a landmark of `now` """
    now = self.clock() if now is None else now
    factor = math.exp(-self.alpha * (now - self.landmark))

    # Underflow can collapse priorities to 0.0, leaving seq to order them
    self._heap = [(p * factor, seq, v) for p, seq, v in self._heap]
    heapq.heapify(self._heap)
    self.landmark = now
    self.next_rescale_at = now + self.effective_interval_s

  def items(self):
    """ (priority, value) pairs, lowest priority first """
    return [(p, v) for p, _, v in sorted(self._heap)]

  def values(self):
    return [v for _, _, v in self._heap]

  def __len__(self):
    return len(self._heap)
