from threading import Lock


class Counter:
  """ A value that is incremented and decremented. Threadsafe """

  __slots__ = ('_count', '_lock')

  def __init__(self, value=0):
    self._count = value
    self._lock = Lock()

  def inc(self, amt=1):
    with self._lock:
      self._count += amt

  def dec(self, amt=1):
    with self._lock:
      self._count -= amt

  def count(self):
    with self._lock:
      return self._count

  def clear(self):
    with self._lock:
      self._count = 0

  def __repr__(self):
    return f"Counter({self.count()})"


class Gauge:
  """ The last value set, or whatever `value_fn` returns when read """

  __slots__ = ('_value', 'value_fn', '_lock')

  def __init__(self, value=0.0, value_fn=None):
    self._value = value
    self.value_fn = value_fn
    self._lock = Lock()

  def set(self, value):
    assert self.value_fn is None, "Cannot set a gauge with a value_fn"
    with self._lock:
      self._value = value

  def set_fn(self, value_fn):
    """ Have this gauge call `value_fn` for its value every time it is read """
    self.value_fn = value_fn

  def value(self):
    if self.value_fn:
      return self.value_fn()
    with self._lock:
      return self._value

  def __repr__(self):
    return f"Gauge({self.value()})"
