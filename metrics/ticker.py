import threading

from .config import check_positive
from .logger import logger


class Ticker:
  """ Calls `fn` every `interval_s` seconds on its own daemon thread until stopped.
      Firings never overlap, and none happen once `stop()` has returned.
  """

  def __init__(self, interval_s, fn, name="ticker", log=None):
    self.interval_s = check_positive("tick interval", interval_s)
    self.fn = fn
    self.name = name
    self.log = log or logger(name)
    self._halt = threading.Event()
    self._lock = threading.Lock()
    self._thread = None
    self._stopped = False

  @property
  def running(self):
    return self._thread is not None and not self._stopped

  @property
  def stopped(self):
    return self._stopped

  def start(self):
    with self._lock:
      if self._thread is not None or self._stopped:
        return False

      self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
      self._thread.start()

    self.log.dbg("started, every {}s", self.interval_s)
    return True

  def _run(self):
    while not self._halt.wait(self.interval_s):
      try:
        self.fn()
      except Exception as e:
        self.log.err("tick failed: {!r}", e)

  def stop(self):
    """ Stop ticking. Only the first call does anything """
    with self._lock:
      if self._stopped:
        return False
      self._stopped = True
      thread = self._thread

    self._halt.set()
    if thread is not None and thread is not threading.current_thread():
      thread.join()

    self.log.dbg("stopped")
    return True
