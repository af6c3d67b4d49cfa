from enum import Enum
from collections import namedtuple
import time
import sys

from .config import setting


class ObsLevel(Enum):
  ERR = 1
  INF = 2
  DBG = 3


LogEntry = namedtuple('LogEntry', ('level', 'at', 'tag', 'text', 'values'))


class BaseLogger:
  def __init__(self, tag="", level=None):
    self.tag = tag
    level = level or ObsLevel[setting("log_level")]
    self._level_val = level.value

  def handle(self, level, at, text, values):
    pass

  def dbg(self, msg, *vals):
    if self._level_val >= ObsLevel.DBG.value:
      self.handle(ObsLevel.DBG, time.time(), msg, vals)

  def inf(self, msg, *vals):
    if self._level_val >= ObsLevel.INF.value:
      self.handle(ObsLevel.INF, time.time(), msg, vals)

  def err(self, msg, *vals):
    if self._level_val >= ObsLevel.ERR.value:
      self.handle(ObsLevel.ERR, time.time(), msg, vals)


class NullLogger(BaseLogger):
  """ Does nothing successfully """
  pass


class EntryLogger(BaseLogger):
  """ Keeps every entry in memory. Mostly useful for tests """

  def __init__(self, tag="", level=ObsLevel.DBG):
    super().__init__(tag=tag, level=level)
    self.entries = []

  def handle(self, level, at, text, values):
    self.entries.append(LogEntry(level, at, self.tag, text, values))

  def texts(self, level=None):
    return [
      e.text.format(*e.values) for e in self.entries if level is None or e.level == level
    ]


class TextLogger(BaseLogger):

  FORMAT = "{level} {hh:02d}:{mm:02d}:{ss:02d}{tag} {text}\n"

  def __init__(self, writeable=None, tag="", level=None):
    # None means whatever sys.stderr is at write time
    self.writeable = writeable
    super().__init__(tag=tag, level=level)

  def handle(self, level, at, text, values):
    message_text = text.format(*values)
    ts = time.localtime(at)
    out = self.writeable or sys.stderr
    out.write(self.FORMAT.format(
      level=level.name,
      hh=ts.tm_hour, mm=ts.tm_min, ss=ts.tm_sec,
      tag=f" [{self.tag}]" if self.tag else "",
      text=message_text
    ))


def logger(tag=""):
  return TextLogger(tag=tag)
