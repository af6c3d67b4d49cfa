# tests/conftest.py
import os
import random
import sys

# Ensure project root is importable when running from a checkout
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
  sys.path.insert(0, ROOT)

import pytest


class ManualClock:
  """ A clock that only moves when told to """

  def __init__(self, now=1_000_000.0):
    self.now = now

  def __call__(self):
    return self.now

  def advance(self, seconds):
    self.now += seconds
    return self.now


@pytest.fixture
def clock():
  return ManualClock()


@pytest.fixture
def rng():
  return random.Random(1234)


@pytest.fixture
def stopped_meter(clock):
  from metrics.meter import Meter
  from metrics.logger import NullLogger
  m = Meter(clock=clock, autostart=False, log=NullLogger())
  yield m
  m.stop()
