from dataclasses import dataclass
from enum import Enum


class MetricKind(Enum):
  EWMA = 1
  METER = 2
  HISTOGRAM = 3
  COUNTER = 4
  GAUGE = 5


def to_scope(x):
  if x:
    match x:
      case tuple() if all(isinstance(i, str) for i in x):
        return x
      case list() if all(isinstance(i, str) for i in x):
        return tuple(x)
      case str():
        return (x,)

    raise ValueError(f"Cannot make a scope path from {x}")
  else:
    return ()


def scope_startswith(scope, prefix):
  if not prefix:
    return True

  if len(prefix) > len(scope):
    return False

  return scope[:len(prefix)] == prefix


def scope_lstrip(scope, prefix):
  if scope_startswith(scope, prefix):
    return scope[len(prefix):]
  return scope


def scope_str(scope, joiner='/'):
  return joiner.join(scope)


@dataclass(frozen=True)
class Reading:
  """ Everything a metric reported at one point in time """
  kind: MetricKind
  scope: tuple[str]
  value: dict
  desc: str
  at: float

  @property
  def name(self):
    return self.scope[-1]

  def fields(self):
    for field, val in self.value.items():
      yield self.scope + (field,), val

  def as_lines(self, joiner='/'):
    return [f"{scope_str(s, joiner)} {v}" for s, v in self.fields()]
