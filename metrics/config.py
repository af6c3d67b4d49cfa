from collections import OrderedDict


class ConfigError(ValueError):
  """ A metric was constructed with settings that make its numbers meaningless """


DefaultConfig = {
  # Seconds between EWMA ticks. The 1/5/15 minute alphas are derived from this,
  # so changing it keeps the averaging windows intact
  "tick_interval_s": 5,

  # 1028 elements gives a 99.9% confidence level with a 5% margin of error,
  # assuming a normal distribution
  "reservoir_size": 1028,

  # Forward decay factor for biased histograms. 0.015 heavily biases the
  # sample towards the last 5 minutes of observations
  "decay_alpha": 0.015,

  # Rebase the decaying sample's landmark this often to keep weights finite
  "rescale_interval_s": 60 * 60,

  # Percentiles reported when the caller doesn't ask for specific ones
  "percentiles": OrderedDict((
    ("median", 0.5),
    ("p75", 0.75),
    ("p95", 0.95),
    ("p99", 0.99),
    ("p999", 0.999),
  )),

  # One of ERR, INF, DBG
  "log_level": "INF",
}

CurrentConfig = DefaultConfig


def setting(name, override=None):
  if override is not None:
    return override
  return CurrentConfig[name]


def check_positive(name, value):
  if value is None or value <= 0:
    raise ConfigError(f"{name} must be positive, got {value}")
  return value


def check_alpha(alpha):
  if alpha is None or not 0.0 < alpha < 1.0:
    raise ConfigError(f"alpha must be in (0, 1), got {alpha}")
  return alpha
