# lsm_options/base.py
from enum import Enum, IntEnum
from abc import ABC, abstractmethod

import numpy as np

from .exceptions import ConfigurationError


class OPTION_TYPE(Enum):
    CALL_OPTION = 'call'
    PUT_OPTION = 'put'


class ProjectState(IntEnum):
    """Operating state of a capital project on one simulated path."""
    UNINVESTED = 0
    OPERATING = 1
    SUSPENDED = 2
    ABANDONED = 3


STATE_LABELS = [s.name.lower() for s in ProjectState]


def normalize_option_type(option_type):
    """
    Accepts many common option_type forms and returns 'call' or 'put':
     - 'call', 'put' (case-insensitive)
     - 'Call Option', 'Put Option'
     - OPTION_TYPE enum values
    """
    if isinstance(option_type, OPTION_TYPE):
        opt = option_type.value
    elif isinstance(option_type, str):
        opt = option_type.strip().lower()
    else:
        opt = str(option_type).lower()

    if opt.startswith('call'):
        return 'call'
    elif opt.startswith('put'):
        return 'put'
    raise ConfigurationError(f"Unsupported option_type: {option_type}")


def step_discount_factor(rf, dt):
    """Per-step discount factor exp(-rf*dt)."""
    return float(np.exp(-float(rf) * float(dt)))


class OptionPricingModel(ABC):
    """Abstract class defining interface for option pricing models."""

    def calculate_option_price(self, option_type):
        opt = normalize_option_type(option_type)
        if opt == 'call':
            return self._calculate_call_option_price()
        return self._calculate_put_option_price()

    @abstractmethod
    def _calculate_call_option_price(self):
        """Calculates option price for call option."""
        raise NotImplementedError()

    @abstractmethod
    def _calculate_put_option_price(self):
        """Calculates option price for put option."""
        raise NotImplementedError()
