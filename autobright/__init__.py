"""Automatic screen brightness from an ambient light sensor, aware of user idleness.

Provides promises, signals, a logger, a pressure filter, bus proxy
abstractions, brightness/sensor/idle-monitor proxies and the service
that ties them together.
"""

__version__ = "0.1.0"