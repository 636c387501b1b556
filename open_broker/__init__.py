"""
Open Broker - Open Service Broker API compliance layer

Exposes a management API that conforms to the Open Service Broker protocol
(catalog, provisioning, binding and last-operation polling) on top of
caller-supplied broker operation implementations.
"""

__version__ = "0.1.0"
__author__ = "OpenBroker"
