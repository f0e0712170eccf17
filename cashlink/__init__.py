# cashlink/__init__.py
"""
CashLink: движок двусторонних запросов и расчётов
между клиентами и поставщиками (денежные агенты, водители).
"""

__version__ = "1.0.0"
