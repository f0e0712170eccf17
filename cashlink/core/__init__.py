# cashlink/core/__init__.py
"""
Доменное ядро: тарифы, хранилище записей, машины состояний,
статистика и поиск поблизости.
"""
