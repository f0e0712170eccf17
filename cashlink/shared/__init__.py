# cashlink/shared/__init__.py
"""
Общий код между доменом и внешними потребителями.

Модули:
- events: схемы событий RabbitMQ
- models: общие ответы API
"""

__all__: list[str] = []
