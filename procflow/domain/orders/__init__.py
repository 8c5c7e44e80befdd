"""Order instances executing process templates.

The lifecycle service lives in procflow.domain.orders.service.
"""

from procflow.domain.orders.models import OrderInstance, generate_order_number

__all__ = ["OrderInstance", "generate_order_number"]
