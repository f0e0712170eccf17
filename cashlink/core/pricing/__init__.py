# cashlink/core/pricing/__init__.py
"""
Расчёт комиссий и тарифов.
"""

from cashlink.core.pricing.service import FareQuote, FeeQuote, RateResolver, quantize_money

__all__ = ["FareQuote", "FeeQuote", "RateResolver", "quantize_money"]
