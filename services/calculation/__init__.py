from services.calculation.quote_calculator import QuoteCalculator, QuoteConstants

__all__ = ['QuoteCalculator', 'QuoteConstants']
