"""
Quote Calculator - Agregación de Items y Rubros
===============================================

Centraliza los cálculos de una cotización detallada:
- Total de un rubro (cantidad × valor unitario)
- Subtotal de un item (suma de sus rubros)
- Costo total de la cotización (suma de subtotales)
- Margen porcentual sobre el valor de venta
- Horas estimadas (rubros de mano de obra)
- Categoría de presupuesto de proyecto que corresponde a cada rubro

Uso:
    from services.calculation import QuoteCalculator

    subtotal = QuoteCalculator.subtotal_item(item.rubros)
    margen = QuoteCalculator.margen_porcentaje(valor_venta, costo)
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional, Union

from models.enums import TipoRubro, CategoriaPresupuesto


class QuoteConstants:
    """Constantes de cálculo de cotizaciones."""

    CURRENCY_PRECISION = Decimal('0.01')

    MARGIN_PRECISION = Decimal('0.1')

    PERCENTAGE_DIVISOR = Decimal('100')

    # Rubros cuya cantidad se expresa en horas de trabajo
    TIPOS_MANO_OBRA = (TipoRubro.MO_PROPIA.value, TipoRubro.MO_TERCEROS.value)

    CATEGORIA_POR_TIPO = {
        TipoRubro.MO_PROPIA.value: CategoriaPresupuesto.HORAS,
        TipoRubro.MO_TERCEROS.value: CategoriaPresupuesto.SUBCONTRATACION,
        TipoRubro.MATERIALES.value: CategoriaPresupuesto.MATERIALES,
        TipoRubro.VIATICOS.value: CategoriaPresupuesto.TRANSPORTE,
        TipoRubro.SOFTWARE.value: CategoriaPresupuesto.SERVICIOS_PROFESIONALES,
        TipoRubro.SERVICIOS_PROF.value: CategoriaPresupuesto.SERVICIOS_PROFESIONALES,
    }


class QuoteCalculator:
    """
    Calculadora de cotizaciones.

    Los métodos aceptan objetos con atributos (modelos) o diccionarios.
    """

    @staticmethod
    def _to_decimal(value: Union[Decimal, float, int, str, None]) -> Decimal:
        if isinstance(value, Decimal):
            return value
        if value is None:
            return Decimal('0')
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            return Decimal('0')

    @staticmethod
    def _round_currency(value: Decimal) -> Decimal:
        return value.quantize(QuoteConstants.CURRENCY_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def _campo(obj, nombre):
        if isinstance(obj, dict):
            return obj.get(nombre)
        return getattr(obj, nombre, None)

    @staticmethod
    def total_rubro(cantidad, valor_unitario) -> Decimal:
        """
        Calcula el total de un rubro.

        Args:
            cantidad: Cantidad del rubro
            valor_unitario: Precio por unidad

        Returns:
            cantidad × valor_unitario, redondeado a 2 decimales
        """
        return QuoteCalculator._round_currency(
            QuoteCalculator._to_decimal(cantidad) * QuoteCalculator._to_decimal(valor_unitario)
        )

    @staticmethod
    def subtotal_item(rubros: Iterable) -> Decimal:
        """Suma en vivo de los totales de los rubros; 0 si no hay rubros."""
        total = Decimal('0')
        for rubro in rubros or []:
            total += QuoteCalculator.total_rubro(
                QuoteCalculator._campo(rubro, 'cantidad'),
                QuoteCalculator._campo(rubro, 'valor_unitario'),
            )
        return QuoteCalculator._round_currency(total)

    @staticmethod
    def costo_total(items: Iterable) -> Decimal:
        total = Decimal('0')
        for item in items or []:
            total += QuoteCalculator._to_decimal(QuoteCalculator._campo(item, 'subtotal'))
        return QuoteCalculator._round_currency(total)

    @staticmethod
    def margen_porcentaje(valor_venta, costo) -> Optional[Decimal]:
        """
        Margen sobre el valor de venta.

        Returns:
            (venta - costo) / venta × 100 con un decimal, o None si la venta
            no es positiva
        """
        venta = QuoteCalculator._to_decimal(valor_venta)
        if venta <= 0:
            return None
        margen = (venta - QuoteCalculator._to_decimal(costo)) / venta * QuoteConstants.PERCENTAGE_DIVISOR
        return margen.quantize(QuoteConstants.MARGIN_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def horas_estimadas(items: Iterable) -> Decimal:
        """Suma de cantidades de los rubros de mano de obra de todos los items."""
        horas = Decimal('0')
        for item in items or []:
            for rubro in QuoteCalculator._campo(item, 'rubros') or []:
                if QuoteCalculator._campo(rubro, 'tipo') in QuoteConstants.TIPOS_MANO_OBRA:
                    horas += QuoteCalculator._to_decimal(QuoteCalculator._campo(rubro, 'cantidad'))
        return horas

    @staticmethod
    def categoria_presupuesto(tipo_rubro: Optional[str]) -> CategoriaPresupuesto:
        """Categoría de línea de presupuesto de proyecto para un tipo de rubro."""
        if tipo_rubro is None:
            return CategoriaPresupuesto.GENERAL
        tipo = tipo_rubro.value if isinstance(tipo_rubro, TipoRubro) else tipo_rubro
        return QuoteConstants.CATEGORIA_POR_TIPO.get(tipo, CategoriaPresupuesto.GENERAL)

    @staticmethod
    def categoria_item(item) -> CategoriaPresupuesto:
        """Categoría del item según su primer rubro."""
        rubros = list(QuoteCalculator._campo(item, 'rubros') or [])
        if not rubros:
            return CategoriaPresupuesto.GENERAL
        return QuoteCalculator.categoria_presupuesto(QuoteCalculator._campo(rubros[0], 'tipo'))
