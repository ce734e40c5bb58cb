"""
Tests for QuoteCalculator.
"""
import pytest
from decimal import Decimal

from models import CategoriaPresupuesto, TipoRubro
from services.calculation import QuoteCalculator


def _rubro(tipo, cantidad, valor_unitario):
    return {'tipo': tipo, 'cantidad': cantidad, 'valor_unitario': valor_unitario}


@pytest.mark.unit
def test_total_rubro():
    assert QuoteCalculator.total_rubro(40, 50000) == Decimal('2000000.00')
    assert QuoteCalculator.total_rubro('2.5', '1000.333') == Decimal('2500.83')
    assert QuoteCalculator.total_rubro(None, 1000) == Decimal('0.00')


@pytest.mark.unit
def test_subtotal_item_is_sum_of_rubros():
    rubros = [
        _rubro('mo_propia', 40, 50000),
        _rubro('materiales', 3, 100000),
    ]
    assert QuoteCalculator.subtotal_item(rubros) == Decimal('2300000.00')
    assert QuoteCalculator.subtotal_item([]) == Decimal('0.00')


@pytest.mark.unit
def test_costo_total():
    items = [{'subtotal': Decimal('2000000')}, {'subtotal': '500000'}]
    assert QuoteCalculator.costo_total(items) == Decimal('2500000.00')


@pytest.mark.unit
def test_margen_porcentaje():
    assert QuoteCalculator.margen_porcentaje(3000000, 2500000) == Decimal('16.7')
    assert QuoteCalculator.margen_porcentaje(1000000, 1500000) == Decimal('-50.0')
    assert QuoteCalculator.margen_porcentaje(0, 1000) is None


@pytest.mark.unit
def test_horas_estimadas_counts_only_labor():
    items = [
        {'rubros': [_rubro('mo_propia', 40, 50000), _rubro('software', 2, 100000)]},
        {'rubros': [_rubro('mo_terceros', 12, 80000)]},
    ]
    assert QuoteCalculator.horas_estimadas(items) == Decimal('52')


@pytest.mark.unit
@pytest.mark.parametrize('tipo,categoria', [
    ('mo_propia', CategoriaPresupuesto.HORAS),
    ('mo_terceros', CategoriaPresupuesto.SUBCONTRATACION),
    ('materiales', CategoriaPresupuesto.MATERIALES),
    ('viaticos', CategoriaPresupuesto.TRANSPORTE),
    ('software', CategoriaPresupuesto.SERVICIOS_PROFESIONALES),
    (TipoRubro.SERVICIOS_PROF, CategoriaPresupuesto.SERVICIOS_PROFESIONALES),
    (None, CategoriaPresupuesto.GENERAL),
    ('otro', CategoriaPresupuesto.GENERAL),
])
def test_categoria_presupuesto(tipo, categoria):
    assert QuoteCalculator.categoria_presupuesto(tipo) is categoria


@pytest.mark.unit
def test_categoria_item_uses_first_rubro():
    item = {'rubros': [_rubro('materiales', 1, 10), _rubro('mo_propia', 1, 10)]}
    assert QuoteCalculator.categoria_item(item) is CategoriaPresupuesto.MATERIALES
    assert QuoteCalculator.categoria_item({'rubros': []}) is CategoriaPresupuesto.GENERAL
