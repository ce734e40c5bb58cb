"""
Tests for the Colombian tax engine (IVA, retefuente, reteICA, reteIVA).
"""
import pytest
from decimal import Decimal

from models import TriState
from services.fiscal import (
    FiscalConstants,
    PARAMETROS_DEFAULT,
    PerfilCliente,
    PerfilVendedor,
    calcular_desglose,
    campos_fiscales_faltantes,
    margen_real,
    perfil_cliente_desde,
    perfil_fiscal_completo,
    perfil_vendedor_desde,
    precio_sugerido,
    resumen_fiscal,
    seguridad_social,
    tarifa_reteica,
)


VENDEDOR_NATURAL = PerfilVendedor(
    tipo_persona='natural',
    regimen_tributario='ordinario',
    es_declarante=True,
    responsable_iva=True,
    autorretenedor=False,
    tarifa_ica=Decimal('9.66'),
)

CLIENTE_JURIDICA = PerfilCliente(
    tipo_persona='juridica',
    regimen_tributario='ordinario',
    gran_contribuyente=False,
    agente_retenedor=True,
)


@pytest.mark.unit
def test_desglose_persona_natural_declarante():
    desglose = calcular_desglose(Decimal('10000000'), VENDEDOR_NATURAL, CLIENTE_JURIDICA)

    assert desglose.iva == Decimal('1900000')
    assert desglose.total_cliente_paga == Decimal('11900000')
    assert desglose.retefuente == Decimal('1100000')
    assert desglose.reteica == Decimal('96600')
    assert desglose.reteiva == Decimal('285000')
    assert desglose.total_retenciones == Decimal('1481600')
    assert desglose.neto_recibido == Decimal('10418400')
    assert desglose.usa_perfil_por_defecto is False


@pytest.mark.unit
def test_desglose_without_profiles_uses_defaults():
    desglose = calcular_desglose(10000000)

    assert desglose.neto_recibido == Decimal('10418400')
    assert desglose.usa_perfil_por_defecto is True


@pytest.mark.unit
@pytest.mark.parametrize('valor', [0, -1, Decimal('-500000'), None])
def test_desglose_non_positive_value_returns_none(valor):
    assert calcular_desglose(valor, VENDEDOR_NATURAL, CLIENTE_JURIDICA) is None


@pytest.mark.unit
def test_unset_seller_flag_falls_back_to_default_profile():
    vendedor = PerfilVendedor(
        tipo_persona='juridica',
        regimen_tributario='ordinario',
        es_declarante=TriState.UNSET,
        responsable_iva=TriState.YES,
        autorretenedor=TriState.NO,
    )
    desglose = calcular_desglose(10000000, vendedor, CLIENTE_JURIDICA)

    # El perfil por defecto es persona natural: honorarios al 11%
    assert desglose.tarifa_retefuente == Decimal('11')
    assert desglose.usa_perfil_por_defecto is True


@pytest.mark.unit
def test_unset_client_flag_falls_back_to_conservative_profile():
    cliente = PerfilCliente(
        tipo_persona='natural',
        regimen_tributario='ordinario',
        gran_contribuyente=TriState.NO,
        agente_retenedor=TriState.UNSET,
    )
    desglose = calcular_desglose(10000000, VENDEDOR_NATURAL, cliente)

    assert desglose.aplica_retenciones is True
    assert desglose.usa_perfil_por_defecto is True


@pytest.mark.unit
def test_no_declarante_withholds_ten_percent():
    vendedor = PerfilVendedor(tipo_persona='natural', regimen_tributario='ordinario',
                              es_declarante=False, responsable_iva=True, autorretenedor=False)
    desglose = calcular_desglose(10000000, vendedor, CLIENTE_JURIDICA)
    assert desglose.retefuente == Decimal('1000000')


@pytest.mark.unit
def test_persona_juridica_withholds_services_rate():
    vendedor = PerfilVendedor(tipo_persona='juridica', regimen_tributario='ordinario',
                              es_declarante=True, responsable_iva=True, autorretenedor=False)
    desglose = calcular_desglose(10000000, vendedor, CLIENTE_JURIDICA)
    assert desglose.tarifa_retefuente == Decimal('4')
    assert desglose.retefuente == Decimal('400000')


@pytest.mark.unit
def test_no_retefuente_below_minimum_base():
    desglose = calcular_desglose(1000000, VENDEDOR_NATURAL, CLIENTE_JURIDICA)

    assert PARAMETROS_DEFAULT.base_minima_honorarios == Decimal('1344573')
    assert desglose.retefuente == Decimal('0')
    assert desglose.reteica == Decimal('9660')
    assert desglose.reteiva == Decimal('28500')


@pytest.mark.unit
def test_regimen_simple_seller_has_no_withholdings():
    vendedor = PerfilVendedor(tipo_persona='natural', regimen_tributario='simple',
                              es_declarante=True, responsable_iva=True, autorretenedor=False)
    desglose = calcular_desglose(10000000, vendedor, CLIENTE_JURIDICA)

    assert desglose.aplica_retenciones is False
    assert desglose.total_retenciones == Decimal('0')
    assert desglose.neto_recibido == desglose.total_cliente_paga


@pytest.mark.unit
def test_regimen_simple_client_does_not_withhold():
    cliente = PerfilCliente(tipo_persona='juridica', regimen_tributario='simple',
                            gran_contribuyente=False, agente_retenedor=True)
    desglose = calcular_desglose(10000000, VENDEDOR_NATURAL, cliente)
    assert desglose.total_retenciones == Decimal('0')


@pytest.mark.unit
def test_self_withholding_seller_has_no_withholdings():
    vendedor = PerfilVendedor(tipo_persona='juridica', regimen_tributario='ordinario',
                              es_declarante=True, responsable_iva=True, autorretenedor=True)
    desglose = calcular_desglose(10000000, vendedor, CLIENTE_JURIDICA)
    assert desglose.aplica_retenciones is False
    assert desglose.neto_recibido == Decimal('11900000')


@pytest.mark.unit
def test_client_without_withholding_duty():
    cliente = PerfilCliente(tipo_persona='natural', regimen_tributario='ordinario',
                            gran_contribuyente=False, agente_retenedor=False)
    desglose = calcular_desglose(10000000, VENDEDOR_NATURAL, cliente)
    assert desglose.aplica_retenciones is False
    assert desglose.neto_recibido == Decimal('11900000')


@pytest.mark.unit
def test_gran_contribuyente_withholds_even_if_not_agent():
    cliente = PerfilCliente(tipo_persona='juridica', regimen_tributario='ordinario',
                            gran_contribuyente=True, agente_retenedor=False)
    desglose = calcular_desglose(10000000, VENDEDOR_NATURAL, cliente)
    assert desglose.aplica_retenciones is True


@pytest.mark.unit
def test_seller_not_responsible_for_iva():
    vendedor = PerfilVendedor(tipo_persona='natural', regimen_tributario='ordinario',
                              es_declarante=True, responsable_iva=False, autorretenedor=False)
    desglose = calcular_desglose(10000000, vendedor, CLIENTE_JURIDICA)

    assert desglose.iva == Decimal('0')
    assert desglose.reteiva == Decimal('0')
    assert desglose.neto_recibido == Decimal('8803400')


@pytest.mark.unit
def test_reteica_rate_resolution():
    declarada = PerfilVendedor(tarifa_ica=Decimal('11.04'), ciudad_ica='Cali')
    por_ciudad = PerfilVendedor(tarifa_ica=None, ciudad_ica='Santiago de Cali, Valle')
    sin_tabla = PerfilVendedor(tarifa_ica=None, ciudad_ica='Pasto')

    assert tarifa_reteica(declarada) == Decimal('11.04')
    assert tarifa_reteica(PerfilVendedor(tarifa_ica=None, ciudad_ica='Cali')) == Decimal('10')
    assert tarifa_reteica(sin_tabla) == PARAMETROS_DEFAULT.reteica_default
    # Solo se reconoce el nombre normalizado de la ciudad
    assert tarifa_reteica(por_ciudad) == PARAMETROS_DEFAULT.reteica_default


@pytest.mark.unit
def test_city_names_are_normalized():
    assert FiscalConstants.tarifa_ica_ciudad('Medellín') == Decimal('9.66')
    assert FiscalConstants.tarifa_ica_ciudad('  BOGOTÁ D.C. ') == Decimal('9.66')
    assert FiscalConstants.tarifa_ica_ciudad(None) is None


@pytest.mark.unit
def test_desglose_to_dict_uses_whole_pesos():
    data = calcular_desglose(10000000, VENDEDOR_NATURAL, CLIENTE_JURIDICA).to_dict()
    assert data['neto_recibido'] == 10418400
    assert isinstance(data['neto_recibido'], int)
    assert data['tarifa_reteica'] == pytest.approx(9.66)


@pytest.mark.unit
def test_seguridad_social():
    assert seguridad_social(10000000) == Decimal('1140000')


@pytest.mark.unit
def test_resumen_fiscal_healthy_margin():
    resumen = resumen_fiscal(10000000, 5000000, VENDEDOR_NATURAL, CLIENTE_JURIDICA)

    assert resumen.seguridad_social == Decimal('1140000')
    assert resumen.ganancia_real == Decimal('4278400')
    assert resumen.margen_real_neto_pct == Decimal('42.8')
    assert [a['tipo'] for a in resumen.alertas] == ['info']
    assert resumen.es_estimado is False


@pytest.mark.unit
def test_resumen_fiscal_losing_money():
    resumen = resumen_fiscal(10000000, 10000000, VENDEDOR_NATURAL, CLIENTE_JURIDICA)
    assert resumen.ganancia_real == Decimal('-721600')
    assert resumen.alertas[0]['tipo'] == 'danger'


@pytest.mark.unit
def test_resumen_fiscal_low_margin_warning():
    resumen = resumen_fiscal(10000000, 8000000, VENDEDOR_NATURAL, CLIENTE_JURIDICA)

    assert resumen.margen_real_neto_pct == Decimal('12.8')
    warning = resumen.alertas[0]
    assert warning['tipo'] == 'warning'
    assert 'margen del 20%' in warning['mensaje']
    assert '12.8%' in warning['mensaje']


@pytest.mark.unit
def test_resumen_fiscal_provision_warning_for_natural_client():
    cliente = PerfilCliente(tipo_persona='natural', regimen_tributario='ordinario',
                            gran_contribuyente=False, agente_retenedor=False)
    resumen = resumen_fiscal(10000000, 0, VENDEDOR_NATURAL, cliente)

    provision = [a for a in resumen.alertas if 'NO es toda tuya' in a['mensaje']]
    assert len(provision) == 1
    assert '$1.100.000' in provision[0]['detalle']


@pytest.mark.unit
def test_resumen_fiscal_non_positive_value():
    assert resumen_fiscal(0, 100) is None


@pytest.mark.unit
def test_resumen_to_dict_carries_disclaimer():
    data = resumen_fiscal(10000000).to_dict()
    assert data['disclaimer'] == FiscalConstants.DISCLAIMER
    assert data['es_estimado'] is True


@pytest.mark.unit
def test_precio_sugerido():
    assert precio_sugerido(1000000, 20) == Decimal('1250000')
    assert precio_sugerido(1000000, 0) == Decimal('1000000')
    assert precio_sugerido(1000000, 100) == Decimal('10000000')


@pytest.mark.unit
def test_margen_real():
    assert margen_real(1250000, 1000000) == Decimal('20.0')
    assert margen_real(0, 1000000) == Decimal('0')


@pytest.mark.integration
def test_missing_fiscal_fields(empresa_incompleta, empresa_completa):
    assert campos_fiscales_faltantes(empresa_incompleta) == [
        'numero_documento',
        'tipo_documento',
        'tipo_persona',
        'regimen_tributario',
        'gran_contribuyente',
        'agente_retenedor',
    ]
    assert perfil_fiscal_completo(empresa_completa) is True


@pytest.mark.integration
def test_profiles_from_models(perfil_fiscal, empresa_completa):
    vendedor = perfil_vendedor_desde(perfil_fiscal)
    cliente = perfil_cliente_desde(empresa_completa)

    desglose = calcular_desglose(10000000, vendedor, cliente)
    assert desglose.usa_perfil_por_defecto is False
    assert desglose.tarifa_reteica == Decimal('9.66')
    assert desglose.neto_recibido == Decimal('10418400')
    assert perfil_cliente_desde(None) is None


@pytest.mark.integration
def test_fiscal_service_simulation(ctx, perfil_fiscal, empresa_completa):
    from services import FiscalService

    resultado = FiscalService().simular(ctx, 10000000, contraparte=empresa_completa)
    assert resultado.success
    assert resultado.data['neto_recibido'] == 10418400
    assert resultado.data['usa_perfil_por_defecto'] is False

    assert FiscalService().simular(ctx, 0).data is None
