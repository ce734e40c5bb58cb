"""
Tests for WinService: opportunity win and project creation.
"""
import pytest
from decimal import Decimal
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Cotizacion, Empresa, Oportunidad, Proyecto
from services import QuoteService, WinService


@pytest.fixture
def service():
    return WinService()


@pytest.fixture
def quotes():
    return QuoteService()


FISCAL_COMPLETO = {
    'numero_documento': '901555777',
    'tipo_documento': 'NIT',
    'tipo_persona': 'juridica',
    'regimen_tributario': 'ordinario',
    'gran_contribuyente': False,
    'agente_retenedor': True,
}


def _cotizacion_detallada_aceptable(quotes, ctx, oportunidad_id):
    cotizacion = quotes.crear_detallada(ctx, oportunidad_id, descripcion="Tablero BI").data
    quotes.agregar_item(ctx, cotizacion['id'], "Consultoría", rubros=[
        {'tipo': 'mo_propia', 'cantidad': 40, 'valor_unitario': 50000},
    ])
    quotes.agregar_item(ctx, cotizacion['id'], "Materiales", rubros=[
        {'tipo': 'materiales', 'cantidad': 1, 'valor_unitario': 500000},
    ])
    quotes.actualizar(ctx, cotizacion['id'], {'valor_total': 3000000})
    return cotizacion


@pytest.mark.integration
def test_missing_fiscal_data_returns_signal_without_changes(service, ctx, oportunidad_incompleta):
    resultado = service.ganar(ctx, oportunidad_incompleta.id)

    assert not resultado.success
    assert resultado.needs_fiscal
    assert resultado.code == 'NEEDS_FISCAL_DATA'
    assert 'numero_documento' in resultado.details['missing_fields']
    assert resultado.details['contraparte']['tipo'] == 'empresa'

    db.session.refresh(oportunidad_incompleta)
    assert oportunidad_incompleta.etapa == 'negociacion'
    assert Proyecto.query.count() == 0


@pytest.mark.integration
def test_partial_patch_is_saved_but_still_signals(service, ctx, oportunidad_incompleta, empresa_incompleta):
    resultado = service.ganar(ctx, oportunidad_incompleta.id, fiscal_patch={
        'numero_documento': '901555777',
        'tipo_documento': 'NIT',
    })

    assert resultado.needs_fiscal
    assert resultado.details['missing_fields'] == [
        'tipo_persona', 'regimen_tributario', 'gran_contribuyente', 'agente_retenedor',
    ]
    db.session.refresh(empresa_incompleta)
    assert empresa_incompleta.numero_documento == '901555777'


@pytest.mark.integration
def test_fiscal_patch_completes_profile_and_wins(service, ctx, oportunidad_incompleta, empresa_incompleta):
    resultado = service.ganar(ctx, oportunidad_incompleta.id, fiscal_patch=FISCAL_COMPLETO)

    assert resultado.success, resultado.error
    empresa = db.session.get(Empresa, empresa_incompleta.id)
    assert empresa.agente_retenedor == 'yes'
    assert empresa.gran_contribuyente == 'no'
    assert resultado.data['oportunidad']['etapa'] == 'ganada'
    assert resultado.data['oportunidad']['probabilidad'] == 100


@pytest.mark.integration
def test_invalid_fiscal_patch_is_rejected(service, ctx, oportunidad_incompleta):
    resultado = service.ganar(ctx, oportunidad_incompleta.id, fiscal_patch={'tipo_persona': 'empresa'})
    assert resultado.code == 'VALIDATION_ERROR'

    resultado = service.ganar(ctx, oportunidad_incompleta.id, fiscal_patch={'nit': '123'})
    assert resultado.code == 'VALIDATION_ERROR'


@pytest.mark.integration
def test_project_from_accepted_detailed_quote(service, quotes, ctx, oportunidad):
    cotizacion = _cotizacion_detallada_aceptable(quotes, ctx, oportunidad.id)
    quotes.enviar(ctx, cotizacion['id'])
    aceptada = quotes.aceptar(ctx, cotizacion['id'])
    assert aceptada.success

    proyecto = Proyecto.query.filter_by(oportunidad_id=oportunidad.id).one()
    assert proyecto.cotizacion_id == cotizacion['id']
    assert proyecto.presupuesto_total == Decimal('3000000')
    assert proyecto.horas_estimadas == Decimal('40')
    assert proyecto.estado == 'en_ejecucion'
    assert proyecto.nombre == oportunidad.descripcion
    assert [(r.nombre, r.tipo, r.presupuestado) for r in proyecto.rubros] == [
        ('Consultoría', 'horas', Decimal('2000000')),
        ('Materiales', 'materiales', Decimal('500000')),
    ]


@pytest.mark.integration
def test_flash_quote_gives_single_general_line(service, quotes, ctx, oportunidad):
    flash = quotes.crear_flash(ctx, oportunidad.id, 7000000).data

    resultado = service.ganar(ctx, oportunidad.id)
    proyecto = resultado.data['proyecto']
    assert proyecto['cotizacion_id'] == flash['id']
    assert proyecto['presupuesto_total'] == 7000000.0
    assert proyecto['horas_estimadas'] is None
    assert proyecto['rubros'] == [{
        'id': proyecto['rubros'][0]['id'],
        'nombre': 'Presupuesto general',
        'tipo': 'general',
        'presupuestado': 7000000.0,
    }]


@pytest.mark.integration
def test_without_quotes_uses_estimated_value(service, ctx, oportunidad):
    resultado = service.ganar(ctx, oportunidad.id)

    proyecto = resultado.data['proyecto']
    assert proyecto['cotizacion_id'] is None
    assert proyecto['presupuesto_total'] == 10000000.0


def _cotizacion(oportunidad, consecutivo, estado, valor):
    cotizacion = Cotizacion(
        workspace_id=oportunidad.workspace_id,
        oportunidad_id=oportunidad.id,
        consecutivo=consecutivo,
        estado=estado,
        valor_total=valor,
    )
    db.session.add(cotizacion)
    db.session.commit()
    return cotizacion


@pytest.mark.integration
def test_accepted_quote_governs_over_newer_ones(service, ctx, oportunidad):
    aceptada = _cotizacion(oportunidad, 'COT-2026-0001', 'aceptada', 5000000)
    _cotizacion(oportunidad, 'COT-2026-0002', 'borrador', 9000000)

    assert service.cotizacion_gobernante(oportunidad.id).id == aceptada.id
    resultado = service.ganar(ctx, oportunidad.id)
    assert resultado.data['proyecto']['presupuesto_total'] == 5000000.0


@pytest.mark.integration
def test_most_recent_quote_governs_without_accepted(service, ctx, oportunidad):
    _cotizacion(oportunidad, 'COT-2026-0001', 'borrador', 5000000)
    rechazada = _cotizacion(oportunidad, 'COT-2026-0002', 'rechazada', 6000000)

    assert service.cotizacion_gobernante(oportunidad.id).id == rechazada.id
    resultado = service.ganar(ctx, oportunidad.id)
    assert resultado.data['proyecto']['cotizacion_id'] == rechazada.id


@pytest.mark.integration
def test_natural_person_flow_uses_contact(service, ctx, nueva_oportunidad, contacto):
    oportunidad = nueva_oportunidad(contacto=contacto)

    resultado = service.ganar(ctx, oportunidad.id, fiscal_patch={
        'numero_documento': '52123456',
        'tipo_documento': 'CC',
        'tipo_persona': 'natural',
        'regimen_tributario': 'ordinario',
        'gran_contribuyente': 'no',
        'agente_retenedor': 'no',
    })
    assert resultado.success
    assert resultado.data['proyecto']['contacto_id'] == contacto.id
    assert resultado.data['proyecto']['empresa_id'] is None


@pytest.mark.integration
def test_win_twice_is_conflict(service, ctx, oportunidad):
    assert service.ganar(ctx, oportunidad.id).success

    resultado = service.ganar(ctx, oportunidad.id)
    assert resultado.code == 'CONFLICT'
    assert Proyecto.query.filter_by(oportunidad_id=oportunidad.id).count() == 1


@pytest.mark.integration
def test_failure_while_creating_project_rolls_back(service, ctx, oportunidad, monkeypatch):
    def _falla(cotizacion, presupuesto):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(WinService, 'lineas_presupuesto', staticmethod(_falla))

    resultado = service.ganar(ctx, oportunidad.id)
    assert resultado.code == 'UPSTREAM_ERROR'

    db.session.expire_all()
    assert db.session.get(Oportunidad, oportunidad.id).etapa == 'negociacion'
    assert Proyecto.query.count() == 0


@pytest.mark.integration
def test_win_race_after_concurrent_loss(service, ctx, oportunidad, escritura_concurrente, monkeypatch):
    gobernante = WinService.cotizacion_gobernante

    def _perdida_antes_de_confirmar(oportunidad_id):
        escritura_concurrente(
            update(Oportunidad).where(Oportunidad.id == oportunidad_id)
            .values(etapa='perdida', probabilidad=0, razon_perdida='precio')
        )
        return gobernante(oportunidad_id)

    monkeypatch.setattr(WinService, 'cotizacion_gobernante', staticmethod(_perdida_antes_de_confirmar))

    resultado = service.ganar(ctx, oportunidad.id)
    assert resultado.code == 'CONFLICT'

    db.session.expire_all()
    assert db.session.get(Oportunidad, oportunidad.id).etapa == 'perdida'
    assert Proyecto.query.count() == 0
