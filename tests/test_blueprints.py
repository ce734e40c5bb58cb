"""
Tests for the JSON blueprints (pipeline and cotizaciones).
"""
import pytest

from extensions import db
from models import Usuario


@pytest.mark.integration
def test_requires_login(client, oportunidad):
    response = client.get(f'/pipeline/oportunidades/{oportunidad.id}')
    assert response.status_code == 401
    assert response.get_json()['code'] == 'UNAUTHENTICATED'


@pytest.mark.integration
def test_user_without_workspace_is_unauthenticated(client, oportunidad):
    usuario = Usuario(email="sin-perfil@example.com", nombre="Sin Perfil")
    db.session.add(usuario)
    db.session.commit()
    with client.session_transaction() as sess:
        sess['_user_id'] = str(usuario.id)

    response = client.get(f'/pipeline/oportunidades/{oportunidad.id}')
    assert response.status_code == 401


@pytest.mark.integration
def test_create_and_advance_opportunity(authenticated_client, contacto):
    response = authenticated_client.post('/pipeline/oportunidades', json={
        'descripcion': 'Automatización de reportes',
        'contacto_id': contacto.id,
        'valor_estimado': 3000000,
    })
    assert response.status_code == 201
    oportunidad_id = response.get_json()['data']['id']

    response = authenticated_client.post(f'/pipeline/oportunidades/{oportunidad_id}/avanzar')
    assert response.status_code == 200
    assert response.get_json()['data']['etapa'] == 'contacto_inicial'


@pytest.mark.integration
def test_lose_without_reason_is_bad_request(authenticated_client, oportunidad):
    response = authenticated_client.post(f'/pipeline/oportunidades/{oportunidad.id}/perder', json={})
    assert response.status_code == 400


@pytest.mark.integration
def test_unknown_opportunity_is_not_found(authenticated_client):
    response = authenticated_client.get('/pipeline/oportunidades/9999')
    assert response.status_code == 404


@pytest.mark.integration
def test_win_needs_fiscal_data(authenticated_client, oportunidad_incompleta):
    response = authenticated_client.post(f'/pipeline/oportunidades/{oportunidad_incompleta.id}/ganar', json={})
    assert response.status_code == 422
    body = response.get_json()
    assert body['needs_fiscal'] is True
    assert body['code'] == 'NEEDS_FISCAL_DATA'
    assert 'tipo_persona' in body['details']['missing_fields']


@pytest.mark.integration
def test_win_with_fiscal_patch(authenticated_client, oportunidad_incompleta):
    response = authenticated_client.post(f'/pipeline/oportunidades/{oportunidad_incompleta.id}/ganar', json={
        'fiscal': {
            'numero_documento': '901555777',
            'tipo_documento': 'NIT',
            'tipo_persona': 'juridica',
            'regimen_tributario': 'ordinario',
            'gran_contribuyente': 'no',
            'agente_retenedor': 'yes',
        },
    })
    assert response.status_code == 201
    assert response.get_json()['data']['proyecto']['presupuesto_total'] == 10000000.0

    response = authenticated_client.post(f'/pipeline/oportunidades/{oportunidad_incompleta.id}/ganar', json={})
    assert response.status_code == 409


@pytest.mark.integration
def test_quote_lifecycle_over_http(authenticated_client, oportunidad):
    response = authenticated_client.post(f'/cotizaciones/oportunidad/{oportunidad.id}', json={
        'modo': 'detallada', 'descripcion': 'Tablero BI',
    })
    assert response.status_code == 201
    cotizacion_id = response.get_json()['data']['id']

    response = authenticated_client.post(f'/cotizaciones/{cotizacion_id}/items', json={
        'nombre': 'Consultoría',
        'rubros': [{'tipo': 'mo_propia', 'cantidad': 40, 'valor_unitario': 50000}],
    })
    assert response.status_code == 201
    item = response.get_json()['data']['item']
    assert item['subtotal'] == 2000000.0

    response = authenticated_client.post(f'/cotizaciones/{cotizacion_id}/margen', json={'margen': 20})
    assert response.get_json()['data']['valor_total'] == 2500000.0

    response = authenticated_client.get(f'/cotizaciones/{cotizacion_id}/resumen-fiscal')
    assert response.status_code == 200
    assert response.get_json()['data']['desglose']['valor_bruto'] == 2500000

    response = authenticated_client.post(f'/cotizaciones/{cotizacion_id}/enviar')
    assert response.status_code == 200

    response = authenticated_client.patch(f'/cotizaciones/rubros/{item["rubros"][0]["id"]}', json={'cantidad': 1})
    assert response.status_code == 409

    response = authenticated_client.post(f'/cotizaciones/{cotizacion_id}/aceptar')
    assert response.status_code == 200
    body = response.get_json()
    assert body['data']['cotizacion']['estado'] == 'aceptada'
    assert body['data']['ganar']['success'] is True

    response = authenticated_client.post(f'/cotizaciones/{cotizacion_id}/duplicar')
    assert response.status_code == 201
    assert response.get_json()['data']['duplicada_de'] == cotizacion_id


@pytest.mark.integration
def test_second_sent_quote_is_conflict(authenticated_client, oportunidad):
    ids = []
    for valor in (1000000, 2000000):
        response = authenticated_client.post(f'/cotizaciones/oportunidad/{oportunidad.id}', json={'valor_total': valor})
        ids.append(response.get_json()['data']['id'])

    assert authenticated_client.post(f'/cotizaciones/{ids[0]}/enviar').status_code == 200
    response = authenticated_client.post(f'/cotizaciones/{ids[1]}/enviar')
    assert response.status_code == 409

    listado = authenticated_client.get(f'/cotizaciones/oportunidad/{oportunidad.id}').get_json()['data']
    assert sorted(c['estado'] for c in listado) == ['borrador', 'enviada']


@pytest.mark.integration
def test_fiscal_summary_of_zero_quote_is_bad_request(authenticated_client, oportunidad):
    response = authenticated_client.post(f'/cotizaciones/oportunidad/{oportunidad.id}', json={'valor_total': 0})
    cotizacion_id = response.get_json()['data']['id']

    response = authenticated_client.get(f'/cotizaciones/{cotizacion_id}/resumen-fiscal')
    assert response.status_code == 400
