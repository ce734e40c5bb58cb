"""
Blueprint de Pipeline - Oportunidades comerciales (JSON)
"""
from flask import Blueprint
from flask_login import login_required

from services import PipelineService
from utils import contexto_actual, datos_json, json_result

pipeline_bp = Blueprint('pipeline', __name__, url_prefix='/pipeline')

pipeline_service = PipelineService()


@pipeline_bp.route('/oportunidades', methods=['POST'])
@login_required
def crear():
    """Crea una oportunidad en la etapa inicial"""
    data = datos_json()
    resultado = pipeline_service.crear_oportunidad(
        contexto_actual(),
        descripcion=data.get('descripcion'),
        contacto_id=data.get('contacto_id'),
        empresa_id=data.get('empresa_id'),
        valor_estimado=data.get('valor_estimado'),
    )
    return json_result(resultado, status_ok=201)


@pipeline_bp.route('/oportunidades/<int:id>')
@login_required
def detalle(id):
    return json_result(pipeline_service.obtener(contexto_actual(), id))


@pipeline_bp.route('/oportunidades/<int:id>/avanzar', methods=['POST'])
@login_required
def avanzar(id):
    return json_result(pipeline_service.avanzar(contexto_actual(), id))


@pipeline_bp.route('/oportunidades/<int:id>/perder', methods=['POST'])
@login_required
def perder(id):
    data = datos_json()
    return json_result(pipeline_service.perder(contexto_actual(), id, data.get('razon')))


@pipeline_bp.route('/oportunidades/<int:id>/ganar', methods=['POST'])
@login_required
def ganar(id):
    """Cierre ganado; acepta opcionalmente 'fiscal' con los datos de la contraparte.

    Responde 422 con needs_fiscal cuando falta información fiscal.
    """
    data = datos_json()
    resultado = pipeline_service.ganar(contexto_actual(), id, fiscal_patch=data.get('fiscal'))
    return json_result(resultado, status_ok=201)
