"""
Blueprint de Cotizaciones - Cotizaciones, items y rubros (JSON)
"""
from flask import Blueprint
from flask_login import login_required

from models import ModoCotizacion
from services import QuoteService, FiscalService
from utils import contexto_actual, datos_json, json_result

cotizaciones_bp = Blueprint('cotizaciones', __name__, url_prefix='/cotizaciones')

quote_service = QuoteService()
fiscal_service = FiscalService()


@cotizaciones_bp.route('/oportunidad/<int:oportunidad_id>')
@login_required
def lista(oportunidad_id):
    return json_result(quote_service.listar_por_oportunidad(contexto_actual(), oportunidad_id))


@cotizaciones_bp.route('/oportunidad/<int:oportunidad_id>', methods=['POST'])
@login_required
def crear(oportunidad_id):
    """Crea una cotización flash (por defecto) o detallada"""
    data = datos_json()
    ctx = contexto_actual()
    if data.get('modo') == ModoCotizacion.DETALLADA.value:
        resultado = quote_service.crear_detallada(
            ctx, oportunidad_id, descripcion=data.get('descripcion'), valor_total=data.get('valor_total')
        )
    else:
        resultado = quote_service.crear_flash(
            ctx, oportunidad_id, data.get('valor_total'), descripcion=data.get('descripcion')
        )
    return json_result(resultado, status_ok=201)


@cotizaciones_bp.route('/<int:id>')
@login_required
def detalle(id):
    return json_result(quote_service.obtener(contexto_actual(), id))


@cotizaciones_bp.route('/<int:id>', methods=['PATCH'])
@login_required
def actualizar(id):
    return json_result(quote_service.actualizar(contexto_actual(), id, datos_json()))


@cotizaciones_bp.route('/<int:id>/margen', methods=['POST'])
@login_required
def aplicar_margen(id):
    data = datos_json()
    return json_result(quote_service.aplicar_margen(contexto_actual(), id, data.get('margen')))


@cotizaciones_bp.route('/<int:id>/resumen-fiscal')
@login_required
def resumen_fiscal(id):
    return json_result(fiscal_service.resumen_cotizacion(contexto_actual(), id))


# ===== Transiciones =====

@cotizaciones_bp.route('/<int:id>/enviar', methods=['POST'])
@login_required
def enviar(id):
    return json_result(quote_service.enviar(contexto_actual(), id))


@cotizaciones_bp.route('/<int:id>/aceptar', methods=['POST'])
@login_required
def aceptar(id):
    return json_result(quote_service.aceptar(contexto_actual(), id))


@cotizaciones_bp.route('/<int:id>/rechazar', methods=['POST'])
@login_required
def rechazar(id):
    data = datos_json()
    return json_result(quote_service.rechazar(contexto_actual(), id, motivo=data.get('motivo')))


@cotizaciones_bp.route('/<int:id>/reabrir', methods=['POST'])
@login_required
def reabrir(id):
    return json_result(quote_service.reabrir(contexto_actual(), id))


@cotizaciones_bp.route('/<int:id>/duplicar', methods=['POST'])
@login_required
def duplicar(id):
    return json_result(quote_service.duplicar(contexto_actual(), id), status_ok=201)


# ===== Items y rubros =====

@cotizaciones_bp.route('/<int:id>/items', methods=['POST'])
@login_required
def agregar_item(id):
    data = datos_json()
    ctx = contexto_actual()
    if data.get('servicio_id'):
        resultado = quote_service.agregar_item_desde_servicio(ctx, id, data['servicio_id'])
    else:
        resultado = quote_service.agregar_item(ctx, id, data.get('nombre'), rubros=data.get('rubros'))
    return json_result(resultado, status_ok=201)


@cotizaciones_bp.route('/items/<int:item_id>', methods=['PATCH'])
@login_required
def renombrar_item(item_id):
    data = datos_json()
    return json_result(quote_service.renombrar_item(contexto_actual(), item_id, data.get('nombre')))


@cotizaciones_bp.route('/items/<int:item_id>', methods=['DELETE'])
@login_required
def eliminar_item(item_id):
    return json_result(quote_service.eliminar_item(contexto_actual(), item_id))


@cotizaciones_bp.route('/items/<int:item_id>/rubros', methods=['POST'])
@login_required
def agregar_rubro(item_id):
    return json_result(quote_service.agregar_rubro(contexto_actual(), item_id, datos_json()), status_ok=201)


@cotizaciones_bp.route('/rubros/<int:rubro_id>', methods=['PATCH'])
@login_required
def actualizar_rubro(rubro_id):
    return json_result(quote_service.actualizar_rubro(contexto_actual(), rubro_id, datos_json()))


@cotizaciones_bp.route('/rubros/<int:rubro_id>', methods=['DELETE'])
@login_required
def eliminar_rubro(rubro_id):
    return json_result(quote_service.eliminar_rubro(contexto_actual(), rubro_id))
