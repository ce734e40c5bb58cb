"""
Utils package: helpers compartidos por los blueprints JSON
"""

from flask import jsonify, request
from flask_login import current_user

from services.workspace import try_resolve_workspace


# Código de resultado → status HTTP
HTTP_STATUS_POR_CODIGO = {
    'UNAUTHENTICATED': 401,
    'NOT_FOUND': 404,
    'CONFLICT': 409,
    'VALIDATION_ERROR': 400,
    'NEEDS_FISCAL_DATA': 422,
    'UPSTREAM_ERROR': 502,
}


def contexto_actual():
    """WorkspaceContext del usuario autenticado, o None."""
    return try_resolve_workspace(current_user)


def datos_json():
    """Cuerpo JSON de la petición; dict vacío si no viene."""
    return request.get_json(silent=True) or {}


def json_result(resultado, status_ok=200):
    """Convierte un ActionResult en respuesta JSON con su status HTTP."""
    if resultado.success:
        return jsonify(resultado.to_dict()), status_ok
    return jsonify(resultado.to_dict()), HTTP_STATUS_POR_CODIGO.get(resultado.code, 500)

