"""
Services Package
================
Capa de servicios del núcleo comercial: Oportunidad → Cotización → Proyecto.

Los servicios encapsulan la lógica de negocio; cada operación pública recibe
un ``WorkspaceContext`` y devuelve un ``ActionResult``.

Estructura:
-----------
- base: Clase base, excepciones, ActionResult y service_action
- workspace: Resolución del workspace del usuario
- fiscal: Motor de IVA y retenciones (funciones puras)
- calculation: Agregación de items y rubros
- quote_state / pipeline_state: Máquinas de estado
- quote_service: Cotizaciones, items, rubros y transiciones
- pipeline_service: Oportunidades
- win_service: Oportunidad ganada → Proyecto
- fiscal_service: Resumen fiscal de cotizaciones

Uso:
----
    from services import QuoteService, resolve_workspace

    ctx = resolve_workspace(current_user)
    resultado = QuoteService().enviar(ctx, cotizacion_id=1)
    if not resultado.success:
        ...
"""

# Base service and exceptions
from services.base import (
    ActionResult,
    BaseService,
    ServiceException,
    ValidationException,
    NotFoundException,
    AuthenticationException,
    ConflictException,
    FiscalDataRequired,
    service_action,
)
from services.workspace import WorkspaceContext, resolve_workspace, try_resolve_workspace

# Domain services
from services.quote_service import QuoteService
from services.pipeline_service import PipelineService
from services.win_service import WinService
from services.fiscal_service import FiscalService


__all__ = [
    # Base classes
    'ActionResult',
    'BaseService',
    'service_action',
    'WorkspaceContext',
    'resolve_workspace',
    'try_resolve_workspace',
    # Exceptions
    'ServiceException',
    'ValidationException',
    'NotFoundException',
    'AuthenticationException',
    'ConflictException',
    'FiscalDataRequired',
    # Services
    'QuoteService',
    'PipelineService',
    'WinService',
    'FiscalService',
]
