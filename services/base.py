"""
Base Service Class
==================
Clase base para todos los servicios del núcleo comercial.
Proporciona la jerarquía de excepciones, el resultado estructurado que
devuelven las operaciones públicas (``ActionResult``) y el decorador
``service_action`` que convierte cualquier falla en ese resultado.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import TypeVar, Generic, Type, Optional, List, Any, Callable
from flask import current_app, has_app_context
from extensions import db
from sqlalchemy.exc import SQLAlchemyError


T = TypeVar('T')

audit_logger = logging.getLogger('audit')


class ServiceException(Exception):
    """Excepción base para errores de servicios"""
    def __init__(self, message: str, code: str = 'SERVICE_ERROR', details: Optional[dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(ServiceException):
    """Excepción para errores de validación"""
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code='VALIDATION_ERROR', details=details)


class NotFoundException(ServiceException):
    """Excepción cuando no se encuentra un recurso"""
    def __init__(self, resource: str, identifier: Any):
        message = f"{resource} con id {identifier} no encontrado"
        super().__init__(message, code='NOT_FOUND', details={'resource': resource, 'id': identifier})


class AuthenticationException(ServiceException):
    """Excepción cuando no hay usuario o workspace resuelto"""
    def __init__(self, message: str = 'No autenticado'):
        super().__init__(message, code='UNAUTHENTICATED')


class ConflictException(ServiceException):
    """Transición ilegal o choque con el estado de otro registro"""
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code='CONFLICT', details=details)


class FiscalDataRequired(Exception):
    """Señal recuperable: la contraparte no tiene el perfil fiscal completo.

    No hereda de ServiceException porque no es un error: el llamador debe
    pedir los datos faltantes y reintentar.
    """
    code = 'NEEDS_FISCAL_DATA'

    def __init__(self, missing_fields: List[str], contraparte: Optional[dict] = None):
        self.missing_fields = list(missing_fields)
        self.contraparte = contraparte or {}
        super().__init__(f"Perfil fiscal incompleto: {', '.join(self.missing_fields)}")


@dataclass
class ActionResult:
    """Resultado de una operación pública del núcleo."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None
    details: dict = field(default_factory=dict)
    signal: Optional[str] = None

    @property
    def needs_fiscal(self) -> bool:
        return self.signal == 'needs_fiscal'

    @classmethod
    def ok(cls, data=None) -> 'ActionResult':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: ServiceException) -> 'ActionResult':
        return cls(success=False, error=exc.message, code=exc.code, details=dict(exc.details))

    def to_dict(self) -> dict:
        payload = {'success': self.success}
        if self.success:
            payload['data'] = self.data
        else:
            payload['error'] = self.error
            payload['code'] = self.code
            if self.details:
                payload['details'] = self.details
        if self.signal:
            payload[self.signal] = True
        return payload


def _logger():
    return current_app.logger if has_app_context() else logging.getLogger(__name__)


def service_action(func: Callable) -> Callable:
    """Frontera de las operaciones públicas.

    El método decorado recibe ``(self, ctx, ...)``. Se valida el contexto de
    workspace antes de cualquier lectura, y toda excepción de dominio, señal
    fiscal o falla de base de datos se convierte en ``ActionResult`` con la
    sesión revertida. Nada se propaga más allá de esta frontera.
    """

    @functools.wraps(func)
    def wrapper(self, ctx, *args, **kwargs):
        nombre = f"{self.__class__.__name__}.{func.__name__}"
        if ctx is None or not getattr(ctx, 'workspace_id', None):
            return ActionResult.fail(AuthenticationException())
        try:
            result = func(self, ctx, *args, **kwargs)
        except FiscalDataRequired as signal:
            db.session.rollback()
            _logger().info(f"[{nombre}] {signal}")
            return ActionResult(
                success=False,
                error=str(signal),
                code=FiscalDataRequired.code,
                details={'missing_fields': signal.missing_fields, 'contraparte': signal.contraparte},
                signal='needs_fiscal',
            )
        except ServiceException as exc:
            db.session.rollback()
            _logger().warning(f"[{nombre}] {exc.code}: {exc.message}")
            return ActionResult.fail(exc)
        except SQLAlchemyError as exc:
            db.session.rollback()
            _logger().error(f"[{nombre}] Error de base de datos: {exc}")
            return ActionResult(success=False, error=str(exc), code='UPSTREAM_ERROR')
        if isinstance(result, ActionResult):
            return result
        return ActionResult.ok(result)

    return wrapper


class BaseService(Generic[T]):
    """
    Servicio base con acceso a registros del workspace.

    Los servicios específicos deben heredar de esta clase y definir:
    - model_class: La clase del modelo SQLAlchemy principal
    """

    model_class: Type[T] = None

    def __init__(self):
        if self.model_class is None:
            raise NotImplementedError("model_class debe estar definido en la subclase")

    # ===== Lecturas =====

    def get_by_id(self, id: int) -> Optional[T]:
        """Obtiene un registro por ID"""
        return db.session.get(self.model_class, id)

    def get_by_id_or_fail(self, id: int, workspace_id: Optional[int] = None) -> T:
        """Obtiene un registro por ID (del workspace si se indica) o lanza excepción"""
        instance = self.get_by_id(id)
        if not instance or (workspace_id is not None and instance.workspace_id != workspace_id):
            raise NotFoundException(self.model_class.__name__, id)
        return instance

    def _get_scoped(self, model, id: int, workspace_id: int):
        """Como get_by_id_or_fail pero para un modelo distinto al principal"""
        instance = db.session.get(model, id) if id is not None else None
        if not instance or instance.workspace_id != workspace_id:
            raise NotFoundException(model.__name__, id)
        return instance

    # ===== Transaction Management =====

    def commit(self):
        """Commit explícito de la sesión. Las fallas las maneja service_action."""
        db.session.commit()

    def rollback(self):
        """Rollback explícito de la sesión"""
        db.session.rollback()

    def flush(self):
        """Flush de la sesión sin commit"""
        db.session.flush()

    # ===== Logging Helpers =====

    def _log_info(self, message: str):
        """Log de información"""
        _logger().info(f"[{self.__class__.__name__}] {message}")

    def _log_error(self, message: str):
        """Log de error"""
        _logger().error(f"[{self.__class__.__name__}] {message}")

    def _log_warning(self, message: str):
        """Log de advertencia"""
        _logger().warning(f"[{self.__class__.__name__}] {message}")

    def _log_debug(self, message: str):
        """Log de debug"""
        _logger().debug(f"[{self.__class__.__name__}] {message}")

    def _audit(self, ctx, message: str):
        """Registro de auditoría de transiciones de estado"""
        audit_logger.info(
            f"workspace={ctx.workspace_id} user={getattr(ctx, 'user_id', None)} "
            f"[{self.__class__.__name__}] {message}"
        )
