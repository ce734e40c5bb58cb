"""Resolución del workspace del usuario autenticado."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from services.base import AuthenticationException


@dataclass(frozen=True)
class WorkspaceContext:
    """Contexto explícito que recibe toda operación del núcleo."""

    workspace_id: int
    user_id: Optional[int] = None


def resolve_workspace(usuario) -> WorkspaceContext:
    """Devuelve el contexto del usuario o lanza AuthenticationException.

    ``usuario`` puede ser ``current_user`` de Flask-Login; un usuario anónimo
    o sin workspace asignado no puede operar sobre el núcleo.
    """
    if usuario is None or not getattr(usuario, 'is_authenticated', False):
        raise AuthenticationException('No autenticado')

    workspace_id = getattr(usuario, 'workspace_id', None)
    if not workspace_id:
        raise AuthenticationException('Sin perfil')

    return WorkspaceContext(workspace_id=workspace_id, user_id=getattr(usuario, 'id', None))


def try_resolve_workspace(usuario) -> Optional[WorkspaceContext]:
    """Variante sin excepción: None cuando no hay workspace resoluble."""
    try:
        return resolve_workspace(usuario)
    except AuthenticationException:
        return None
