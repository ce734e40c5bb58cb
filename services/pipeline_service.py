"""
Pipeline Service - Oportunidades comerciales
============================================

Gestiona el avance de oportunidades por el embudo:
- Creación en la etapa inicial
- Avance de exactamente una etapa
- Cierre perdido con razón obligatoria
- Cierre ganado (delegado en WinService)

Cada movimiento registra la última acción y su fecha. Los cambios de etapa
usan un UPDATE condicionado a la etapa leída, de modo que dos movimientos
concurrentes no se pisan.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import update

from extensions import db
from models import Oportunidad, Empresa, Contacto, EtapaOportunidad
from services.base import (
    BaseService,
    ConflictException,
    ValidationException,
    service_action,
)
from services.patches import decimal_valido
from services.pipeline_state import (
    ETAPA_INICIAL,
    ETAPAS_ACTIVAS,
    ETIQUETAS,
    es_terminal,
    probabilidad,
    razon_perdida_valida,
    siguiente_etapa,
)
from services.win_service import WinService
from models.enums import valores, RazonPerdida


class PipelineService(BaseService[Oportunidad]):
    """Servicio de oportunidades del pipeline."""

    model_class = Oportunidad

    @service_action
    def crear_oportunidad(
        self,
        ctx,
        descripcion: str,
        contacto_id: Optional[int] = None,
        empresa_id: Optional[int] = None,
        valor_estimado=None,
        fecha_cierre_estimada=None,
    ) -> Dict[str, Any]:
        """
        Crea una oportunidad en la etapa inicial.

        Args:
            ctx: WorkspaceContext
            descripcion: Descripción del negocio (será el nombre del proyecto)
            contacto_id: Contacto que origina la oportunidad
            empresa_id: Empresa contraparte (opcional en el flujo persona natural)
            valor_estimado: Valor esperado del negocio

        Raises:
            ValidationException: Si falta la descripción o no hay contacto ni empresa
            NotFoundException: Si el contacto o la empresa no son del workspace
        """
        if not descripcion or not descripcion.strip():
            raise ValidationException("La descripción de la oportunidad es requerida")
        if contacto_id is None and empresa_id is None:
            raise ValidationException("La oportunidad necesita un contacto o una empresa")
        if contacto_id is not None:
            self._get_scoped(Contacto, contacto_id, ctx.workspace_id)
        if empresa_id is not None:
            self._get_scoped(Empresa, empresa_id, ctx.workspace_id)

        ahora = datetime.utcnow()
        oportunidad = Oportunidad(
            workspace_id=ctx.workspace_id,
            contacto_id=contacto_id,
            empresa_id=empresa_id,
            descripcion=descripcion.strip(),
            valor_estimado=decimal_valido('valor_estimado', valor_estimado) or Decimal('0'),
            etapa=ETAPA_INICIAL.value,
            probabilidad=probabilidad(ETAPA_INICIAL),
            fecha_cierre_estimada=fecha_cierre_estimada,
            ultima_accion='Oportunidad creada',
            ultima_accion_fecha=ahora,
        )
        db.session.add(oportunidad)
        self.commit()
        self._log_info(f"Oportunidad {oportunidad.id} creada")
        return oportunidad.to_dict()

    @service_action
    def obtener(self, ctx, oportunidad_id: int) -> Dict[str, Any]:
        oportunidad = self.get_by_id_or_fail(oportunidad_id, ctx.workspace_id)
        data = oportunidad.to_dict()
        data['proyecto_id'] = oportunidad.proyecto.id if oportunidad.proyecto else None
        return data

    @service_action
    def avanzar(self, ctx, oportunidad_id: int) -> Dict[str, Any]:
        """
        Avanza la oportunidad exactamente una etapa.

        Raises:
            ConflictException: Si está en una etapa terminal o en negociación
                               (desde ahí solo se gana o se pierde)
        """
        oportunidad = self.get_by_id_or_fail(oportunidad_id, ctx.workspace_id)
        if es_terminal(oportunidad.etapa):
            raise ConflictException(
                f"La oportunidad ya está {oportunidad.etapa}",
                details={'oportunidad_id': oportunidad.id, 'etapa': oportunidad.etapa},
            )
        destino = siguiente_etapa(oportunidad.etapa)
        if destino is None:
            raise ConflictException(
                "Desde negociación la oportunidad solo puede ganarse o perderse",
                details={'oportunidad_id': oportunidad.id, 'etapa': oportunidad.etapa},
            )

        desde = oportunidad.etapa
        self._mover(ctx, oportunidad, [desde], destino, f"Movida a {ETIQUETAS[destino]}")
        self._audit(ctx, f"oportunidad {oportunidad.id} {desde} → {destino.value}")
        return oportunidad.to_dict()

    @service_action
    def perder(self, ctx, oportunidad_id: int, razon: Optional[str]) -> Dict[str, Any]:
        """
        Marca la oportunidad como perdida desde cualquier etapa activa.

        Raises:
            ValidationException: Si la razón falta o no pertenece al catálogo
            ConflictException: Si la oportunidad ya está ganada o perdida
        """
        razon_valida = razon_perdida_valida(razon)
        if razon_valida is None:
            raise ValidationException(
                "Indica por qué se perdió la oportunidad",
                details={'razon': razon, 'permitidas': valores(RazonPerdida)},
            )
        oportunidad = self.get_by_id_or_fail(oportunidad_id, ctx.workspace_id)
        if es_terminal(oportunidad.etapa):
            raise ConflictException(
                f"La oportunidad ya está {oportunidad.etapa}",
                details={'oportunidad_id': oportunidad.id, 'etapa': oportunidad.etapa},
            )

        self._mover(
            ctx, oportunidad,
            [etapa.value for etapa in ETAPAS_ACTIVAS],
            EtapaOportunidad.PERDIDA,
            'Marcada como perdida',
            razon_perdida=razon_valida.value,
        )
        self._audit(ctx, f"oportunidad {oportunidad.id} perdida ({razon_valida.value})")
        return oportunidad.to_dict()

    @service_action
    def ganar(self, ctx, oportunidad_id: int, fiscal_patch=None):
        """Cierre ganado; ver WinService.ganar."""
        return WinService().ganar(ctx, oportunidad_id, fiscal_patch=fiscal_patch)

    def _mover(self, ctx, oportunidad: Oportunidad, desde, destino: EtapaOportunidad,
               accion: str, **extra) -> None:
        ahora = datetime.utcnow()
        resultado = db.session.execute(
            update(Oportunidad)
            .where(
                Oportunidad.id == oportunidad.id,
                Oportunidad.workspace_id == ctx.workspace_id,
                Oportunidad.etapa.in_(list(desde)),
            )
            .values(
                etapa=destino.value,
                probabilidad=probabilidad(destino),
                ultima_accion=accion,
                ultima_accion_fecha=ahora,
                fecha_modificacion=ahora,
                **extra,
            )
        )
        if resultado.rowcount == 0:
            raise ConflictException(
                "La oportunidad cambió de etapa mientras se procesaba",
                details={'oportunidad_id': oportunidad.id},
            )
        self.commit()
